"""Caller identity, verification throttling and request tracing.

Every verification call can trigger a paid directory scrape, so callers are
identified (Bearer key, or hashed client IP in demo mode) and throttled per
identity with a sliding window. Identities with no request inside the window
are dropped from memory on the next sweep.
"""

import hashlib
import hmac
import logging
import threading
import time
import uuid
from collections import deque

from fastapi import Depends, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accredit.config import get_config

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

DEMO_CALLER = "demo"
REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LENGTH = 128


# ---------------------------------------------------------------------------
# Caller authentication
# ---------------------------------------------------------------------------

def require_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Return the caller's key, or ``DEMO_CALLER`` when auth is disabled.

    401 for a missing or wrong key, 500 when the server has no key configured.
    """
    cfg = get_config()
    if cfg.demo_mode:
        return DEMO_CALLER

    if not cfg.api_key:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: ACCREDIT_API_KEY is not set.",
        )

    supplied = credentials.credentials if credentials is not None else ""
    if not hmac.compare_digest(supplied.encode(), cfg.api_key.encode()):
        logger.warning("Rejected verification call with %s API key", "a wrong" if supplied else "no")
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key. Provide 'Authorization: Bearer <key>' header.",
        )
    return supplied


# ---------------------------------------------------------------------------
# Verification throttling
# ---------------------------------------------------------------------------

class SlidingWindowLimiter:
    """Per-caller request timestamps over a rolling window."""

    def __init__(self, window_seconds: float = 60.0, clock=time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def hit(self, caller: str, max_requests: int) -> None:
        """Record one call for *caller*; 429 when the window is already full."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            hits = self._hits.setdefault(caller, deque())
            self._expire(hits, now)
            if len(hits) >= max_requests:
                retry_after = max(1, int(hits[0] + self.window_seconds - now) + 1)
                logger.info("Throttled %s: %d calls in %.0fs", caller, len(hits), self.window_seconds)
                raise HTTPException(
                    status_code=429,
                    detail=f"Rate limit exceeded. Max {max_requests} verifications per {self.window_seconds:.0f}s.",
                    headers={"Retry-After": str(retry_after)},
                )
            hits.append(now)

    def tracked_callers(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._last_sweep = self._clock()

    def _expire(self, hits: deque, now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for caller in list(self._hits):
            hits = self._hits[caller]
            self._expire(hits, now)
            if not hits:
                del self._hits[caller]
        self._last_sweep = now


verify_limiter = SlidingWindowLimiter()


def caller_identity(request: Request, api_key: str) -> str:
    """Throttling identity: the key itself is never kept, only a digest of it."""
    if api_key == DEMO_CALLER:
        return f"ip:{_hash_ip(request.client.host if request.client else None)}"
    return f"key:{hashlib.sha256(api_key.encode()).hexdigest()[:16]}"


def rate_limit_verify(request: Request, api_key: str = Depends(require_api_key)) -> str:
    """Dependency for the verification routes."""
    caller = caller_identity(request, api_key)
    verify_limiter.hit(caller, max_requests=get_config().verify_rate_limit)
    return caller


# ---------------------------------------------------------------------------
# Request tracing
# ---------------------------------------------------------------------------

def _hash_ip(ip: str | None) -> str:
    """Return a one-way hash of the client IP for privacy-safe logging."""
    if not ip:
        return "unknown"
    return hashlib.sha256(ip.encode()).hexdigest()[:12]


def _request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if supplied and len(supplied) <= _MAX_REQUEST_ID_LENGTH and supplied.isprintable():
        return supplied
    return str(uuid.uuid4())


async def request_logging_middleware(request: Request, call_next):
    """Tag the request with an id (the caller's, if sent) and log its outcome."""
    request_id = _request_id(request)
    request.state.request_id = request_id
    start = time.monotonic()

    response: Response = await call_next(request)

    elapsed_ms = int((time.monotonic() - start) * 1000)
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "request_id=%s ip=%s %s %s -> %d in %dms",
        request_id,
        _hash_ip(request.client.host if request.client else None),
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
