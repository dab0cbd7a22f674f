"""HTTP access to the EMCC and ICF public directories.

Directory pages sit behind anti-bot protection, so by default every request
goes through a scraping proxy that can optionally render JavaScript.  The
client never falls back to fetching a directory directly when no proxy key
is configured; direct fetching is a separate, explicitly configured strategy.

No real HTTP calls are made in tests: ``httpx.get`` is patched.
"""

from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from accredit.config import AccreditSettings
from accredit.errors import ScrapingUnavailable, TransportError
from accredit.utils import redact_secret

logger = logging.getLogger(__name__)

EMCC_DIRECTORY_URL = "https://www.emccglobal.org/directory"
ICF_DIRECTORY_URL = "https://apps.coachingfederation.org/eweb/DynamicPage.aspx"

_DEFAULT_PROXY_URL = "http://api.scraperapi.com"
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_RENDER_TIMEOUT = 60.0
_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def emcc_reference_search_url(reference: str) -> str:
    return f"{EMCC_DIRECTORY_URL}?{urllib.parse.urlencode({'reference': reference})}"


def emcc_name_search_url(full_name: str) -> str:
    return f"{EMCC_DIRECTORY_URL}?{urllib.parse.urlencode({'search': full_name})}"


def icf_name_search_url(first_name: str, last_name: str) -> str:
    params = {
        "WebCode": "ICFDirectory",
        "Site": "ICFAppsR",
        "firstname": first_name,
        "lastname": last_name,
        "sort": "1",
    }
    return f"{ICF_DIRECTORY_URL}?{urllib.parse.urlencode(params)}"


@dataclass(frozen=True)
class FetchResult:
    status: int
    body: str
    rendered: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class DirectoryClient:
    """Fetches directory pages with a render-on-retry policy.

    Parameters
    ----------
    proxy_api_key : Scraping proxy credential.  Empty means live lookups
        are unavailable under the ``proxy`` strategy.
    strategy : ``"proxy"`` (default) or ``"direct"``.
    timeout : Budget for the plain attempt, in seconds.
    render_timeout : Budget for the retry; rendering a page remotely is slow.
    country_code : Optional proxy geo-routing hint.
    """

    def __init__(
        self,
        proxy_api_key: str = "",
        *,
        proxy_url: str = _DEFAULT_PROXY_URL,
        strategy: Literal["proxy", "direct"] = "proxy",
        timeout: float = _DEFAULT_TIMEOUT,
        render_timeout: float = _DEFAULT_RENDER_TIMEOUT,
        country_code: str | None = None,
    ) -> None:
        self.proxy_api_key = proxy_api_key
        self.proxy_url = proxy_url
        self.strategy = strategy
        self.timeout = timeout
        self.render_timeout = render_timeout
        self.country_code = country_code

    @classmethod
    def from_settings(cls, settings: AccreditSettings) -> "DirectoryClient":
        return cls(
            settings.scraper_api_key,
            proxy_url=settings.scraper_api_url,
            strategy=settings.scraping_strategy,
            timeout=settings.fetch_timeout,
            render_timeout=settings.render_timeout,
            country_code=settings.proxy_country_code,
        )

    @property
    def available(self) -> bool:
        return self.strategy == "direct" or bool(self.proxy_api_key)

    def _ensure_available(self) -> None:
        if not self.available:
            raise ScrapingUnavailable(
                "Scraping proxy key not configured. Automatic verification is not available."
            )

    def fetch(
        self,
        target_url: str,
        *,
        render: bool = False,
        timeout: float | None = None,
        country_code: str | None = None,
    ) -> FetchResult:
        """Issue a single GET for *target_url*.

        Transport failures (timeouts, connection errors) propagate as
        ``httpx.RequestError``; HTTP error statuses are returned as-is.
        """
        self._ensure_available()
        timeout = timeout if timeout is not None else self.timeout

        if self.strategy == "direct":
            resp = httpx.get(
                target_url,
                headers={"User-Agent": _BROWSER_USER_AGENT},
                timeout=timeout,
                follow_redirects=True,
            )
            return FetchResult(status=resp.status_code, body=resp.text, rendered=False)

        params: dict[str, Any] = {
            "api_key": self.proxy_api_key,
            "url": target_url,
            "render": "true" if render else "false",
        }
        country = country_code or self.country_code
        if country:
            params["country_code"] = country
        logger.debug(
            "Proxy fetch %s (render=%s, key=%s)",
            target_url, render, redact_secret(self.proxy_api_key),
        )
        resp = httpx.get(self.proxy_url, params=params, timeout=timeout)
        return FetchResult(status=resp.status_code, body=resp.text, rendered=render)

    def fetch_page(self, target_url: str, *, country_code: str | None = None) -> FetchResult:
        """Fetch with the retry policy; return a 2xx result or raise.

        The plain attempt runs first.  A 5xx status (typically anti-bot
        blocking), a timeout or a connection error triggers exactly one
        retry with rendering enabled and the longer timeout.  Any other
        error status is terminal.
        """
        self._ensure_available()
        render_retry = self.strategy == "proxy"

        try:
            result = self.fetch(target_url, render=False, country_code=country_code)
        except httpx.RequestError as exc:
            logger.warning("Directory fetch failed (attempt 1/2), retrying with rendering: %s", exc)
        else:
            if result.ok:
                return result
            if result.status < 500:
                raise TransportError(
                    f"Directory returned HTTP {result.status}", status_code=result.status
                )
            logger.warning(
                "Directory returned HTTP %d (attempt 1/2), retrying with rendering", result.status
            )

        try:
            result = self.fetch(
                target_url,
                render=render_retry,
                timeout=self.render_timeout,
                country_code=country_code,
            )
        except httpx.RequestError as exc:
            logger.warning("Directory fetch failed (attempt 2/2): %s", exc)
            raise TransportError(f"Directory unreachable: {exc}") from exc

        if not result.ok:
            logger.warning("Directory returned HTTP %d (attempt 2/2)", result.status)
            raise TransportError(
                f"Directory returned HTTP {result.status}", status_code=result.status
            )
        return result
