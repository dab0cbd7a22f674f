"""Shared verification flow.

Every entry point runs through :meth:`BaseVerifier.run`, which turns the
error taxonomy into a verdict and records the outcome on the coach:

    FormatError / ConsistencyError / NotFoundError  -> rejected
    TransportError / ConfigurationError / StorageError -> pending manual review
    anything else                                   -> logged, pending manual review

No exception escapes ``run``.
"""

from __future__ import annotations

import logging
from typing import Callable

from accredit.cache import CacheKey, CredentialCache
from accredit.directory import DirectoryClient
from accredit.errors import (
    ConfigurationError,
    ConsistencyError,
    FailureCode,
    FormatError,
    NotFoundError,
    StorageError,
    TransportError,
)
from accredit.matching import CACHE_NAME_THRESHOLD, name_similarity, surname
from accredit.models import (
    AccreditationBody,
    MatchDetails,
    VerificationRequest,
    VerificationResult,
    VerifiedBy,
    VerifiedCredential,
)
from accredit.registry import CoachRegistry

logger = logging.getLogger(__name__)

PENDING_REVIEW_REASON = (
    "Your credentials have been submitted and are pending manual verification. "
    "You can complete your onboarding, and we'll verify your credentials within 24 hours."
)
CACHE_HIT_REASON = "Verified from internal database (previously verified)"

Attempt = Callable[[VerificationRequest], VerificationResult]


class BaseVerifier:
    """Common plumbing for the per-body verifiers."""

    body: AccreditationBody
    # Used in user-facing messages, e.g. "EIA number" or "ICF credential"
    credential_label = "credential"

    def __init__(self, client: DirectoryClient, cache: CredentialCache, registry: CoachRegistry) -> None:
        self.client = client
        self.cache = cache
        self.registry = registry

    # -- Verdict boundary -------------------------------------------------

    def run(self, request: VerificationRequest, attempt: Attempt) -> VerificationResult:
        detail: str | None = None
        try:
            result = attempt(request)
        except (FormatError, ConsistencyError, NotFoundError) as exc:
            logger.info("%s verification rejected for %s: %s", self.body.value, request.coach_id, exc.code.value)
            result = VerificationResult.reject(exc.code, exc.message)
        except (TransportError, ConfigurationError, StorageError) as exc:
            logger.warning("%s verification deferred for %s: %s", self.body.value, request.coach_id, exc.message)
            detail = exc.message
            result = VerificationResult.pending(exc.code, PENDING_REVIEW_REASON)
        except Exception as exc:
            logger.exception("Unexpected error verifying %s coach %s", self.body.value, request.coach_id)
            detail = f"Unexpected error: {exc}"
            result = VerificationResult.pending(FailureCode.internal_error, PENDING_REVIEW_REASON)

        try:
            self._record_outcome(request, result, detail)
        except StorageError as exc:
            logger.error("Failed to record verification outcome for %s: %s", request.coach_id, exc)
        return result

    def _record_outcome(self, request: VerificationRequest, result: VerificationResult, detail: str | None) -> None:
        if result.verified:
            self.registry.record_verified(request, result.match_details)
        elif result.pending_manual_review:
            self.registry.record_pending(request, self.review_notes(request, detail or result.reason or ""))
        else:
            self.registry.record_rejected(request, result.reason)

    def review_notes(self, request: VerificationRequest, reason: str) -> str:
        return (
            f"{self.body.value}: {request.token or 'N/A'}, Name: {request.full_name}, "
            f"Level: {request.level or 'N/A'}, Reason: {reason}"
        )

    # -- Steps shared by the entry points ---------------------------------

    def check_cache(
        self,
        key: CacheKey,
        request: VerificationRequest,
        *,
        profile_url: str | None = None,
    ) -> VerificationResult | None:
        """Verdict from a cached credential, or None on a miss."""
        cached = self.cache.lookup(key)
        if cached is None:
            return None

        score = name_similarity(cached.full_name, request.full_name)
        if score < CACHE_NAME_THRESHOLD:
            logger.warning(
                "Cached %s %s belongs to %r, not %r (%.2f)",
                key.body.value, key.credential_number, cached.full_name, request.full_name, score,
            )
            raise ConsistencyError(self.registered_to_other_message(key), FailureCode.registered_to_other)

        if request.level and cached.level and not self.levels_agree(request.level, cached.level):
            logger.info(
                "Cached %s %s is at level %r, claim is %r; checking the directory",
                key.body.value, key.credential_number, cached.level, request.level,
            )
            return None

        details = MatchDetails(
            name=cached.full_name,
            level=cached.level,
            country=cached.country,
            location=cached.location,
            profile_url=profile_url or cached.profile_url,
        )
        return VerificationResult.accept(details, 100, CACHE_HIT_REASON)

    def levels_agree(self, claimed: str, found: str) -> bool:
        return claimed.strip().upper() == found.strip().upper()

    def registered_to_other_message(self, key: CacheKey) -> str:
        return (
            f"This {self.credential_label} is registered to a different coach. Please verify "
            "you're using your own details, or contact support if you believe this is an error."
        )

    def check_duplicate(self, request: VerificationRequest, details: MatchDetails) -> None:
        """Refuse a credential another verified coach already holds."""
        existing = self.registry.find_duplicate_claim(
            self.body,
            details.level,
            surname(request.full_name),
            exclude_id=request.coach_id,
        )
        if existing is not None:
            logger.warning(
                "Duplicate %s claim: %s matches verified coach %s",
                self.body.value, request.coach_id, existing.coach_id,
            )
            raise ConsistencyError(
                f"This {self.credential_label} appears to be already verified by another coach "
                f"in our system ({existing.name}). If you believe this is an error, please "
                "contact support.",
                FailureCode.duplicate_claim,
            )

    def remember(
        self,
        request: VerificationRequest,
        key: CacheKey,
        details: MatchDetails,
        verified_by: VerifiedBy,
        *,
        full_name: str | None = None,
    ) -> None:
        """Cache a live success; nothing is stored for temporary coaches."""
        if request.is_temporary:
            return
        self.cache.insert(VerifiedCredential(
            body=self.body,
            credential_number=key.credential_number,
            full_name=full_name or details.name,
            level=details.level,
            country=details.country,
            location=details.location,
            profile_url=details.profile_url,
            verified_by=verified_by,
        ))
