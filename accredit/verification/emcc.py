"""EMCC verification by EIA reference and by directory search URL."""

from __future__ import annotations

import logging

from accredit.cache import CacheKey, EmccKey
from accredit.directory import emcc_name_search_url, emcc_reference_search_url
from accredit.errors import ConsistencyError, FailureCode, NotFoundError
from accredit.extraction import extract_emcc_candidates
from accredit.matching import EMCC_NAME_THRESHOLD, name_similarity
from accredit.models import (
    AccreditationBody,
    ExtractedCandidate,
    MatchDetails,
    VerificationRequest,
    VerificationResult,
    VerifiedBy,
)
from accredit.validation import normalize_eia_reference, validate_eia_reference, validate_emcc_url
from accredit.verification.base import BaseVerifier

logger = logging.getLogger(__name__)


def _best_named(candidates: list[ExtractedCandidate], full_name: str) -> tuple[ExtractedCandidate, float] | None:
    scored = [(c, name_similarity(c.name, full_name)) for c in candidates if c.name]
    if not scored:
        return None
    return max(scored, key=lambda pair: pair[1])


def _levels_agree(claimed: str, found: str) -> bool:
    claimed, found = claimed.strip().lower(), found.strip().lower()
    return claimed in found or found in claimed


class EmccVerifier(BaseVerifier):
    """Verifies EMCC accreditation against the EIA awards directory.

    ``verify_by_reference`` searches the directory itself (by reference,
    then by name); ``verify_by_url`` fetches a search-result URL the coach
    copied from their own browser.
    """

    body = AccreditationBody.EMCC
    credential_label = "EIA number"

    def levels_agree(self, claimed: str, found: str) -> bool:
        return _levels_agree(claimed, found)

    def registered_to_other_message(self, key: CacheKey) -> str:
        return (
            f"The EIA number {key.credential_number} is registered to a different coach. "
            "Please verify you're using your own EIA number, or contact support if you "
            "believe this is an error."
        )

    # -- EMCC by reference ------------------------------------------------

    def verify_by_reference(self, request: VerificationRequest) -> VerificationResult:
        return self.run(request, self._verify_reference)

    def _verify_reference(self, request: VerificationRequest) -> VerificationResult:
        key = EmccKey(request.token)
        cached = self.check_cache(key, request)
        if cached is not None:
            return cached

        reference = validate_eia_reference(request.token)
        logger.info("EMCC live verification for %s (%s)", reference, request.coach_id)

        page = self.client.fetch_page(emcc_reference_search_url(reference))
        best = _best_named(extract_emcc_candidates(page.body, reference), request.full_name)

        if best is None:
            logger.info("No EMCC row for %s by reference, trying name search", reference)
            page = self.client.fetch_page(emcc_name_search_url(request.full_name))
            best = _best_named(extract_emcc_candidates(page.body, reference), request.full_name)

        if best is None:
            raise NotFoundError(
                f"No EMCC record found with EIA number {reference}. Please verify your EIA "
                "number is correct."
            )

        candidate, score = best
        logger.info("EMCC match %r for %r (similarity %.2f)", candidate.name, request.full_name, score)
        if score < EMCC_NAME_THRESHOLD:
            raise ConsistencyError(self.registered_to_other_message(key), FailureCode.registered_to_other)

        if request.level and candidate.level and not self.levels_agree(request.level, candidate.level):
            raise ConsistencyError(
                f'EIA {reference} shows accreditation level "{candidate.level}", but you '
                f'selected "{request.level}". Please verify your level.',
                FailureCode.level_mismatch,
            )

        details = MatchDetails(
            name=candidate.name,
            level=candidate.level,
            country=candidate.country,
            profile_url=candidate.profile_url,
        )
        self.check_duplicate(request, details)
        self.remember(request, key, details, VerifiedBy.auto)
        return VerificationResult.accept(details, 100, f"Successfully verified via EIA number {reference}")

    # -- EMCC by search URL -----------------------------------------------

    def verify_by_url(self, request: VerificationRequest) -> VerificationResult:
        return self.run(request, self._verify_url)

    def _verify_url(self, request: VerificationRequest) -> VerificationResult:
        profile_url = request.token.strip()
        reference = validate_emcc_url(profile_url)

        claim = self.registry.find_url_claim(self.body, profile_url, exclude_id=request.coach_id)
        if claim is not None:
            raise ConsistencyError(
                f"This EMCC profile URL is already registered to another coach ({claim.name}). "
                "Please contact support if this is an error.",
                FailureCode.url_already_claimed,
            )

        key = EmccKey(reference)
        cached = self.check_cache(key, request, profile_url=profile_url)
        if cached is not None:
            return cached

        logger.info("EMCC URL verification for %s (%s)", reference, request.coach_id)
        page = self.client.fetch_page(profile_url)
        best = _best_named(extract_emcc_candidates(page.body, reference), request.full_name)
        if best is None:
            raise NotFoundError(
                f"EIA number {reference} not found on the page. The search may have returned "
                "no results. Please verify the EIA number is correct."
            )

        candidate, score = best
        if score < EMCC_NAME_THRESHOLD:
            raise ConsistencyError(
                f'Name "{request.full_name}" does not match the name on the EMCC record '
                f'("{candidate.name}"). Please verify the name matches your EMCC profile exactly.',
                FailureCode.registered_to_other,
            )

        if request.level and candidate.level and not self.levels_agree(request.level, candidate.level):
            raise ConsistencyError(
                f'EIA {reference} shows accreditation level "{candidate.level}", but you '
                f'selected "{request.level}". Please verify your level.',
                FailureCode.level_mismatch,
            )

        details = MatchDetails(
            name=candidate.name,
            level=candidate.level or request.level,
            country=candidate.country,
            profile_url=profile_url,
            eia_number=reference,
        )
        self.check_duplicate(request, details)
        self.remember(request, key, details, VerifiedBy.url, full_name=request.full_name)
        return VerificationResult.accept(details, 100, "Successfully verified via EMCC profile URL")

    def review_notes(self, request: VerificationRequest, reason: str) -> str:
        token = request.token.strip()
        if not token.lower().startswith("http"):
            token = normalize_eia_reference(token)
        return (
            f"EIA: {token}, Name: {request.full_name}, "
            f"Level: {request.level or 'N/A'}, Reason: {reason}"
        )
