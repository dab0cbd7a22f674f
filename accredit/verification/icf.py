"""ICF verification by directory search URL and by name.

ICF publishes no per-person reference number, so a name match alone is never
conclusive.  The URL path blends name, location and credential level into a
single score; the name path boosts name similarity when the level matches.
Scores in the ambiguous band go to manual review instead of being rejected.
"""

from __future__ import annotations

import logging

from accredit.cache import IcfKey
from accredit.directory import icf_name_search_url
from accredit.errors import ConsistencyError, FailureCode, IdentifierError, NotFoundError
from accredit.extraction import extract_icf_candidates, is_no_results_page
from accredit.extraction.common import parse_html
from accredit.matching import (
    ICF_ACCEPT_THRESHOLD,
    ICF_CANDIDATE_THRESHOLD,
    name_similarity,
    split_name,
)
from accredit.models import (
    AccreditationBody,
    ExtractedCandidate,
    MatchDetails,
    VerificationRequest,
    VerificationResult,
    VerifiedBy,
)
from accredit.validation import validate_icf_url, validate_name_matches_url
from accredit.verification.base import BaseVerifier

logger = logging.getLogger(__name__)

NAME_WEIGHT = 0.6
LOCATION_WEIGHT = 0.3
LEVEL_WEIGHT = 0.1
# Level score when the page shows no credential for the candidate
UNKNOWN_LEVEL_SCORE = 0.5
# Name-only results never reach full confidence
NAME_PATH_LEVEL_BOOST = 0.05
NAME_PATH_CAP = 0.95

_ICF_PROXY_COUNTRY = "us"

AMBIGUOUS_REASON = (
    "Your profile requires manual verification. We found your name but need to confirm "
    "additional details. Our team will review within 24 hours."
)


def location_parts(location: str) -> list[str]:
    """Comma-separated location components worth searching for."""
    parts = [p.strip().lower() for p in location.split(",")]
    useful = [p for p in parts if len(p) > 2]
    if not useful and location.strip():
        return [location.strip().lower()]
    return useful


def location_score(location: str, text: str) -> float:
    """Fraction of the location components present in *text*."""
    parts = location_parts(location)
    if not parts:
        return 0.0
    haystack = text.lower()
    return sum(1 for part in parts if part in haystack) / len(parts)


def _level_score(candidate: ExtractedCandidate, claimed: str | None) -> float:
    if candidate.level is None or not claimed:
        return UNKNOWN_LEVEL_SCORE
    return 1.0 if candidate.level == claimed else 0.0


def _low_similarity(best: tuple[ExtractedCandidate, float] | None, full_name: str) -> NotFoundError:
    if best is None:
        return NotFoundError(
            f'Name "{full_name}" not found in the search results. Please verify the name '
            "matches your ICF profile exactly."
        )
    candidate, score = best
    return NotFoundError(
        "Found coaches in ICF directory, but none match your name closely enough. "
        f'Best match was "{candidate.name}" ({round(score * 100)}% similar).',
        FailureCode.low_similarity,
    )


class IcfVerifier(BaseVerifier):
    """Verifies ICF credentials against the ICF member directory."""

    body = AccreditationBody.ICF
    credential_label = "ICF credential"

    def _check_level(self, candidate: ExtractedCandidate, claimed: str | None) -> None:
        if claimed and candidate.level and candidate.level != claimed:
            raise ConsistencyError(
                f'Found "{candidate.name}" in ICF directory with credential '
                f'"{candidate.level}", but you selected "{claimed}". Please verify your '
                "credential level.",
                FailureCode.level_mismatch,
            )

    def _band(
        self,
        request: VerificationRequest,
        key: IcfKey,
        blended: float,
        details: MatchDetails,
        verified_by: VerifiedBy,
        reason: str,
    ) -> VerificationResult:
        confidence = round(blended * 100)
        if blended >= ICF_ACCEPT_THRESHOLD:
            self.check_duplicate(request, details)
            self.remember(request, key, details, verified_by, full_name=request.full_name)
            return VerificationResult.accept(details, confidence, reason)
        if blended >= ICF_CANDIDATE_THRESHOLD:
            logger.info("ICF match for %s is ambiguous (%.2f)", request.coach_id, blended)
            return VerificationResult.pending(FailureCode.ambiguous_match, AMBIGUOUS_REASON, confidence)
        return VerificationResult.reject(
            FailureCode.low_similarity,
            f"Match confidence ({confidence}%) below threshold. Please ensure the search "
            "shows your complete profile with name, location, and credential level visible.",
            confidence,
        )

    # -- ICF by search URL ------------------------------------------------

    def verify_by_url(self, request: VerificationRequest) -> VerificationResult:
        return self.run(request, self._verify_url)

    def _verify_url(self, request: VerificationRequest) -> VerificationResult:
        profile_url = request.token.strip()
        first, last = validate_icf_url(profile_url)
        validate_name_matches_url(request.full_name, first, last)

        location = (request.location or "").strip()
        claimed_level = (request.level or "").strip().upper() or None
        key = IcfKey(request.full_name, location)
        cached = self.check_cache(key, request, profile_url=profile_url)
        if cached is not None:
            return cached

        logger.info("ICF URL verification for %s (%s)", request.full_name, request.coach_id)
        page = self.client.fetch_page(profile_url)
        if is_no_results_page(page.body):
            raise NotFoundError(
                "The search returned no results. Please verify your name is spelled exactly "
                "as it appears in the ICF directory."
            )

        candidates = extract_icf_candidates(page.body, request.full_name, claimed_level)
        scored = [(c, name_similarity(c.name, request.full_name)) for c in candidates if c.name]
        eligible = [(c, s) for c, s in scored if s >= ICF_CANDIDATE_THRESHOLD]
        if not eligible:
            raise _low_similarity(max(scored, key=lambda p: p[1]) if scored else None, request.full_name)

        soup = parse_html(page.body)
        page_text = soup.get_text(" ", strip=True) if soup is not None else page.body

        def loc(candidate: ExtractedCandidate) -> float:
            # Only a candidate with no row of its own is scored against the whole page
            if not candidate.context:
                return location_score(location, page_text)
            return location_score(location, candidate.context)

        def blend(pair: tuple[ExtractedCandidate, float]) -> float:
            candidate, name_score = pair
            return (
                NAME_WEIGHT * name_score
                + LOCATION_WEIGHT * loc(candidate)
                + LEVEL_WEIGHT * _level_score(candidate, claimed_level)
            )

        best = max(eligible, key=blend)
        candidate = best[0]
        self._check_level(candidate, claimed_level)

        if loc(candidate) == 0:
            raise ConsistencyError(
                f'Location "{location}" not found in the results. Please verify your location '
                "matches your ICF profile exactly (City, Country). If multiple coaches have "
                "your name, location helps us identify the correct profile.",
                FailureCode.location_mismatch,
            )

        blended = blend(best)
        logger.info("ICF candidate %r scored %.2f", candidate.name, blended)
        details = MatchDetails(
            name=candidate.name,
            level=candidate.level or claimed_level,
            location=location or None,
            profile_url=profile_url,
        )
        return self._band(
            request, key, blended, details, VerifiedBy.url,
            "Successfully verified via ICF directory (name, location and credential level)",
        )

    # -- ICF by name ------------------------------------------------------

    def verify_by_name(self, request: VerificationRequest) -> VerificationResult:
        return self.run(request, self._verify_name)

    def _verify_name(self, request: VerificationRequest) -> VerificationResult:
        level = (request.level or "").strip().upper() or None
        key = IcfKey(request.full_name, level or "")
        cached = self.check_cache(key, request)
        if cached is not None:
            return cached

        first, last = split_name(request.full_name)
        if not first or not last:
            raise IdentifierError(
                "Please provide both your first name and last name for accurate verification.",
                FailureCode.incomplete_name,
            )

        logger.info("ICF name search for %s %s (%s)", first, last, request.coach_id)
        page = self.client.fetch_page(icf_name_search_url(first, last), country_code=_ICF_PROXY_COUNTRY)
        not_found = NotFoundError(
            f"No {level or 'ICF'} credential found for {request.full_name} in ICF directory. "
            "Please verify your name and credential level."
        )
        if is_no_results_page(page.body):
            raise not_found

        named = [c for c in extract_icf_candidates(page.body, request.full_name, level) if c.name]
        if not named:
            raise not_found

        preferred = [c for c in named if level and c.level == level] or named
        best = max(((c, name_similarity(c.name, request.full_name)) for c in preferred), key=lambda p: p[1])
        candidate, score = best
        if score < ICF_CANDIDATE_THRESHOLD:
            raise _low_similarity(best, request.full_name)
        self._check_level(candidate, level)

        boost = NAME_PATH_LEVEL_BOOST if level and candidate.level == level else 0.0
        blended = min(NAME_PATH_CAP, score + boost)
        details = MatchDetails(
            name=candidate.name,
            level=candidate.level or level,
            country=(request.country or "").strip() or None,
            profile_url=candidate.profile_url,
        )
        return self._band(
            request, key, blended, details, VerifiedBy.auto,
            f"Successfully verified {details.level or 'ICF'} credential for {candidate.name}",
        )

    def review_notes(self, request: VerificationRequest, reason: str) -> str:
        return (
            f"ICF: {request.full_name}, Credential: {request.level or 'N/A'}, "
            f"Location: {request.location or request.country or 'N/A'}, Reason: {reason}"
        )
