"""Coach verification state and cross-coach claim checks."""

from __future__ import annotations

import logging

from accredit.models import (
    AccreditationBody,
    CoachRecord,
    MatchDetails,
    VerificationRequest,
    VerificationStatus,
)
from accredit.storage.base import Storage
from accredit.utils import utcnow

logger = logging.getLogger(__name__)


class CoachRegistry:
    """Reads and writes the verification fields of coach records.

    Writes for ``temp_`` coaches are skipped: those accounts do not exist
    yet, so the verdict is only returned to the caller.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def _load(self, request: VerificationRequest) -> CoachRecord:
        record = self._storage.get_coach(request.coach_id)
        if record is None:
            record = CoachRecord(coach_id=request.coach_id, name=request.full_name)
        record.name = request.full_name
        record.body = request.body
        return record

    def record_verified(
        self,
        request: VerificationRequest,
        details: MatchDetails,
        *,
        profile_url: str | None = None,
    ) -> None:
        if request.is_temporary:
            return
        record = self._load(request)
        record.verified = True
        record.verification_status = VerificationStatus.verified
        record.verified_at = utcnow()
        record.level = details.level or request.level
        record.profile_url = profile_url or details.profile_url
        record.location = request.location or details.location or details.country
        record.notes = None
        self._storage.save_coach(record)
        logger.info("Coach %s marked verified (%s)", request.coach_id, request.body.value)

    def record_pending(self, request: VerificationRequest, notes: str) -> None:
        if request.is_temporary:
            return
        record = self._load(request)
        record.verified = False
        record.verification_status = VerificationStatus.pending_review
        record.notes = notes
        self._storage.save_coach(record)
        logger.info("Coach %s queued for manual review (%s)", request.coach_id, request.body.value)

    def record_rejected(self, request: VerificationRequest, notes: str | None = None) -> None:
        if request.is_temporary:
            return
        record = self._load(request)
        record.verified = False
        record.verification_status = VerificationStatus.rejected
        record.notes = notes
        self._storage.save_coach(record)
        logger.info("Coach %s verification rejected (%s)", request.coach_id, request.body.value)

    def find_duplicate_claim(
        self,
        body: AccreditationBody,
        level: str | None,
        surname: str,
        *,
        exclude_id: str,
    ) -> CoachRecord | None:
        """Another verified coach with the same level and a matching surname."""
        if not surname or not level:
            return None
        matches = self._storage.find_coaches(
            body,
            verified=True,
            level=level,
            name_contains=surname,
            exclude_id=exclude_id,
        )
        return matches[0] if matches else None

    def find_url_claim(self, body: AccreditationBody, profile_url: str, *, exclude_id: str) -> CoachRecord | None:
        matches = self._storage.find_coaches(body, profile_url=profile_url, exclude_id=exclude_id)
        return matches[0] if matches else None
