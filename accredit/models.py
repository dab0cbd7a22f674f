"""Domain objects shared by the verification pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from accredit.errors import FailureCode
from accredit.utils import utcnow

TEMP_COACH_PREFIX = "temp_"


class AccreditationBody(str, Enum):
    EMCC = "EMCC"
    ICF = "ICF"
    AC = "AC"


class VerifiedBy(str, Enum):
    """How a cached credential was first confirmed."""
    auto = "auto"
    url = "url"
    manual = "manual"


class VerificationStatus(str, Enum):
    unverified = "unverified"
    verified = "verified"
    rejected = "rejected"
    pending_review = "pending_review"


@dataclass(frozen=True)
class VerificationRequest:
    """One verification attempt.

    ``token`` is the body-specific identifier: an EIA reference for
    EMCC-by-reference, a directory search URL for the URL paths, and empty
    for ICF-by-name.
    """

    body: AccreditationBody
    coach_id: str
    full_name: str
    token: str = ""
    level: str | None = None
    location: str | None = None
    country: str | None = None

    @property
    def is_temporary(self) -> bool:
        return self.coach_id.startswith(TEMP_COACH_PREFIX)


@dataclass(frozen=True)
class VerifiedCredential:
    """Cache row binding a confirmed identity to a credential.

    ``credential_number`` is the string form of the cache key: the EIA
    reference for EMCC, ``NAME_QUALIFIER`` for ICF.
    """

    body: AccreditationBody
    credential_number: str
    full_name: str
    level: str | None = None
    country: str | None = None
    location: str | None = None
    profile_url: str | None = None
    is_active: bool = True
    verified_by: VerifiedBy = VerifiedBy.auto
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "accreditation_body": self.body.value,
            "credential_number": self.credential_number,
            "full_name": self.full_name,
            "accreditation_level": self.level,
            "country": self.country,
            "location": self.location,
            "profile_url": self.profile_url,
            "is_active": self.is_active,
            "verified_by": self.verified_by.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerifiedCredential":
        created = data.get("created_at")
        return cls(
            body=AccreditationBody(data["accreditation_body"]),
            credential_number=data["credential_number"],
            full_name=data["full_name"],
            level=data.get("accreditation_level"),
            country=data.get("country"),
            location=data.get("location"),
            profile_url=data.get("profile_url"),
            is_active=data.get("is_active", True),
            verified_by=VerifiedBy(data.get("verified_by", "auto")),
            created_at=datetime.fromisoformat(created) if created else utcnow(),
        )


@dataclass(frozen=True)
class MatchDetails:
    name: str
    level: str | None = None
    country: str | None = None
    profile_url: str | None = None
    location: str | None = None
    eia_number: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {
            "name": self.name,
            "level": self.level,
            "country": self.country,
            "profileUrl": self.profile_url,
            "location": self.location,
            "eiaNumber": self.eia_number,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class VerificationResult:
    """Terminal verdict of one attempt.

    verified=True always carries match_details; pending_manual_review=True
    is never verified.
    """

    verified: bool
    confidence: int = 0
    match_details: MatchDetails | None = None
    reason: str | None = None
    pending_manual_review: bool = False
    failure: FailureCode | None = None

    def __post_init__(self) -> None:
        if self.verified and self.match_details is None:
            raise ValueError("verified result requires match details")
        if self.verified and self.pending_manual_review:
            raise ValueError("verified result cannot be pending manual review")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence out of range: {self.confidence}")

    @classmethod
    def accept(cls, details: MatchDetails, confidence: int, reason: str) -> "VerificationResult":
        return cls(verified=True, confidence=confidence, match_details=details, reason=reason)

    @classmethod
    def reject(cls, code: FailureCode, reason: str, confidence: int = 0) -> "VerificationResult":
        return cls(verified=False, confidence=confidence, reason=reason, failure=code)

    @classmethod
    def pending(cls, code: FailureCode, reason: str, confidence: int = 0) -> "VerificationResult":
        return cls(
            verified=False,
            confidence=confidence,
            reason=reason,
            pending_manual_review=True,
            failure=code,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"verified": self.verified, "confidence": self.confidence}
        if self.match_details is not None:
            data["matchDetails"] = self.match_details.to_dict()
        if self.reason:
            data["reason"] = self.reason
        if self.pending_manual_review:
            data["pendingManualReview"] = True
        if self.failure is not None:
            data["failureCode"] = self.failure.value
        return data


@dataclass(frozen=True)
class ExtractedCandidate:
    """One identity scraped from a directory page; never persisted."""

    name: str | None
    level: str | None = None
    country: str | None = None
    profile_url: str | None = None
    reference: str | None = None
    context: str = ""


@dataclass
class CoachRecord:
    """Verification state the core writes onto a coach's profile."""

    coach_id: str
    name: str
    body: AccreditationBody | None = None
    verified: bool = False
    verification_status: VerificationStatus = VerificationStatus.unverified
    level: str | None = None
    profile_url: str | None = None
    location: str | None = None
    verified_at: datetime | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "coach_id": self.coach_id,
            "name": self.name,
            "accreditation_body": self.body.value if self.body else None,
            "verified": self.verified,
            "verification_status": self.verification_status.value,
            "accreditation_level": self.level,
            "profile_url": self.profile_url,
            "location": self.location,
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoachRecord":
        body = data.get("accreditation_body")
        verified_at = data.get("verified_at")
        return cls(
            coach_id=data["coach_id"],
            name=data.get("name", ""),
            body=AccreditationBody(body) if body else None,
            verified=data.get("verified", False),
            verification_status=VerificationStatus(data.get("verification_status", "unverified")),
            level=data.get("accreditation_level"),
            profile_url=data.get("profile_url"),
            location=data.get("location"),
            verified_at=datetime.fromisoformat(verified_at) if verified_at else None,
            notes=data.get("notes"),
        )
