"""Pydantic request/response models for the verification API.

Payloads use the marketplace's camelCase field names; Python code uses the
snake_case attribute names.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    coach_id: str = Field(..., alias="coachId", min_length=1, max_length=100)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=200)


# ---------------------------------------------------------------------------
# EMCC
# ---------------------------------------------------------------------------

class EmccReferenceRequest(_Request):
    eia_number: str = Field(..., alias="eiaNumber", min_length=1, max_length=50)
    accreditation_level: str | None = Field(default=None, alias="accreditationLevel", max_length=100)
    country: str | None = Field(default=None, max_length=100)


class EmccUrlRequest(_Request):
    profile_url: str = Field(..., alias="profileUrl", min_length=1, max_length=2000)
    accreditation_level: str | None = Field(default=None, alias="accreditationLevel", max_length=100)


# ---------------------------------------------------------------------------
# ICF
# ---------------------------------------------------------------------------

class IcfUrlRequest(_Request):
    profile_url: str = Field(..., alias="profileUrl", min_length=1, max_length=2000)
    location: str = Field(..., min_length=1, max_length=200)
    accreditation_level: str = Field(..., alias="accreditationLevel", min_length=1, max_length=10)

    @field_validator("accreditation_level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        return v.upper()


class IcfNameRequest(_Request):
    credential_level: Literal["ACC", "PCC", "MCC"] = Field(..., alias="credentialLevel")
    country: str | None = Field(default=None, max_length=100)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class MatchDetailsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    level: str | None = None
    country: str | None = None
    profile_url: str | None = Field(default=None, alias="profileUrl")
    location: str | None = None
    eia_number: str | None = Field(default=None, alias="eiaNumber")


class VerificationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    verified: bool
    confidence: int = Field(..., ge=0, le=100)
    match_details: MatchDetailsResponse | None = Field(default=None, alias="matchDetails")
    reason: str | None = None
    pending_manual_review: bool | None = Field(default=None, alias="pendingManualReview")
    failure_code: str | None = Field(default=None, alias="failureCode")


class HealthResponse(BaseModel):
    status: str = "healthy"
    storage_connected: bool = False
    scraping_configured: bool = False
    version: str = ""
