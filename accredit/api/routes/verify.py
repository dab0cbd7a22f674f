"""Verification endpoints - one per accreditation entry point.

Every endpoint answers 200 with a verdict; rejections and manual-review
outcomes are verdicts, not HTTP errors.  Missing or blank fields are refused
with 422 by the request models before any verification runs.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from accredit.api.auth import rate_limit_verify
from accredit.api.models import (
    EmccReferenceRequest,
    EmccUrlRequest,
    IcfNameRequest,
    IcfUrlRequest,
    VerificationResponse,
)
from accredit.models import VerificationResult
from accredit.verification.service import VerificationService, get_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/verify", tags=["verify"])

# Lazy singleton initialised on first request
_service: VerificationService | None = None


def _get_service() -> VerificationService:
    global _service
    if _service is None:
        _service = get_service()
    return _service


def _respond(result: VerificationResult) -> VerificationResponse:
    return VerificationResponse.model_validate(result.to_dict())


@router.post(
    "/emcc",
    response_model=VerificationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit_verify)],
)
def verify_emcc(body: EmccReferenceRequest):
    """Verify an EMCC accreditation by EIA reference number."""
    logger.info("EMCC reference verification requested for coach %s", body.coach_id)
    result = _get_service().verify_emcc_reference(
        body.coach_id,
        body.full_name,
        body.eia_number,
        level=body.accreditation_level,
        country=body.country,
    )
    return _respond(result)


@router.post(
    "/emcc-url",
    response_model=VerificationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit_verify)],
)
def verify_emcc_url(body: EmccUrlRequest):
    """Verify an EMCC accreditation from a directory search-result URL."""
    logger.info("EMCC URL verification requested for coach %s", body.coach_id)
    result = _get_service().verify_emcc_url(
        body.coach_id,
        body.full_name,
        body.profile_url,
        level=body.accreditation_level,
    )
    return _respond(result)


@router.post(
    "/icf-url",
    response_model=VerificationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit_verify)],
)
def verify_icf_url(body: IcfUrlRequest):
    """Verify an ICF credential from a directory search-result URL and location."""
    logger.info("ICF URL verification requested for coach %s", body.coach_id)
    result = _get_service().verify_icf_url(
        body.coach_id,
        body.full_name,
        body.profile_url,
        location=body.location,
        level=body.accreditation_level,
    )
    return _respond(result)


@router.post(
    "/icf",
    response_model=VerificationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit_verify)],
)
def verify_icf(body: IcfNameRequest):
    """Verify an ICF credential by searching the directory by name."""
    logger.info("ICF name verification requested for coach %s", body.coach_id)
    result = _get_service().verify_icf_name(
        body.coach_id,
        body.full_name,
        level=body.credential_level,
        country=body.country,
    )
    return _respond(result)
