"""
Verification service facade

Wires storage, cache, registry and directory client from configuration and
exposes one method per entry point.  Used by the HTTP API and the CLI.
"""

from __future__ import annotations

import logging
from typing import Optional

from accredit.cache import CredentialCache
from accredit.config import AccreditSettings, get_config
from accredit.directory import DirectoryClient
from accredit.errors import FailureCode
from accredit.models import AccreditationBody, VerificationRequest, VerificationResult
from accredit.registry import CoachRegistry
from accredit.storage import Storage, build_storage
from accredit.verification.emcc import EmccVerifier
from accredit.verification.icf import IcfVerifier

logger = logging.getLogger(__name__)


class VerificationService:
    """Entry points for EMCC and ICF credential verification."""

    def __init__(self, storage: Storage, client: DirectoryClient) -> None:
        self.storage = storage
        self.client = client
        cache = CredentialCache(storage)
        registry = CoachRegistry(storage)
        self.emcc = EmccVerifier(client, cache, registry)
        self.icf = IcfVerifier(client, cache, registry)

    @classmethod
    def from_config(cls, settings: AccreditSettings | None = None) -> "VerificationService":
        settings = settings or get_config()
        storage = build_storage(settings.database_url)
        client = DirectoryClient.from_settings(settings)
        if not client.available:
            logger.warning("No scraping proxy key configured; live verifications will go to manual review")
        return cls(storage, client)

    def verify_emcc_reference(
        self,
        coach_id: str,
        full_name: str,
        eia_number: str,
        level: str | None = None,
        country: str | None = None,
    ) -> VerificationResult:
        return self.emcc.verify_by_reference(VerificationRequest(
            body=AccreditationBody.EMCC,
            coach_id=coach_id,
            full_name=full_name,
            token=eia_number,
            level=level,
            country=country,
        ))

    def verify_emcc_url(
        self,
        coach_id: str,
        full_name: str,
        profile_url: str,
        level: str | None = None,
    ) -> VerificationResult:
        return self.emcc.verify_by_url(VerificationRequest(
            body=AccreditationBody.EMCC,
            coach_id=coach_id,
            full_name=full_name,
            token=profile_url,
            level=level,
        ))

    def verify_icf_url(
        self,
        coach_id: str,
        full_name: str,
        profile_url: str,
        location: str,
        level: str,
    ) -> VerificationResult:
        return self.icf.verify_by_url(VerificationRequest(
            body=AccreditationBody.ICF,
            coach_id=coach_id,
            full_name=full_name,
            token=profile_url,
            level=level,
            location=location,
        ))

    def verify_icf_name(
        self,
        coach_id: str,
        full_name: str,
        level: str,
        country: str | None = None,
    ) -> VerificationResult:
        return self.icf.verify_by_name(VerificationRequest(
            body=AccreditationBody.ICF,
            coach_id=coach_id,
            full_name=full_name,
            level=level,
            country=country,
        ))

    def verify(self, request: VerificationRequest) -> VerificationResult:
        """Route a request by body and token shape."""
        is_url = request.token.strip().lower().startswith(("http://", "https://"))
        if request.body is AccreditationBody.EMCC:
            if is_url:
                return self.emcc.verify_by_url(request)
            return self.emcc.verify_by_reference(request)
        if request.body is AccreditationBody.ICF:
            if is_url:
                return self.icf.verify_by_url(request)
            return self.icf.verify_by_name(request)
        return VerificationResult.reject(
            FailureCode.unsupported_body,
            f"Automatic verification is not available for {request.body.value}. "
            "Please contact support to verify your credentials.",
        )


# Global service instance
_service: Optional[VerificationService] = None


def get_service() -> VerificationService:
    """Get or create the global verification service"""
    global _service
    if _service is None:
        _service = VerificationService.from_config()
    return _service
