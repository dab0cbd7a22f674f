"""Verification orchestration - per-body verifiers and the service facade.

    EmccVerifier         - EMCC by EIA reference and by search URL
    IcfVerifier          - ICF by search URL (name + location + level) and by name
    VerificationService  - Wires the verifiers from configuration
"""

from accredit.verification.base import CACHE_HIT_REASON, PENDING_REVIEW_REASON, BaseVerifier
from accredit.verification.emcc import EmccVerifier
from accredit.verification.icf import IcfVerifier
from accredit.verification.service import VerificationService, get_service

__all__ = [
    "CACHE_HIT_REASON",
    "PENDING_REVIEW_REASON",
    "BaseVerifier",
    "EmccVerifier",
    "IcfVerifier",
    "VerificationService",
    "get_service",
]
