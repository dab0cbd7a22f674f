"""
ACCREDIT - Coach credential verification
EMCC and ICF directory checks with a durable credential cache
"""

__version__ = "0.1.0"

from accredit.config import AccreditSettings, get_config
from accredit.models import (
    AccreditationBody,
    MatchDetails,
    VerificationRequest,
    VerificationResult,
    VerifiedCredential,
)
from accredit.verification import VerificationService, get_service

__all__ = [
    "AccreditSettings",
    "get_config",
    "AccreditationBody",
    "MatchDetails",
    "VerificationRequest",
    "VerificationResult",
    "VerifiedCredential",
    "VerificationService",
    "get_service",
]
