"""Error taxonomy for credential verification.

Every error carries a :class:`FailureCode` so the orchestrator can turn it into
a verdict without inspecting message text.  Format, consistency and not-found
errors become rejections; transport and configuration errors become
pending-manual-review verdicts.
"""

from __future__ import annotations

from enum import Enum


class FailureCode(str, Enum):
    """Machine-readable category of a non-verified verdict."""

    # Format
    malformed_url = "malformed_url"
    invalid_domain = "invalid_domain"
    wrong_page = "wrong_page"
    not_a_search_result = "not_a_search_result"
    missing_reference = "missing_reference"
    bad_reference_format = "bad_reference_format"
    wrong_webcode = "wrong_webcode"
    missing_name = "missing_name"
    incomplete_name = "incomplete_name"
    unsupported_body = "unsupported_body"

    # Consistency
    name_url_mismatch = "name_url_mismatch"
    registered_to_other = "registered_to_other"
    level_mismatch = "level_mismatch"
    location_mismatch = "location_mismatch"
    duplicate_claim = "duplicate_claim"
    url_already_claimed = "url_already_claimed"

    # Not found
    not_found = "not_found"
    low_similarity = "low_similarity"
    ambiguous_match = "ambiguous_match"

    # Infrastructure
    transport_failure = "transport_failure"
    scraping_unavailable = "scraping_unavailable"
    internal_error = "internal_error"


class AccreditError(Exception):
    """Base exception for the verification core"""

    default_code = FailureCode.internal_error

    def __init__(self, message: str, code: FailureCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class FormatError(AccreditError):
    """Supplied identifier or URL fails a syntactic check"""


class IdentifierError(FormatError):
    """EIA reference or directory URL is malformed"""


class ConsistencyError(AccreditError):
    """Claimed identity contradicts the identifier or another coach's claim"""


class NotFoundError(AccreditError):
    """Directory answered but no acceptable candidate was extracted"""

    default_code = FailureCode.not_found


class TransportError(AccreditError):
    """Network, timeout or HTTP failure talking to the directory or proxy"""

    default_code = FailureCode.transport_failure

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, FailureCode.transport_failure)
        self.status_code = status_code


class ConfigurationError(AccreditError):
    """Required configuration is absent"""


class ScrapingUnavailable(ConfigurationError):
    """No scraping-proxy credential is configured"""

    default_code = FailureCode.scraping_unavailable


class StorageError(AccreditError):
    """Credential or coach store could not be read or written"""
