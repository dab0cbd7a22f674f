"""Syntactic checks for EMCC and ICF identifiers.

Each check runs in a fixed order and raises on the first failure, so the
user sees the most basic problem with their input first:

EMCC search URL
    domain -> page path -> ``search=1`` -> ``reference`` present -> EIA format
ICF search URL
    domain -> page path -> ``webcode`` -> any name -> both names

All functions are pure.
"""

from __future__ import annotations

import re
import urllib.parse

from accredit.errors import ConsistencyError, FailureCode, IdentifierError
from accredit.matching.similarity import name_tokens

EMCC_DOMAIN = "emccglobal.org"
EMCC_AWARDS_PATH = "/eia-awards/"
ICF_DOMAIN = "coachingfederation.org"
ICF_DIRECTORY_PATH = "/dynamicpage.aspx"
ICF_DIRECTORY_WEBCODE = "ICFDirectory"

_EIA_PATTERN = re.compile(r"^EIA\d+$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_eia_reference(raw: str | None) -> str:
    """Strip all whitespace and upper-case an EIA reference."""
    if not raw:
        return ""
    return _WHITESPACE.sub("", raw).upper()


def validate_eia_reference(raw: str | None) -> str:
    """Return the normalised reference or raise ``bad_reference_format``."""
    reference = normalize_eia_reference(raw)
    if not _EIA_PATTERN.match(reference):
        raise IdentifierError(
            'Invalid EIA number format. EIA numbers should look like "EIA20230480".',
            FailureCode.bad_reference_format,
        )
    return reference


def _parse_url(url: str) -> urllib.parse.SplitResult:
    try:
        parsed = urllib.parse.urlsplit((url or "").strip())
    except ValueError:
        parsed = None
    if parsed is None or parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise IdentifierError(
            "Invalid URL format. Please copy the complete URL from your browser address bar.",
            FailureCode.malformed_url,
        )
    return parsed


def _query_params(parsed: urllib.parse.SplitResult) -> dict[str, str]:
    """First value per query key, keys lower-cased."""
    params: dict[str, str] = {}
    for key, value in urllib.parse.parse_qsl(parsed.query, keep_blank_values=True):
        params.setdefault(key.lower(), value)
    return params


def validate_emcc_url(url: str) -> str:
    """Validate an EMCC EIA-awards search-result URL.

    Returns the upper-cased EIA reference embedded in the URL.
    """
    parsed = _parse_url(url)

    if EMCC_DOMAIN not in parsed.hostname.lower():
        raise IdentifierError(
            "URL must be from emccglobal.org. Please copy the URL from the EMCC "
            "directory search results.",
            FailureCode.invalid_domain,
        )

    if EMCC_AWARDS_PATH not in parsed.path.lower():
        raise IdentifierError(
            "This is not an EMCC directory URL. Please search for your EIA number "
            "on the EMCC directory and copy the results URL.",
            FailureCode.wrong_page,
        )

    params = _query_params(parsed)
    if params.get("search", "").strip() != "1":
        raise IdentifierError(
            "Please search for your EIA number on the EMCC directory first, then "
            "copy the results URL.",
            FailureCode.not_a_search_result,
        )

    reference = params.get("reference", "").strip()
    if not reference:
        raise IdentifierError(
            "URL must contain your EIA reference number. Please search by EIA "
            "number (not name) and copy that URL.",
            FailureCode.missing_reference,
        )

    if not _EIA_PATTERN.match(reference):
        raise IdentifierError(
            'Invalid EIA number format in URL. EIA numbers should look like "EIA20230480".',
            FailureCode.bad_reference_format,
        )

    return reference.upper()


def validate_icf_url(url: str) -> tuple[str, str]:
    """Validate an ICF directory search-result URL.

    Returns ``(firstname, lastname)`` from the query string.  Single-field
    name searches are refused: they return too many people to verify from.
    """
    parsed = _parse_url(url)

    if ICF_DOMAIN not in parsed.hostname.lower():
        raise IdentifierError(
            "URL must be from coachingfederation.org. Please copy the URL from the "
            "ICF directory search results.",
            FailureCode.invalid_domain,
        )

    if ICF_DIRECTORY_PATH not in parsed.path.lower():
        raise IdentifierError(
            "This is not an ICF directory search URL. Please search for your name "
            "on the ICF directory and copy the results URL.",
            FailureCode.wrong_page,
        )

    params = _query_params(parsed)
    if params.get("webcode", "").strip().lower() != ICF_DIRECTORY_WEBCODE.lower():
        raise IdentifierError(
            "This is not an ICF directory search page. Please use the ICF member directory.",
            FailureCode.wrong_webcode,
        )

    firstname = params.get("firstname", "").strip()
    lastname = params.get("lastname", "").strip()

    if not firstname and not lastname:
        raise IdentifierError(
            "URL must contain your name in the search parameters. Please search for "
            "your name first, then copy the results URL.",
            FailureCode.missing_name,
        )

    if not firstname or not lastname:
        raise IdentifierError(
            "Please search using both your first name and last name for accurate "
            "verification. Single name searches may return multiple results.",
            FailureCode.incomplete_name,
        )

    return firstname, lastname


def validate_name_matches_url(full_name: str, url_firstname: str, url_lastname: str) -> None:
    """Require the claimed name to overlap both name fields of the URL.

    Stops a user pasting somebody else's search URL next to their own name.
    """
    tokens = name_tokens(full_name)
    first = url_firstname.strip().lower()
    last = url_lastname.strip().lower()

    first_match = bool(first) and any(first in tok or tok in first for tok in tokens)
    last_match = bool(last) and any(last in tok or tok in last for tok in tokens)

    if not (first_match and last_match):
        raise ConsistencyError(
            f"The name in the URL ({url_firstname} {url_lastname}) doesn't match the "
            f"name you entered ({full_name}). Please verify both are correct.",
            FailureCode.name_url_mismatch,
        )
