"""Identifier validation for EMCC references and EMCC/ICF directory URLs."""

from accredit.validation.identifiers import (
    normalize_eia_reference,
    validate_eia_reference,
    validate_emcc_url,
    validate_icf_url,
    validate_name_matches_url,
)

__all__ = [
    "normalize_eia_reference",
    "validate_eia_reference",
    "validate_emcc_url",
    "validate_icf_url",
    "validate_name_matches_url",
]
