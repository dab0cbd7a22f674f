"""Fuzzy name matching - Levenshtein similarity and the thresholds built on it."""

from accredit.matching.similarity import (
    CACHE_NAME_THRESHOLD,
    EMCC_NAME_THRESHOLD,
    ICF_ACCEPT_THRESHOLD,
    ICF_CANDIDATE_THRESHOLD,
    name_similarity,
    name_tokens,
    similarity,
    split_name,
    surname,
)

__all__ = [
    "CACHE_NAME_THRESHOLD",
    "EMCC_NAME_THRESHOLD",
    "ICF_ACCEPT_THRESHOLD",
    "ICF_CANDIDATE_THRESHOLD",
    "name_similarity",
    "name_tokens",
    "similarity",
    "split_name",
    "surname",
]
