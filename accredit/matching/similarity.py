"""Edit-distance name similarity.

Every accept/reject decision in the verifiers goes through :func:`similarity`,
so the formula stays fixed: ``1 - levenshtein(a, b) / max(len(a), len(b))``.
Callers choose thresholds; the function itself has no tie-breaking.
"""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

# Cached credential name must match the claimed name at least this well
CACHE_NAME_THRESHOLD = 0.85
# Live EMCC row name vs claimed name
EMCC_NAME_THRESHOLD = 0.85
# ICF candidates below this are not considered at all
ICF_CANDIDATE_THRESHOLD = 0.70
# Blended ICF confidence needed to verify outright
ICF_ACCEPT_THRESHOLD = 0.85


def similarity(a: str, b: str) -> float:
    """Normalised Levenshtein similarity in [0, 1].

    Case folding is the caller's job.  Two empty strings are a perfect match.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


def name_similarity(a: str, b: str) -> float:
    """Similarity of two person names after trimming and lower-casing."""
    return similarity(a.strip().lower(), b.strip().lower())


def name_tokens(full_name: str) -> list[str]:
    return [part for part in full_name.lower().split() if part]


def split_name(full_name: str) -> tuple[str, str]:
    """First and last token of a name; last is empty for single-word names."""
    parts = full_name.strip().split()
    if not parts:
        return "", ""
    return parts[0], parts[-1] if len(parts) > 1 else ""


def surname(full_name: str) -> str:
    parts = full_name.strip().split()
    return parts[-1] if parts else ""
