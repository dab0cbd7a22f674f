"""ICF directory result parsing.

The ICF directory has no column order to rely on, so candidates are found
from anchors whose text looks like the searched person's name.  The
credential level is read from the text surrounding each anchor, where ICF
prints entries such as ``PCC 9/2019 - 9/2028``.
"""

from __future__ import annotations

import logging
import re
import urllib.parse

from bs4 import Tag

from accredit.extraction.common import parse_html, text_window
from accredit.models import ExtractedCandidate

logger = logging.getLogger(__name__)

ICF_BASE_URL = "https://apps.coachingfederation.org"
ICF_LEVELS = ("ACC", "PCC", "MCC", "ACTC")

_HEADING_PREFIX = re.compile(r"^(search|results|directory|find|coach|profile)", re.IGNORECASE)
_HAS_LETTER = re.compile(r"[a-z]", re.IGNORECASE)
_CREDENTIAL_RANGE = re.compile(r"\b(ACC|PCC|MCC|ACTC)\s+(\d{1,2}/\d{4})\s*-\s*(\d{1,2}/\d{4})", re.IGNORECASE)
_CONTEXT_RADIUS = 500
_CONTAINERS = ("tr", "li", "div")


def is_likely_name(text: str, search_name: str) -> bool:
    """Heuristic: anchor text is a person's name sharing a word with the search."""
    if len(text) < 3 or len(text) > 100:
        return False
    if not _HAS_LETTER.search(text):
        return False
    if _HEADING_PREFIX.match(text):
        return False
    search_words = search_name.lower().split()
    text_words = text.lower().split()
    return any(tw in sw or sw in tw for sw in search_words for tw in text_words)


def level_from_context(context: str, expected_level: str | None = None) -> str | None:
    """Credential code shown in *context*, or *expected_level* if it appears bare."""
    match = _CREDENTIAL_RANGE.search(context)
    if match:
        return match.group(1).upper()
    if expected_level and re.search(rf"\b{re.escape(expected_level)}\b", context, re.IGNORECASE):
        return expected_level.upper()
    return None


def _context_for(anchor: Tag, name: str, page_text: str) -> str:
    container = anchor.find_parent(_CONTAINERS)
    if container is not None:
        return container.get_text(" ", strip=True)
    return text_window(page_text, name, _CONTEXT_RADIUS)


def extract_icf_candidates(
    html: str,
    search_name: str,
    expected_level: str | None = None,
) -> list[ExtractedCandidate]:
    soup = parse_html(html)
    if soup is None:
        return []
    page_text = soup.get_text(" ", strip=True)

    candidates: list[ExtractedCandidate] = []
    seen: set[tuple[str, str | None]] = set()
    for anchor in soup.find_all("a"):
        name = anchor.get_text(" ", strip=True)
        if not name or not is_likely_name(name, search_name):
            continue

        href = anchor.get("href")
        profile_url = urllib.parse.urljoin(ICF_BASE_URL, href) if href else None
        if (name, profile_url) in seen:
            continue
        seen.add((name, profile_url))

        context = _context_for(anchor, name, page_text)
        candidates.append(ExtractedCandidate(
            name=name,
            level=level_from_context(context, expected_level),
            profile_url=profile_url,
            context=context,
        ))

    logger.debug("Found %d ICF candidates for %s", len(candidates), search_name)
    return candidates
