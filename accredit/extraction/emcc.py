"""EMCC directory result parsing.

EMCC renders search results as a table with a fixed column order:

    Country/Region | Name | Current Award Level | Reference | dates...

A candidate is taken from the row containing the searched EIA reference.
Cell text that looks like page chrome rather than a person's name is
discarded, as is an award level EMCC does not issue.
"""

from __future__ import annotations

import logging
import re
import urllib.parse

from bs4 import BeautifulSoup, Tag

from accredit.extraction.common import parse_html, text_window
from accredit.models import ExtractedCandidate

logger = logging.getLogger(__name__)

EMCC_BASE_URL = "https://www.emccglobal.org"

NAME_DENYLIST = (
    "email address",
    "view profile",
    "send message",
    "contact",
    "more info",
    "read more",
    "click here",
    "download",
    "register",
    "login",
    "sign up",
    "learn more",
    "get started",
    "find out",
    "book now",
)

_NAME_SHAPE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*$")
_EMCC_LEVEL = re.compile(
    r"Foundation|Practitioner|Senior Practitioner|Master Practitioner|Advanced Practitioner",
    re.IGNORECASE,
)
# Raw-text fallback when no <tr> encloses the reference
_CONTEXT_RADIUS = 1000
_MIN_CELLS = 4


def clean_name(raw: str) -> str | None:
    """Return *raw* if it is a plausible person name, else None."""
    name = " ".join(raw.split())
    if not name:
        return None
    lowered = name.lower()
    if any(phrase in lowered for phrase in NAME_DENYLIST):
        logger.debug("Name rejected by denylist: %s", name)
        return None
    if not _NAME_SHAPE.match(name):
        logger.debug("Name format invalid: %s", name)
        return None
    return name


def clean_level(raw: str) -> str | None:
    level = " ".join(raw.split())
    if not level:
        return None
    if not _EMCC_LEVEL.search(level):
        logger.debug("Award level not recognized: %s", level)
        return None
    return level


def _innermost_rows(soup: BeautifulSoup, reference: str) -> list[Tag]:
    rows = [tr for tr in soup.find_all("tr") if reference in tr.get_text().upper()]
    return [
        tr for tr in rows
        if not any(reference in inner.get_text().upper() for inner in tr.find_all("tr"))
    ]


def _profile_url(container: Tag) -> str | None:
    for anchor in container.find_all("a", href=True):
        href = anchor["href"]
        if "profile" in href.lower():
            return urllib.parse.urljoin(EMCC_BASE_URL, href)
    return None


def _candidate_from_cells(cells: list[Tag], container: Tag) -> ExtractedCandidate | None:
    if len(cells) < _MIN_CELLS:
        logger.debug("Not enough table cells found (%d)", len(cells))
        return None
    texts = [cell.get_text(" ", strip=True) for cell in cells]
    return ExtractedCandidate(
        name=clean_name(texts[1]),
        level=clean_level(texts[2]),
        country=texts[0] or None,
        reference="".join(texts[3].split()).upper() or None,
        profile_url=_profile_url(container),
    )


def extract_emcc_candidates(html: str, reference: str) -> list[ExtractedCandidate]:
    """Candidates for the row(s) listing *reference*; empty when there are none."""
    reference = "".join(reference.split()).upper()
    if not reference or reference not in (html or "").upper():
        return []

    soup = parse_html(html)
    if soup is None:
        return []

    candidates: list[ExtractedCandidate] = []
    for row in _innermost_rows(soup, reference):
        candidate = _candidate_from_cells(row.find_all("td"), row)
        if candidate is not None:
            candidates.append(candidate)

    if not candidates:
        window = parse_html(text_window(html, reference, _CONTEXT_RADIUS))
        if window is not None:
            logger.debug("No table row for %s, using context window", reference)
            candidate = _candidate_from_cells(window.find_all("td"), window)
            if candidate is not None:
                candidates.append(candidate)

    # A row matched on a substring (EIA2023048 inside EIA20230480) is not a match
    exact = [c for c in candidates if c.reference == reference]
    if len(exact) < len(candidates):
        logger.debug("Dropped %d row(s) whose reference is not %s", len(candidates) - len(exact), reference)
    return exact
