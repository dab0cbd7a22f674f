"""HTML helpers shared by the directory extractors."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

logger = logging.getLogger(__name__)

_NO_RESULTS_MARKERS = ("no results found", "no records found")


def parse_html(html: str) -> BeautifulSoup | None:
    """Parse *html* leniently; None when the parser refuses the markup."""
    try:
        return BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup as exc:
        logger.debug("Unparseable directory markup: %s", exc)
        return None


def is_no_results_page(html: str) -> bool:
    lowered = (html or "").lower()
    return any(marker in lowered for marker in _NO_RESULTS_MARKERS)


def text_window(text: str, needle: str, radius: int) -> str:
    """Slice of *text* around the first case-insensitive occurrence of *needle*."""
    index = text.lower().find(needle.lower())
    if index < 0:
        return ""
    return text[max(0, index - radius):index + len(needle) + radius]
