"""Result extraction - BeautifulSoup parsers for EMCC and ICF directory pages.

Extractors are pure and never raise on bad markup; no match is an empty list.
"""

from accredit.extraction.common import is_no_results_page
from accredit.extraction.emcc import extract_emcc_candidates
from accredit.extraction.icf import extract_icf_candidates, is_likely_name

__all__ = [
    "is_no_results_page",
    "extract_emcc_candidates",
    "extract_icf_candidates",
    "is_likely_name",
]
