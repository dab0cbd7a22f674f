"""Directory access - scraping-proxy HTTP client and directory search URLs."""

from accredit.directory.client import (
    EMCC_DIRECTORY_URL,
    ICF_DIRECTORY_URL,
    DirectoryClient,
    FetchResult,
    emcc_name_search_url,
    emcc_reference_search_url,
    icf_name_search_url,
)

__all__ = [
    "EMCC_DIRECTORY_URL",
    "ICF_DIRECTORY_URL",
    "DirectoryClient",
    "FetchResult",
    "emcc_name_search_url",
    "emcc_reference_search_url",
    "icf_name_search_url",
]
