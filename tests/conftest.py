"""Shared test fixtures for the ACCREDIT test suite."""

import os

import pytest
from unittest.mock import MagicMock


# Ensure test environment variables are set before any config import
os.environ.setdefault("ACCREDIT_API_KEY", "test-api-key")
os.environ.setdefault("ACCREDIT_DEMO_MODE", "true")
# Never reach a real directory or database from the test suite
os.environ["ACCREDIT_SCRAPER_API_KEY"] = ""
os.environ["ACCREDIT_DATABASE_URL"] = ""


EMCC_SEARCH_URL = "https://www.emccglobal.org/accreditation/eia/eia-awards/?reference=EIA20230480&search=1"
ICF_SEARCH_URL = (
    "https://apps.coachingfederation.org/eweb/DynamicPage.aspx"
    "?WebCode=ICFDirectory&Site=ICFAppsR&firstname=Jane&lastname=Doe"
)


def make_response(status_code: int = 200, text: str = "") -> MagicMock:
    """Stand-in for an ``httpx.Response``."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    return resp


def emcc_results_page(
    name: str = "Carole Adams",
    level: str = "Senior Practitioner",
    country: str = "UK",
    reference: str = "EIA20230480",
) -> str:
    return f"""
    <html><body>
    <table class="eia-awards">
      <thead>
        <tr><th>Country/Region</th><th>Name</th><th>Current Award Level</th><th>Reference</th>
            <th>Original Award Date</th></tr>
      </thead>
      <tbody>
        <tr>
          <td>{country}</td><td>{name}</td><td>{level}</td><td>{reference}</td><td>01/03/2023</td>
        </tr>
      </tbody>
    </table>
    </body></html>
    """


def icf_results_page(
    name: str = "Jane Doe",
    location: str = "London, United Kingdom",
    credential: str | None = "PCC 9/2019 - 9/2028",
) -> str:
    credential_cell = f"<td>{credential}</td>" if credential else ""
    return f"""
    <html><body>
    <h2>Directory Search Results</h2>
    <table>
      <tr>
        <td><a href="/eweb/DynamicPage.aspx?webcode=ICFProfile&amp;id=42">{name}</a></td>
        <td>{location}</td>
        {credential_cell}
      </tr>
    </table>
    </body></html>
    """


@pytest.fixture
def storage():
    from accredit.storage import InMemoryStorage
    return InMemoryStorage()


@pytest.fixture
def client():
    """Directory client with a proxy key; tests patch ``httpx.get``."""
    from accredit.directory import DirectoryClient
    return DirectoryClient("test-proxy-key")


@pytest.fixture
def service(storage, client):
    from accredit.verification import VerificationService
    return VerificationService(storage, client)


@pytest.fixture
def offline_service(storage):
    """Service with no scraping proxy key configured."""
    from accredit.directory import DirectoryClient
    from accredit.verification import VerificationService
    return VerificationService(storage, DirectoryClient(""))
