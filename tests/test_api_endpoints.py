"""Tests for FastAPI API endpoints using TestClient."""

import os

import pytest
from unittest.mock import MagicMock, patch

# Set env vars before any app imports
os.environ["ACCREDIT_API_KEY"] = "test-api-key"
os.environ["ACCREDIT_DEMO_MODE"] = "true"

from fastapi.testclient import TestClient

from accredit.directory import DirectoryClient
from accredit.errors import FailureCode, StorageError
from accredit.storage import InMemoryStorage
from accredit.verification import VerificationService
from tests.conftest import EMCC_SEARCH_URL, ICF_SEARCH_URL, emcc_results_page, icf_results_page, make_response

HTTPX_GET = "accredit.directory.client.httpx.get"


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    from accredit.api.auth import verify_limiter
    verify_limiter.reset()
    yield
    verify_limiter.reset()


@pytest.fixture
def api_service():
    """Install an in-memory verification service behind the routes."""
    import accredit.api.routes.verify as verify_mod
    service = VerificationService(InMemoryStorage(), DirectoryClient("test-proxy-key"))
    verify_mod._service = service
    yield service
    verify_mod._service = None


@pytest.fixture
def app():
    """Create a fresh app instance with mocked config."""
    # Reset the config singleton before each test
    import accredit.config
    accredit.config._config = None

    from accredit.api.main import create_app
    return create_app()


@pytest.fixture
def client(app):
    """Test client for the ACCREDIT API."""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-api-key"}


class TestHealthEndpoint:
    def test_health_no_auth_required(self, client, api_service):
        response = client.get("/api/health")
        assert response.status_code == 200

    def test_degraded_without_scraping_key(self, client, api_service):
        data = client.get("/api/health").json()
        assert data["status"] == "degraded"
        assert data["storage_connected"] is True
        assert data["scraping_configured"] is False
        assert data["version"]

    def test_offline_when_storage_fails(self, client):
        import accredit.api.routes.verify as verify_mod
        broken = MagicMock()
        broken.storage.ping.side_effect = StorageError("db down")
        verify_mod._service = broken
        try:
            data = client.get("/api/health").json()
        finally:
            verify_mod._service = None
        assert data["status"] == "offline"
        assert data["storage_connected"] is False

    def test_request_id_header(self, client, api_service):
        response = client.get("/api/health")
        assert "X-Request-ID" in response.headers

    def test_caller_request_id_is_echoed(self, client, api_service):
        response = client.get("/api/health", headers={"X-Request-ID": "trace-abc-123"})
        assert response.headers["X-Request-ID"] == "trace-abc-123"


class TestEmccEndpoints:
    def test_verified_response_shape(self, client, api_service, auth_headers):
        payload = {
            "coachId": "coach-1",
            "fullName": "Carole Adams",
            "eiaNumber": "EIA20230480",
            "accreditationLevel": "Senior Practitioner",
        }
        with patch(HTTPX_GET, return_value=make_response(200, emcc_results_page())):
            response = client.post("/api/verify/emcc", json=payload, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["verified"] is True
        assert data["confidence"] == 100
        assert data["matchDetails"]["name"] == "Carole Adams"
        assert data["matchDetails"]["level"] == "Senior Practitioner"
        assert "pendingManualReview" not in data
        assert "failureCode" not in data

    def test_rejection_is_200(self, client, api_service, auth_headers):
        payload = {"coachId": "coach-1", "fullName": "Carole Adams", "eiaNumber": "12345"}
        with patch(HTTPX_GET) as mock_get:
            response = client.post("/api/verify/emcc", json=payload, headers=auth_headers)
        mock_get.assert_not_called()
        assert response.status_code == 200
        data = response.json()
        assert data["verified"] is False
        assert data["failureCode"] == FailureCode.bad_reference_format.value

    def test_missing_reference_is_422(self, client, api_service, auth_headers):
        payload = {"coachId": "coach-1", "fullName": "Carole Adams"}
        response = client.post("/api/verify/emcc", json=payload, headers=auth_headers)
        assert response.status_code == 422

    def test_blank_name_is_422(self, client, api_service, auth_headers):
        payload = {"coachId": "coach-1", "fullName": "   ", "eiaNumber": "EIA20230480"}
        response = client.post("/api/verify/emcc", json=payload, headers=auth_headers)
        assert response.status_code == 422

    def test_emcc_url(self, client, api_service, auth_headers):
        payload = {"coachId": "coach-1", "fullName": "Carole Adams", "profileUrl": EMCC_SEARCH_URL}
        with patch(HTTPX_GET, return_value=make_response(200, emcc_results_page())):
            response = client.post("/api/verify/emcc-url", json=payload, headers=auth_headers)
        data = response.json()
        assert data["verified"] is True
        assert data["matchDetails"]["eiaNumber"] == "EIA20230480"
        assert data["matchDetails"]["profileUrl"] == EMCC_SEARCH_URL

    def test_pending_review_flag(self, client, auth_headers):
        import accredit.api.routes.verify as verify_mod
        verify_mod._service = VerificationService(InMemoryStorage(), DirectoryClient(""))
        try:
            payload = {"coachId": "coach-1", "fullName": "Carole Adams", "eiaNumber": "EIA20230480"}
            data = client.post("/api/verify/emcc", json=payload, headers=auth_headers).json()
        finally:
            verify_mod._service = None
        assert data["verified"] is False
        assert data["pendingManualReview"] is True
        assert data["failureCode"] == FailureCode.scraping_unavailable.value


class TestIcfEndpoints:
    def test_icf_url(self, client, api_service, auth_headers):
        payload = {
            "coachId": "coach-1",
            "fullName": "Jane Doe",
            "profileUrl": ICF_SEARCH_URL,
            "location": "London, United Kingdom",
            "accreditationLevel": "pcc",
        }
        with patch(HTTPX_GET, return_value=make_response(200, icf_results_page())):
            response = client.post("/api/verify/icf-url", json=payload, headers=auth_headers)
        data = response.json()
        assert data["verified"] is True
        assert data["matchDetails"]["location"] == "London, United Kingdom"

    def test_icf_url_requires_location(self, client, api_service, auth_headers):
        payload = {
            "coachId": "coach-1",
            "fullName": "Jane Doe",
            "profileUrl": ICF_SEARCH_URL,
            "accreditationLevel": "PCC",
        }
        response = client.post("/api/verify/icf-url", json=payload, headers=auth_headers)
        assert response.status_code == 422

    def test_icf_by_name(self, client, api_service, auth_headers):
        payload = {"coachId": "coach-1", "fullName": "Jane Doe", "credentialLevel": "PCC"}
        with patch(HTTPX_GET, return_value=make_response(200, icf_results_page())):
            data = client.post("/api/verify/icf", json=payload, headers=auth_headers).json()
        assert data["verified"] is True
        assert data["confidence"] == 95

    def test_icf_by_name_rejects_unknown_level(self, client, api_service, auth_headers):
        payload = {"coachId": "coach-1", "fullName": "Jane Doe", "credentialLevel": "XYZ"}
        response = client.post("/api/verify/icf", json=payload, headers=auth_headers)
        assert response.status_code == 422


class TestRateLimit:
    def test_verify_is_rate_limited(self, client, api_service, auth_headers):
        import accredit.config
        accredit.config.get_config().verify_rate_limit = 2
        payload = {"coachId": "coach-1", "fullName": "Carole Adams", "eiaNumber": "bad"}
        codes = [
            client.post("/api/verify/emcc", json=payload, headers=auth_headers).status_code
            for _ in range(3)
        ]
        assert codes == [200, 200, 429]
        assert "Retry-After" in client.post("/api/verify/emcc", json=payload, headers=auth_headers).headers
