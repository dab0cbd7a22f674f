"""Tests for the operator CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from accredit.cli import main
from accredit.config import AccreditSettings
from tests.conftest import ICF_SEARCH_URL, emcc_results_page, icf_results_page, make_response

HTTPX_GET = "accredit.directory.client.httpx.get"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_service(service):
    with patch("accredit.cli.get_service", return_value=service):
        yield service


class TestEmccCommand:
    def test_json_verdict(self, runner, cli_service):
        with patch(HTTPX_GET, return_value=make_response(200, emcc_results_page())):
            result = runner.invoke(main, ["emcc", "Carole Adams", "EIA20230480", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["verified"] is True
        assert data["matchDetails"]["name"] == "Carole Adams"

    def test_default_coach_is_temporary(self, runner, cli_service, storage):
        with patch(HTTPX_GET, return_value=make_response(200, emcc_results_page())):
            runner.invoke(main, ["emcc", "Carole Adams", "EIA20230480", "--json"])
        assert storage.count() == 0

    def test_coach_id_persists(self, runner, cli_service, storage):
        with patch(HTTPX_GET, return_value=make_response(200, emcc_results_page())):
            runner.invoke(main, ["emcc", "Carole Adams", "EIA20230480", "--coach-id", "coach-9", "--json"])
        assert storage.get_coach("coach-9").verified is True

    def test_table_output(self, runner, cli_service):
        with patch(HTTPX_GET, return_value=make_response(200, emcc_results_page())):
            result = runner.invoke(main, ["emcc", "Carole Adams", "EIA20230480"])
        assert result.exit_code == 0
        assert "Verified" in result.output
        assert "Carole Adams" in result.output

    def test_rejection_output(self, runner, cli_service):
        result = runner.invoke(main, ["emcc", "Carole Adams", "nope", "--json"])
        data = json.loads(result.stdout)
        assert data["verified"] is False
        assert data["failureCode"] == "bad_reference_format"


class TestIcfCommands:
    def test_icf_url(self, runner, cli_service):
        args = ["icf-url", "Jane Doe", ICF_SEARCH_URL, "--location", "London, United Kingdom",
                "--level", "pcc", "--json"]
        with patch(HTTPX_GET, return_value=make_response(200, icf_results_page())):
            result = runner.invoke(main, args)
        assert result.exit_code == 0
        assert json.loads(result.stdout)["confidence"] == 100

    def test_icf_by_name(self, runner, cli_service):
        with patch(HTTPX_GET, return_value=make_response(200, icf_results_page())):
            result = runner.invoke(main, ["icf", "Jane Doe", "--level", "PCC", "--json"])
        assert json.loads(result.stdout)["confidence"] == 95

    def test_icf_level_choice_enforced(self, runner, cli_service):
        result = runner.invoke(main, ["icf", "Jane Doe", "--level", "ACTC"])
        assert result.exit_code != 0


class TestInitDb:
    def test_without_database_url(self, runner):
        with patch("accredit.cli.get_config", return_value=AccreditSettings(database_url="")):
            result = runner.invoke(main, ["init-db"])
        assert result.exit_code == 0
        assert "nothing to create" in result.output

    def test_creates_tables(self, runner):
        settings = AccreditSettings(database_url="sqlite://")
        with patch("accredit.cli.get_config", return_value=settings), \
                patch("accredit.cli.SqlStorage") as mock_storage:
            result = runner.invoke(main, ["init-db"])
        assert result.exit_code == 0
        mock_storage.assert_called_once_with("sqlite://")
        mock_storage.return_value.create_all_tables.assert_called_once()
        assert "Database initialised" in result.output
