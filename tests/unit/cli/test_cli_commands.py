"""Tests for the typer CLI."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from plumly_summarizer.cli import app
from plumly_summarizer.models.llm import ConnectionCheck
from plumly_summarizer.models.summary import ErrorKind, Section, SummaryResponse
from plumly_summarizer.utils.exceptions import SummarizationError

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("plumly_summarizer.cli.utils.configure_logging"):
        yield


@pytest.fixture
def request_file(tmp_path, resource_data):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({"resourceData": resource_data, "persona": "patient"}))
    return path


@pytest.fixture
def mock_client():
    """Patch client construction and return the client double."""
    client = MagicMock()
    with patch("plumly_summarizer.cli.utils.SummaryClient") as client_cls:
        client_cls.from_settings.return_value = client
        yield client


def make_response() -> SummaryResponse:
    return SummaryResponse(
        summary="All stable.",
        sections=[Section(id="overview", title="Overview", content="Stable.")],
        metadata={"persona": "patient", "sectionsGenerated": ["overview"]},
    )


class TestSummarizeCommand:
    """Tests for the summarize command."""

    def test_writes_output_file(self, tmp_path, request_file, mock_client):
        mock_client.summarize = AsyncMock(return_value=make_response())
        output = tmp_path / "summary.json"

        result = runner.invoke(
            app, ["summarize", str(request_file), "--output", str(output)]
        )

        assert result.exit_code == 0
        assert "1 sections" in result.output
        data = json.loads(output.read_text())
        assert data["summary"] == "All stable."
        assert data["sections"][0]["id"] == "overview"
        sent = mock_client.summarize.call_args.args[0]
        assert sent["persona"] == "patient"

    def test_prints_to_stdout(self, request_file, mock_client):
        mock_client.summarize = AsyncMock(return_value=make_response())

        result = runner.invoke(app, ["summarize", str(request_file)])

        assert result.exit_code == 0
        assert '"summary": "All stable."' in result.output

    def test_summarization_error_exits_1(self, request_file, mock_client):
        mock_client.summarize = AsyncMock(
            side_effect=SummarizationError(
                "Rate limit exceeded",
                type=ErrorKind.RATE_LIMIT,
                retryable=True,
                processing_time=3.2,
            )
        )

        result = runner.invoke(app, ["summarize", str(request_file)])

        assert result.exit_code == 1
        assert "rate_limit" in result.output
        assert "retryable=True" in result.output

    def test_unreadable_request_exits_2(self, tmp_path, mock_client):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        result = runner.invoke(app, ["summarize", str(path)])

        assert result.exit_code == 2
        mock_client.summarize.assert_not_called()

    def test_missing_config_exits_2(self, tmp_path, request_file, mock_client):
        result = runner.invoke(
            app,
            ["summarize", str(request_file), "--config", str(tmp_path / "nope.yaml")],
        )

        assert result.exit_code == 2
        assert "Configuration Error" in result.output

    def test_missing_api_key_exits_2(self, request_file, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with patch("plumly_summarizer.services.config_manager.load_dotenv"):
            result = runner.invoke(app, ["summarize", str(request_file)])

        assert result.exit_code == 2
        assert "API key is required" in result.output


class TestCheckConnectionCommand:
    """Tests for the check-connection command."""

    def test_success(self, mock_client):
        mock_client.test_connection = AsyncMock(
            return_value=ConnectionCheck(success=True, latency_ms=42.0)
        )

        result = runner.invoke(app, ["check-connection"])

        assert result.exit_code == 0
        assert "Connection OK" in result.output

    def test_failure(self, mock_client):
        mock_client.test_connection = AsyncMock(
            return_value=ConnectionCheck(success=False, latency_ms=5.0, error="refused")
        )

        result = runner.invoke(app, ["check-connection"])

        assert result.exit_code == 1
        assert "refused" in result.output


class TestValidateConfigCommand:
    """Tests for the validate-config command."""

    def test_valid_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("retry:\n  maxRetries: 4\n")

        result = runner.invoke(app, ["validate-config", str(path)])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("retry:\n  maxRetries: 99\n")

        result = runner.invoke(app, ["validate-config", str(path)])

        assert result.exit_code == 2
        assert "Validation failed" in result.output
