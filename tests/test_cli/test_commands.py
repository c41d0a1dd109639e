"""Tests for CLI commands — forwarder entry points are mocked, CliRunner used throughout."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner, Result

from src.agent.forwarder import ForwardResult
from src.config import Settings
from src.errors import ApiError, NotFoundError


# ── Helpers ─────────────────────────────────────────────────────────────────────


def _invoke(settings: Settings, *args: str) -> Result:
    from src.cli.main import cli

    runner = CliRunner()
    with patch("src.cli.main.load_dotenv"), patch(
        "src.cli.main.Settings.from_env", return_value=settings
    ):
        return runner.invoke(cli, list(args), catch_exceptions=False)


# ── run ─────────────────────────────────────────────────────────────────────────


class TestRunCommand:
    def test_prints_results_table(self, settings: Settings) -> None:
        results = [ForwardResult("18c1", 1001), ForwardResult("18c2", None)]
        with patch("src.cli.commands.forward_inbox", AsyncMock(return_value=results)):
            result = _invoke(settings, "run")

        assert result.exit_code == 0
        assert "Forwarded 2 message(s)" in result.output
        assert "18c1" in result.output
        assert "1001" in result.output
        assert "n/a" in result.output

    def test_no_subcommand_runs_forwarder(self, settings: Settings) -> None:
        mock = AsyncMock(return_value=[])
        with patch("src.cli.commands.forward_inbox", mock):
            result = _invoke(settings)

        assert result.exit_code == 0
        mock.assert_awaited_once()
        assert "nothing forwarded" in result.output

    def test_failure_is_reported_and_exits_zero(self, settings: Settings) -> None:
        with patch(
            "src.cli.commands.forward_inbox", AsyncMock(side_effect=ApiError(401, "Unauthorized"))
        ):
            result = _invoke(settings, "run")

        assert result.exit_code == 0
        assert "Forwarding failed" in result.output
        assert "401" in result.output

    def test_max_concurrency_option_overrides_settings(self, settings: Settings) -> None:
        mock = AsyncMock(return_value=[])
        with patch("src.cli.commands.forward_inbox", mock):
            _invoke(settings, "run", "--max-concurrency", "3")

        passed: Settings = mock.call_args.args[0]
        assert passed.max_concurrency == 3


# ── authorize ───────────────────────────────────────────────────────────────────


class TestAuthorizeCommand:
    def test_reports_token_location(self, settings: Settings) -> None:
        with patch("src.cli.commands.authorize_only", AsyncMock()):
            result = _invoke(settings, "authorize")
        assert result.exit_code == 0
        assert "Gmail authorized" in result.output

    def test_missing_credentials_reported(self, settings: Settings) -> None:
        with patch(
            "src.cli.commands.authorize_only",
            AsyncMock(side_effect=NotFoundError("Credential file not found: credentials.json")),
        ):
            result = _invoke(settings, "authorize")
        assert "Authorization failed" in result.output


# ── label ───────────────────────────────────────────────────────────────────────


class TestLabelCommand:
    def test_prints_label_id(self, settings: Settings) -> None:
        mock = AsyncMock(return_value="Label_42")
        with patch("src.cli.commands.lookup_label", mock):
            result = _invoke(settings, "label", "Support")

        assert result.exit_code == 0
        assert "Label_42" in result.output
        assert mock.call_args.args[1] == "Support"

    @pytest.mark.parametrize("name", ["Nope", "Support/Missing"])
    def test_missing_label_reported(self, settings: Settings, name: str) -> None:
        with patch(
            "src.cli.commands.lookup_label", AsyncMock(side_effect=NotFoundError(f"label not found: {name!r}"))
        ):
            result = _invoke(settings, "label", name)
        assert result.exit_code == 0
        assert "Label lookup failed" in result.output
