"""Test the analyze command."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from github.GithubException import BadCredentialsException
from typer.testing import CliRunner

from peer_feedback.cli.main import app
from peer_feedback.errors import SummaryError
from peer_feedback.pipeline.orchestrator import RunResult

runner = CliRunner()

BASE_ARGS = [
    "analyze",
    "--organization",
    "acme",
    "--user",
    "octocat",
    "--role-description",
    "role.md",
]


class FakePipeline:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple[Any, ...]] = []

    async def run(self, organization, user, start_date, end_date, role, limit=None):
        self.calls.append((organization, user, start_date, end_date, role, limit))
        if self.error is not None:
            raise self.error
        return RunResult(
            user=user,
            organization=organization,
            start_date=start_date,
            end_date=end_date,
        )


@pytest.fixture(autouse=True)
def github_token(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("PEER_FEEDBACK_CACHE_DIR", str(tmp_path / "cache"))
    (tmp_path / "role.md").write_text("Senior backend engineer\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)


class TestAnalyzeCommand:
    """Test analyze command argument handling."""

    def test_runs_pipeline(self) -> None:
        pipeline = FakePipeline()
        with patch(
            "peer_feedback.cli.analyze.build_pipeline", return_value=pipeline
        ):
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "2024-01-01", "-e", "2024-03-31"]
            )

        assert result.exit_code == 0, result.stdout
        assert pipeline.calls == [
            (
                "acme",
                "octocat",
                "2024-01-01",
                "2024-03-31",
                "Senior backend engineer",
                None,
            )
        ]
        assert "Contribution Metrics" in result.stdout

    def test_accepts_other_date_formats(self) -> None:
        pipeline = FakePipeline()
        with patch(
            "peer_feedback.cli.analyze.build_pipeline", return_value=pipeline
        ):
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "2024/01/01", "-e", "March 31, 2024"]
            )

        assert result.exit_code == 0, result.stdout
        assert pipeline.calls[0][2:4] == ("2024-01-01", "2024-03-31")

    def test_invalid_date(self) -> None:
        with patch("peer_feedback.cli.analyze.build_pipeline") as build:
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "not-a-date", "-e", "2024-03-31"]
            )

        assert result.exit_code == 1
        assert "Date validation error" in result.stdout
        build.assert_not_called()

    def test_start_after_end(self) -> None:
        with patch("peer_feedback.cli.analyze.build_pipeline") as build:
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "2024-03-31", "-e", "2024-01-01"]
            )

        assert result.exit_code == 1
        assert "must not be after" in result.stdout
        build.assert_not_called()

    def test_missing_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN")
        with patch("peer_feedback.cli.analyze.build_pipeline") as build:
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "2024-01-01", "-e", "2024-03-31"]
            )

        assert result.exit_code == 1
        assert "GITHUB_TOKEN" in result.stdout
        build.assert_not_called()

    def test_summary_failure_exits(self) -> None:
        pipeline = FakePipeline(error=SummaryError("Executive summary failed"))
        with patch(
            "peer_feedback.cli.analyze.build_pipeline", return_value=pipeline
        ):
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "2024-01-01", "-e", "2024-03-31"]
            )

        assert result.exit_code == 1
        assert "Executive summary failed" in result.stdout

    def test_writes_output_file(self, tmp_path: Path) -> None:
        output = tmp_path / "results" / "octocat.json"
        with patch(
            "peer_feedback.cli.analyze.build_pipeline", return_value=FakePipeline()
        ):
            result = runner.invoke(
                app,
                [
                    *BASE_ARGS,
                    "-s",
                    "2024-01-01",
                    "-e",
                    "2024-03-31",
                    "--output-path",
                    str(output),
                ],
            )

        assert result.exit_code == 0, result.stdout
        data = json.loads(output.read_text())
        assert data["user"] == "octocat"
        assert data["organization"] == "acme"
        assert data["executive_summary"] is None
        assert data["metrics"]["total"] == 0

    def test_missing_role_description_file(self) -> None:
        args = [*BASE_ARGS[:-1], "missing.md", "-s", "2024-01-01", "-e", "2024-03-31"]
        with patch("peer_feedback.cli.analyze.build_pipeline") as build:
            result = runner.invoke(app, args)

        assert result.exit_code == 2
        build.assert_not_called()

    def test_empty_role_description_file(self, tmp_path: Path) -> None:
        (tmp_path / "empty.md").write_text("  \n", encoding="utf-8")
        args = [*BASE_ARGS[:-1], "empty.md", "-s", "2024-01-01", "-e", "2024-03-31"]
        with patch("peer_feedback.cli.analyze.build_pipeline") as build:
            result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert "is empty" in result.stdout
        build.assert_not_called()

    def test_role_description_is_read_from_file(self, tmp_path: Path) -> None:
        (tmp_path / "staff.md").write_text(
            "Staff engineer\n\nOwns the billing platform.\n", encoding="utf-8"
        )
        args = [*BASE_ARGS[:-1], "staff.md", "-s", "2024-01-01", "-e", "2024-03-31"]
        pipeline = FakePipeline()
        with patch(
            "peer_feedback.cli.analyze.build_pipeline", return_value=pipeline
        ):
            result = runner.invoke(app, args)

        assert result.exit_code == 0, result.stdout
        assert pipeline.calls[0][4] == "Staff engineer\n\nOwns the billing platform."

    def test_github_error_exits(self) -> None:
        pipeline = FakePipeline(
            error=BadCredentialsException(401, {"message": "Bad credentials"}, {})
        )
        with patch(
            "peer_feedback.cli.analyze.build_pipeline", return_value=pipeline
        ):
            result = runner.invoke(
                app, [*BASE_ARGS, "-s", "2024-01-01", "-e", "2024-03-31"]
            )

        assert result.exit_code == 1
        assert "GitHub API error" in result.stdout
        assert "Bad credentials" in result.stdout
