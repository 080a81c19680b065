"""Test configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from peer_feedback.ai.models import AnalysisRecord
from peer_feedback.github_client.models import (
    ContributionRef,
    ContributionType,
    IssueDetail,
    PullRequestDetail,
    Role,
)

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JAN_2 = datetime(2024, 1, 2, tzinfo=timezone.utc)

_URL_KINDS = {
    ContributionType.ISSUE: "issues",
    ContributionType.PULL_REQUEST: "pull",
    ContributionType.DISCUSSION: "discussions",
}


def contribution_url(
    number: int,
    type: ContributionType = ContributionType.ISSUE,
    owner: str = "acme",
    repo: str = "widgets",
) -> str:
    return f"https://github.com/{owner}/{repo}/{_URL_KINDS[type]}/{number}"


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Create temporary cache directory."""
    return tmp_path / "cache"


@pytest.fixture
def make_ref() -> Callable[..., ContributionRef]:
    """Factory for contribution references found by search."""

    def _make(
        number: int = 42,
        type: ContributionType = ContributionType.ISSUE,
        role: Role = Role.AUTHOR,
        updated_at: datetime = JAN_1,
        owner: str = "acme",
        repo: str = "widgets",
    ) -> ContributionRef:
        return ContributionRef(
            url=contribution_url(number, type, owner, repo),
            type=type,
            owner=owner,
            repo=repo,
            number=number,
            remote_updated_at=updated_at,
            role=role,
            title=f"Contribution {number}",
        )

    return _make


@pytest.fixture
def make_issue() -> Callable[..., IssueDetail]:
    """Factory for issue detail."""

    def _make(number: int = 42, updated_at: datetime = JAN_1) -> IssueDetail:
        return IssueDetail(
            title="Widgets crash on resize",
            author="octocat",
            body="Steps to reproduce...",
            url=contribution_url(number),
            owner="acme",
            repo="widgets",
            number=number,
            created_at=JAN_1,
            updated_at=updated_at,
            state="closed",
            labels=["bug"],
        )

    return _make


@pytest.fixture
def make_pull_request() -> Callable[..., PullRequestDetail]:
    """Factory for pull request detail."""

    def _make(
        number: int = 7, state: str = "merged", updated_at: datetime = JAN_1
    ) -> PullRequestDetail:
        return PullRequestDetail(
            title="Fix resize crash",
            author="octocat",
            body="Fixes #42",
            url=contribution_url(number, ContributionType.PULL_REQUEST),
            owner="acme",
            repo="widgets",
            number=number,
            created_at=JAN_1,
            updated_at=updated_at,
            state=state,
        )

    return _make


def analysis_payload(
    role: str = "author",
    importance: str = "medium",
    quality: str = "good",
    alignment: str = "moderate",
) -> dict[str, Any]:
    """Agent output for one contribution, as a plain dict."""
    return {
        "role": role,
        "impact": {"summary": "Fixed a crash.", "importance": importance},
        "technical_quality": {
            "applicable": True,
            "analysis": "Small, well-tested change.",
            "complexity": "low",
            "quality": quality,
            "standards_adherence": "good",
        },
        "collaboration": {
            "analysis": "Responded to review quickly.",
            "communication": "good",
            "helpfulness": "good",
        },
        "alignment_with_goals": {
            "analysis": "Core product work.",
            "alignment": alignment,
        },
        "referenced_urls": [],
    }


@pytest.fixture
def make_record() -> Callable[..., AnalysisRecord]:
    """Factory for accepted analyses."""

    def _make(
        number: int = 42,
        type: ContributionType = ContributionType.ISSUE,
        **payload: str,
    ) -> AnalysisRecord:
        return AnalysisRecord(
            **analysis_payload(**payload),
            user="octocat",
            url=contribution_url(number, type),
            contribution_type=type,
            owner="acme",
            repo="widgets",
            number=number,
        )

    return _make


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory for raw analysis agent output."""
    return analysis_payload
