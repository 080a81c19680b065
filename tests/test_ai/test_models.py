"""Tests for AI response models."""

from collections.abc import Callable
from typing import Any

import pytest
from pydantic import ValidationError

from peer_feedback.ai.models import ContributionAnalysis, ExecutiveSummary


def summary_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "user": "octocat",
        "role_summary": "Mostly authored fixes.",
        "metrics_summary": "Two issues, one pull request.",
        "high_level_performance_summary": "Solid, steady work.",
        "key_strengths": ["Thorough tests", "Clear descriptions"],
        "areas_for_improvement": ["Review more", "Smaller PRs"],
        "standout_contributions": [
            {
                "url": "https://github.com/acme/widgets/issues/1",
                "contribution_type": "issue",
                "reason": "Clear reproduction",
                "sentiment": "positive",
            }
        ],
    }
    payload.update(overrides)
    return payload


class TestContributionAnalysis:
    """Test ContributionAnalysis model."""

    def test_valid(self, make_payload: Callable[..., dict[str, Any]]) -> None:
        analysis = ContributionAnalysis.model_validate(make_payload())
        assert analysis.impact.importance == "medium"

    def test_accepts_github_urls(
        self, make_payload: Callable[..., dict[str, Any]]
    ) -> None:
        payload = make_payload()
        payload["referenced_urls"] = ["https://github.com/acme/widgets/pull/7"]

        analysis = ContributionAnalysis.model_validate(payload)

        assert analysis.referenced_urls == ["https://github.com/acme/widgets/pull/7"]

    def test_rejects_foreign_urls(
        self, make_payload: Callable[..., dict[str, Any]]
    ) -> None:
        payload = make_payload()
        payload["referenced_urls"] = ["https://example.com/blog"]

        with pytest.raises(ValidationError, match="github.com"):
            ContributionAnalysis.model_validate(payload)

    def test_rejects_unknown_levels(
        self, make_payload: Callable[..., dict[str, Any]]
    ) -> None:
        with pytest.raises(ValidationError):
            ContributionAnalysis.model_validate(make_payload(quality="superb"))

    def test_forbids_extra_fields(
        self, make_payload: Callable[..., dict[str, Any]]
    ) -> None:
        payload = make_payload()
        payload["noteworthy"] = True

        with pytest.raises(ValidationError):
            ContributionAnalysis.model_validate(payload)


class TestExecutiveSummary:
    """Test ExecutiveSummary model."""

    def test_valid(self) -> None:
        summary = ExecutiveSummary.model_validate(summary_payload())
        assert len(summary.key_strengths) == 2

    @pytest.mark.parametrize(
        "field", ["key_strengths", "areas_for_improvement"]
    )
    def test_exactly_two_items(self, field: str) -> None:
        with pytest.raises(ValidationError):
            ExecutiveSummary.model_validate(summary_payload(**{field: ["only one"]}))
        with pytest.raises(ValidationError):
            ExecutiveSummary.model_validate(
                summary_payload(**{field: ["one", "two", "three"]})
            )

    def test_standout_count_bounds(self) -> None:
        standout = summary_payload()["standout_contributions"][0]

        with pytest.raises(ValidationError):
            ExecutiveSummary.model_validate(
                summary_payload(standout_contributions=[])
            )
        with pytest.raises(ValidationError):
            ExecutiveSummary.model_validate(
                summary_payload(standout_contributions=[standout] * 4)
            )
