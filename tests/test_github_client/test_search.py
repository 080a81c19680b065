"""Tests for contribution search functionality."""

from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import Mock

from peer_feedback.github_client.client import GitHubClient
from peer_feedback.github_client.models import ContributionRef, ContributionType, Role
from peer_feedback.github_client.search import (
    ContributionSearcher,
    SearchFacet,
    build_contribution_query,
    dedupe_contributions,
    node_to_ref,
    search_types_for_facet,
)


class TestBuildContributionQuery:
    """Test facet query building."""

    def test_authored_filters_on_created(self) -> None:
        query = build_contribution_query(
            SearchFacet.AUTHORED, "acme", "octocat", "2024-01-01", "2024-03-31"
        )
        assert query == "org:acme author:octocat created:2024-01-01..2024-03-31"

    def test_commented_filters_on_updated(self) -> None:
        query = build_contribution_query(
            SearchFacet.COMMENTED, "acme", "octocat", "2024-01-01", "2024-03-31"
        )
        assert query == "org:acme commenter:octocat updated:2024-01-01..2024-03-31"

    def test_reviewed_is_pull_requests_only(self) -> None:
        query = build_contribution_query(
            SearchFacet.REVIEWED, "acme", "octocat", "2024-01-01", "2024-03-31"
        )
        assert query == (
            "org:acme is:pr reviewed-by:octocat updated:2024-01-01..2024-03-31"
        )

    def test_search_types(self) -> None:
        """Discussions are searched for authored and commented, not reviewed."""
        assert search_types_for_facet(SearchFacet.AUTHORED) == ["ISSUE", "DISCUSSION"]
        assert search_types_for_facet(SearchFacet.COMMENTED) == [
            "ISSUE",
            "DISCUSSION",
        ]
        assert search_types_for_facet(SearchFacet.REVIEWED) == ["ISSUE"]


class TestNodeToRef:
    """Test conversion of search nodes."""

    def test_pull_request_node(self) -> None:
        node = {
            "__typename": "PullRequest",
            "title": "Fix resize crash",
            "url": "https://github.com/acme/widgets/pull/7",
            "number": 7,
            "updatedAt": "2024-01-02T00:00:00Z",
        }

        ref = node_to_ref(node, Role.REVIEWER)

        assert ref is not None
        assert ref.type == ContributionType.PULL_REQUEST
        assert (ref.owner, ref.repo, ref.number) == ("acme", "widgets", 7)
        assert ref.role == Role.REVIEWER
        assert ref.remote_updated_at == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_unknown_typename_is_dropped(self) -> None:
        assert node_to_ref({"__typename": "Repository"}, Role.AUTHOR) is None
        assert node_to_ref({}, Role.AUTHOR) is None

    def test_unparseable_url_is_dropped(self) -> None:
        node = {
            "__typename": "Issue",
            "url": "https://github.com/acme/widgets/commit/abc",
            "updatedAt": "2024-01-02T00:00:00Z",
        }
        assert node_to_ref(node, Role.AUTHOR) is None


class TestDedupeContributions:
    """Test role precedence when one URL is found under several facets."""

    def test_commented_and_reviewed_becomes_reviewer(
        self, make_ref: Callable[..., ContributionRef]
    ) -> None:
        commented = make_ref(7, ContributionType.PULL_REQUEST, Role.COMMENTER)
        reviewed = make_ref(7, ContributionType.PULL_REQUEST, Role.REVIEWER)

        result = dedupe_contributions([commented, reviewed])

        assert len(result) == 1
        assert result[0].role == Role.REVIEWER

    def test_author_beats_everything(
        self, make_ref: Callable[..., ContributionRef]
    ) -> None:
        refs = [
            make_ref(1, role=Role.COMMENTER),
            make_ref(1, role=Role.AUTHOR),
            make_ref(1, role=Role.REVIEWER),
        ]

        assert [r.role for r in dedupe_contributions(refs)] == [Role.AUTHOR]

    def test_first_seen_order_preserved(
        self, make_ref: Callable[..., ContributionRef]
    ) -> None:
        refs = [
            make_ref(3, role=Role.COMMENTER),
            make_ref(1, role=Role.AUTHOR),
            make_ref(3, role=Role.AUTHOR),
            make_ref(2, role=Role.COMMENTER),
        ]

        assert [r.number for r in dedupe_contributions(refs)] == [3, 1, 2]

    def test_keeps_newest_update_time(
        self, make_ref: Callable[..., ContributionRef]
    ) -> None:
        newer = datetime(2024, 2, 1, tzinfo=timezone.utc)
        refs = [
            make_ref(1, role=Role.AUTHOR),
            make_ref(1, role=Role.COMMENTER, updated_at=newer),
        ]

        result = dedupe_contributions(refs)

        assert result[0].role == Role.AUTHOR
        assert result[0].remote_updated_at == newer


class TestContributionSearcher:
    """Test ContributionSearcher class."""

    def test_init(self) -> None:
        mock_client = Mock(spec=GitHubClient)
        searcher = ContributionSearcher(mock_client)
        assert searcher.client == mock_client

    def test_runs_every_facet_and_dedupes(
        self, make_ref: Callable[..., ContributionRef]
    ) -> None:
        """Five searches are issued and their results collapsed by URL."""
        mock_client = Mock(spec=GitHubClient)

        def search(query: str, search_type: str, role: Role, limit=None):
            if search_type == "DISCUSSION":
                return []
            if role == Role.COMMENTER:
                return [make_ref(7, ContributionType.PULL_REQUEST, role)]
            if role == Role.REVIEWER:
                return [make_ref(7, ContributionType.PULL_REQUEST, role)]
            return [make_ref(42, ContributionType.ISSUE, role)]

        mock_client.search_contributions.side_effect = search

        results = ContributionSearcher(mock_client).search(
            "acme", "octocat", "2024-01-01", "2024-03-31", limit=10
        )

        assert mock_client.search_contributions.call_count == 5
        assert [(r.number, r.role) for r in results] == [
            (42, Role.AUTHOR),
            (7, Role.REVIEWER),
        ]
        for call in mock_client.search_contributions.call_args_list:
            assert call.kwargs["limit"] == 10
