"""GitHub API client using PyGitHub."""

import logging
import os
from typing import Any

from github import Github
from github.Commit import Commit
from github.GithubException import UnknownObjectException

from ..errors import ConfigurationError, ContributionNotFound
from ..utils.date_parser import parse_github_timestamp
from .executor import DEFAULT_MIN_INTERVAL, QueryExecutor
from .models import (
    ChangedFile,
    ContributionDetail,
    ContributionLocator,
    ContributionRef,
    ContributionType,
    DiscussionAnswer,
    DiscussionDetail,
    GitHubComment,
    GitHubCommit,
    GitHubReview,
    IssueDetail,
    PullRequestDetail,
    ReviewComment,
    Role,
)
from .queries import (
    DISCUSSION_DETAIL_QUERY,
    ISSUE_DETAIL_QUERY,
    PULL_REQUEST_DETAIL_QUERY,
    SEARCH_CONTRIBUTIONS_QUERY,
)
from .search import node_to_ref

logger = logging.getLogger(__name__)


def _login(actor: dict[str, Any] | None) -> str:
    """Return an actor login, tolerating deleted ("ghost") accounts."""
    if not actor:
        return "unknown"
    return actor.get("login") or "unknown"


def _names(connection: dict[str, Any] | None) -> list[str]:
    return [node["name"] for node in (connection or {}).get("nodes") or [] if node]


def _comments(connection: dict[str, Any] | None) -> list[GitHubComment]:
    return [
        GitHubComment(
            author=_login(node.get("author")),
            body=node.get("body") or "",
            created_at=parse_github_timestamp(node["createdAt"]),
        )
        for node in (connection or {}).get("nodes") or []
        if node
    ]


class GitHubClient:
    """GitHub API client with rate limiting and authentication.

    All remote calls, GraphQL and REST alike, go through a single
    QueryExecutor so they share one rate-limit budget.
    """

    def __init__(
        self,
        token: str | None = None,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        executor: QueryExecutor | None = None,
    ):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
            min_interval: Minimum delay between consecutive API calls
            executor: Pre-built executor, mainly for tests
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ConfigurationError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.github = Github(self.token)
        self.executor = executor or QueryExecutor(
            transport=self._graphql_transport,
            min_interval=min_interval,
            rate_limit_reader=self._read_rate_limit,
        )

    def _graphql_transport(
        self, query: str, variables: dict[str, Any]
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Send one GraphQL request through PyGithub's requester."""
        headers, body = self.github.requester.graphql_query(query, variables)
        return headers, body.get("data") or {}

    def _read_rate_limit(self) -> tuple[int, float] | None:
        """Report the quota PyGithub recorded from the last REST response."""
        remaining, _limit = self.github.rate_limiting
        reset = self.github.rate_limiting_resettime
        if remaining < 0 or not reset:
            return None
        return remaining, float(reset)

    def search_contributions(
        self,
        search_query: str,
        search_type: str,
        role: Role,
        limit: int | None = None,
    ) -> list[ContributionRef]:
        """Run one paginated search and convert the results.

        Args:
            search_query: GitHub search query string
            search_type: GraphQL SearchType (ISSUE or DISCUSSION)
            role: Role to tag every result with
            limit: Stop paginating once this many results were collected

        Returns:
            List of ContributionRef objects
        """
        logger.debug("Searching (%s) with query: %s", search_type, search_query)
        nodes = self.executor.execute_paginated(
            SEARCH_CONTRIBUTIONS_QUERY,
            {"searchQuery": search_query, "type": search_type},
            limit=limit,
        )

        refs = []
        for node in nodes:
            ref = node_to_ref(node or {}, role)
            if ref is not None:
                refs.append(ref)
        return refs

    def get_contribution(
        self, locator: ContributionLocator | ContributionRef
    ) -> ContributionDetail:
        """Fetch full detail for any contribution type.

        Raises:
            ContributionNotFound: If the identifier does not resolve
        """
        if locator.type == ContributionType.ISSUE:
            return self.get_issue(locator.owner, locator.repo, locator.number)
        if locator.type == ContributionType.PULL_REQUEST:
            return self.get_pull_request(locator.owner, locator.repo, locator.number)
        return self.get_discussion(locator.owner, locator.repo, locator.number)

    def _fetch_node(
        self, query: str, field: str, owner: str, repo: str, number: int
    ) -> dict[str, Any]:
        label = f"{field} {owner}/{repo}#{number}"
        try:
            data = self.executor.execute(
                query, {"owner": owner, "repo": repo, "number": number}
            )
        except UnknownObjectException as e:
            raise ContributionNotFound(f"Could not find {label}") from e

        node = (data.get("repository") or {}).get(field)
        if not node:
            raise ContributionNotFound(f"Could not find {label}")
        return node

    def get_issue(self, owner: str, repo: str, number: int) -> IssueDetail:
        """Get a specific issue with its labels and comments."""
        node = self._fetch_node(ISSUE_DETAIL_QUERY, "issue", owner, repo, number)

        return IssueDetail(
            title=node["title"],
            author=_login(node.get("author")),
            body=node.get("body") or "",
            url=node["url"],
            owner=owner,
            repo=repo,
            number=number,
            created_at=node.get("createdAt"),
            updated_at=parse_github_timestamp(node["updatedAt"]),
            state=node["state"].lower(),
            labels=_names(node.get("labels")),
            comments=_comments(node.get("comments")),
        )

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestDetail:
        """Get a pull request with comments, reviews and per-commit diffs."""
        node = self._fetch_node(
            PULL_REQUEST_DETAIL_QUERY, "pullRequest", owner, repo, number
        )

        reviews = [
            GitHubReview(
                author=_login(review.get("author")),
                body=review.get("body") or "",
                state=review["state"],
                created_at=parse_github_timestamp(review["createdAt"]),
                comments=[
                    ReviewComment(
                        body=comment.get("body") or "",
                        path=comment["path"],
                        line=comment.get("line"),
                    )
                    for comment in (review.get("comments") or {}).get("nodes") or []
                    if comment
                ],
            )
            for review in (node.get("reviews") or {}).get("nodes") or []
            if review
        ]

        return PullRequestDetail(
            title=node["title"],
            author=_login(node.get("author")),
            body=node.get("body") or "",
            url=node["url"],
            owner=owner,
            repo=repo,
            number=number,
            created_at=node.get("createdAt"),
            updated_at=parse_github_timestamp(node["updatedAt"]),
            state=node["state"].lower(),
            labels=_names(node.get("labels")),
            comments=_comments(node.get("comments")),
            reviews=reviews,
            commits=self.get_pull_request_commits(owner, repo, number),
        )

    def get_pull_request_commits(
        self, owner: str, repo: str, number: int
    ) -> list[GitHubCommit]:
        """List pull request commits with one diff-statistics call per commit."""
        repository = self.github.get_repo(f"{owner}/{repo}", lazy=True)

        try:
            shas = self.executor.call(
                lambda: [c.sha for c in repository.get_pull(number).get_commits()]
            )
        except UnknownObjectException as e:
            raise ContributionNotFound(
                f"Could not list commits for pull request {owner}/{repo}#{number}"
            ) from e

        commits = []
        for sha in shas:
            commits.append(
                self.executor.call(
                    lambda sha=sha: self._convert_commit(repository.get_commit(sha))
                )
            )
        logger.debug(
            "Fetched %d commits for pull request %s/%s#%d",
            len(commits),
            owner,
            repo,
            number,
        )
        return commits

    def _convert_commit(self, commit: Commit) -> GitHubCommit:
        """Convert PyGitHub commit to our model."""
        git_author = commit.commit.author
        author = None
        if commit.author is not None:
            author = commit.author.login
        if not author and git_author is not None:
            author = git_author.name

        return GitHubCommit(
            oid=commit.sha,
            message=commit.commit.message,
            author=author or "unknown",
            created_at=git_author.date if git_author is not None else None,
            changed_files=[
                ChangedFile(
                    path=changed.filename,
                    additions=changed.additions,
                    deletions=changed.deletions,
                    patch=changed.patch,
                )
                for changed in commit.files
            ],
        )

    def get_discussion(self, owner: str, repo: str, number: int) -> DiscussionDetail:
        """Get a discussion with its comments and accepted answer."""
        node = self._fetch_node(
            DISCUSSION_DETAIL_QUERY, "discussion", owner, repo, number
        )

        answer = None
        if node.get("answer"):
            raw_answer = node["answer"]
            answer = DiscussionAnswer(
                author=_login(raw_answer.get("author")),
                body=raw_answer.get("body") or "",
                created_at=parse_github_timestamp(raw_answer["createdAt"]),
                replies=_comments(raw_answer.get("replies")),
            )

        return DiscussionDetail(
            title=node["title"],
            author=_login(node.get("author")),
            body=node.get("body") or "",
            url=node["url"],
            owner=owner,
            repo=repo,
            number=number,
            created_at=node.get("createdAt"),
            updated_at=parse_github_timestamp(node["updatedAt"]),
            state="closed" if node.get("closed") else "open",
            category=(node.get("category") or {}).get("name", ""),
            is_answered=bool(node.get("isAnswered")),
            answer=answer,
            labels=_names(node.get("labels")),
            comments=_comments(node.get("comments")),
        )
