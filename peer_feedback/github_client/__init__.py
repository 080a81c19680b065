"""GitHub client package for API interaction."""

from .client import GitHubClient
from .executor import QueryExecutor
from .locator import parse_contribution_url
from .models import (
    ContributionDetail,
    ContributionLocator,
    ContributionRef,
    ContributionType,
    DiscussionDetail,
    IssueDetail,
    PullRequestDetail,
    Role,
)
from .search import ContributionSearcher, build_contribution_query

__all__ = [
    "GitHubClient",
    "QueryExecutor",
    "ContributionSearcher",
    "ContributionDetail",
    "ContributionLocator",
    "ContributionRef",
    "ContributionType",
    "DiscussionDetail",
    "IssueDetail",
    "PullRequestDetail",
    "Role",
    "build_contribution_query",
    "parse_contribution_url",
]
