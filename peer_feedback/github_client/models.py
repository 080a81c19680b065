"""Pydantic models for GitHub contribution data.

These models map the GitHub GraphQL v4 and REST v3 response structures used
by the pipeline onto a flat, cache-friendly shape.
API Reference: https://docs.github.com/en/graphql/reference/objects
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ContributionType(str, Enum):
    """Kinds of contribution the pipeline understands."""

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    DISCUSSION = "discussion"


class Role(str, Enum):
    """The actor's relationship to a contribution."""

    AUTHOR = "author"
    REVIEWER = "reviewer"
    CONTRIBUTOR = "contributor"
    COMMENTER = "commenter"


# Lower value wins when one contribution is found under several facets.
ROLE_PRIORITY: dict[Role, int] = {
    Role.AUTHOR: 0,
    Role.REVIEWER: 1,
    Role.CONTRIBUTOR: 2,
    Role.COMMENTER: 3,
}


class ContributionLocator(BaseModel):
    """Repository coordinates of a single contribution.

    This is the identity key shared by both caches.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Repository owner or organization")
    repo: str = Field(..., description="Repository name")
    type: ContributionType = Field(..., description="Kind of contribution")
    number: int = Field(..., description="Issue, pull request or discussion number")

    def __str__(self) -> str:
        return f"{self.type.value} {self.owner}/{self.repo}#{self.number}"


class ContributionRef(BaseModel):
    """A contribution found during search, before detail is fetched."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Canonical GitHub URL of the contribution")
    type: ContributionType = Field(..., description="Kind of contribution")
    owner: str = Field(..., description="Repository owner or organization")
    repo: str = Field(..., description="Repository name")
    number: int = Field(..., description="Issue, pull request or discussion number")
    remote_updated_at: datetime = Field(
        ..., description="Last update time reported by the search (ISO 8601)"
    )
    role: Role = Field(Role.COMMENTER, description="Actor's role after dedup")
    title: str = Field("", description="Title, used for progress reporting")

    @property
    def locator(self) -> ContributionLocator:
        return ContributionLocator(
            owner=self.owner, repo=self.repo, type=self.type, number=self.number
        )


class GitHubComment(BaseModel):
    """A comment on an issue, pull request or discussion."""

    author: str = Field(..., description="Login of the comment author")
    body: str = Field("", description="Markdown content of the comment")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")


class ReviewComment(BaseModel):
    """An inline review comment attached to a file line."""

    body: str = Field("", description="Markdown content of the comment")
    path: str = Field(..., description="File the comment refers to")
    line: int | None = Field(None, description="Line number, if still resolvable")


class GitHubReview(BaseModel):
    """A pull request review."""

    author: str = Field(..., description="Login of the reviewer")
    body: str = Field("", description="Review summary text")
    state: str = Field(
        ..., description="APPROVED, CHANGES_REQUESTED, COMMENTED or DISMISSED"
    )
    created_at: datetime = Field(..., description="Submission time (ISO 8601)")
    comments: list[ReviewComment] = Field(
        default_factory=list, description="Inline comments left with the review"
    )


class ChangedFile(BaseModel):
    """Diff statistics for one file in one commit."""

    path: str = Field(..., description="Path of the changed file")
    additions: int = Field(0, description="Number of lines added")
    deletions: int = Field(0, description="Number of lines removed")
    patch: str | None = Field(None, description="Unified diff, when GitHub has one")


class GitHubCommit(BaseModel):
    """A commit belonging to a pull request, with per-file diff statistics."""

    oid: str = Field(..., description="Commit SHA")
    message: str = Field("", description="Commit message")
    author: str = Field("unknown", description="Login or name of the author")
    created_at: datetime | None = Field(None, description="Author date (ISO 8601)")
    changed_files: list[ChangedFile] = Field(
        default_factory=list, description="Files touched by the commit"
    )


class DiscussionAnswer(GitHubComment):
    """A discussion comment together with its threaded replies."""

    replies: list[GitHubComment] = Field(default_factory=list)


class _ContributionBase(BaseModel):
    title: str = Field(..., description="Title of the contribution")
    author: str = Field("unknown", description="Login of the author")
    body: str = Field("", description="Markdown description")
    url: str = Field(..., description="Canonical GitHub URL")
    owner: str = Field(..., description="Repository owner or organization")
    repo: str = Field(..., description="Repository name")
    number: int = Field(..., description="Number within the repository")
    created_at: datetime | None = Field(None, description="Creation time")
    updated_at: datetime = Field(..., description="Last remote update time")
    labels: list[str] = Field(default_factory=list, description="Label names")
    comments: list[GitHubComment] = Field(
        default_factory=list, description="Top-level comments"
    )

    @property
    def locator(self) -> ContributionLocator:
        return ContributionLocator(
            owner=self.owner,
            repo=self.repo,
            type=ContributionType(getattr(self, "type")),
            number=self.number,
        )


class IssueDetail(_ContributionBase):
    """Full detail of a GitHub issue."""

    type: Literal["issue"] = "issue"
    state: Literal["open", "closed"] = Field(..., description="Issue state")


class PullRequestDetail(_ContributionBase):
    """Full detail of a GitHub pull request."""

    type: Literal["pull_request"] = "pull_request"
    state: Literal["open", "closed", "merged"] = Field(
        ..., description="Pull request state"
    )
    reviews: list[GitHubReview] = Field(default_factory=list)
    commits: list[GitHubCommit] = Field(default_factory=list)


class DiscussionDetail(_ContributionBase):
    """Full detail of a GitHub discussion."""

    type: Literal["discussion"] = "discussion"
    state: Literal["open", "closed"] = Field("open", description="Discussion state")
    category: str = Field("", description="Discussion category name")
    is_answered: bool = Field(False, description="Whether an answer was accepted")
    answer: DiscussionAnswer | None = Field(None, description="Accepted answer")


ContributionDetail = Annotated[
    IssueDetail | PullRequestDetail | DiscussionDetail,
    Field(discriminator="type"),
]
