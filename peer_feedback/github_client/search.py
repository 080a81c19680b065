"""Contribution search: facet query building and role deduplication.

A search result does not say how the user took part in it, so each role is
its own query. Authored and commented each search issues and pull requests,
then discussions; reviewed searches pull requests only. That makes five
searches per run.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..errors import MalformedReference
from ..utils.date_parser import parse_github_timestamp
from .locator import parse_contribution_url
from .models import ROLE_PRIORITY, ContributionRef, ContributionType, Role

if TYPE_CHECKING:
    from .client import GitHubClient

logger = logging.getLogger(__name__)


class SearchFacet(str, Enum):
    """The angles from which an actor's activity is searched."""

    AUTHORED = "authored"
    COMMENTED = "commented"
    REVIEWED = "reviewed"


FACET_ROLES: dict[SearchFacet, Role] = {
    SearchFacet.AUTHORED: Role.AUTHOR,
    SearchFacet.COMMENTED: Role.COMMENTER,
    SearchFacet.REVIEWED: Role.REVIEWER,
}

_TYPENAMES: dict[str, ContributionType] = {
    "Issue": ContributionType.ISSUE,
    "PullRequest": ContributionType.PULL_REQUEST,
    "Discussion": ContributionType.DISCUSSION,
}


def search_types_for_facet(facet: SearchFacet) -> list[str]:
    """Return the GraphQL ``SearchType`` values a facet is searched with.

    Reviews only exist on pull requests, so the reviewed facet never searches
    discussions.
    """
    if facet == SearchFacet.REVIEWED:
        return ["ISSUE"]
    return ["ISSUE", "DISCUSSION"]


def build_contribution_query(
    facet: SearchFacet,
    org: str,
    user: str,
    start_date: str,
    end_date: str,
) -> str:
    """Build a GitHub search query string for one facet.

    Authored items are filtered on creation date; commented and reviewed items
    on update date, since the actor's activity can follow creation by months.

    Args:
        facet: Search facet
        org: Organization name
        user: GitHub login of the actor
        start_date: Start of range, YYYY-MM-DD
        end_date: End of range, YYYY-MM-DD

    Returns:
        GitHub search query string

    Example:
        >>> build_contribution_query(
        ...     SearchFacet.REVIEWED, "acme", "octocat", "2024-01-01", "2024-03-31"
        ... )
        "org:acme is:pr reviewed-by:octocat updated:2024-01-01..2024-03-31"
    """
    date_range = f"{start_date}..{end_date}"

    if facet == SearchFacet.AUTHORED:
        query_parts = [f"org:{org}", f"author:{user}", f"created:{date_range}"]
    elif facet == SearchFacet.COMMENTED:
        query_parts = [f"org:{org}", f"commenter:{user}", f"updated:{date_range}"]
    else:
        query_parts = [
            f"org:{org}",
            "is:pr",
            f"reviewed-by:{user}",
            f"updated:{date_range}",
        ]

    return " ".join(query_parts)


def node_to_ref(node: dict[str, Any], role: Role) -> ContributionRef | None:
    """Convert one search result node into a ContributionRef.

    Returns None for nodes that are not contributions (empty fragments) or
    whose URL cannot be parsed; the latter is logged.
    """
    typename = node.get("__typename")
    if typename not in _TYPENAMES or not node.get("url"):
        return None

    try:
        locator = parse_contribution_url(node["url"])
    except MalformedReference as e:
        logger.warning("Skipping search result [phase=search]: %s", e)
        return None

    return ContributionRef(
        url=node["url"],
        type=_TYPENAMES[typename],
        owner=locator.owner,
        repo=locator.repo,
        number=locator.number,
        remote_updated_at=parse_github_timestamp(node["updatedAt"]),
        role=role,
        title=node.get("title") or "",
    )


def dedupe_contributions(refs: Iterable[ContributionRef]) -> list[ContributionRef]:
    """Collapse contributions found under several facets to one entry per URL.

    The surviving role follows author > reviewer > contributor > commenter;
    the order of first appearance is preserved.

    Args:
        refs: Search results from all facets, in search order

    Returns:
        One ContributionRef per URL
    """
    by_url: dict[str, ContributionRef] = {}

    for ref in refs:
        existing = by_url.get(ref.url)
        if existing is None:
            by_url[ref.url] = ref
            continue

        if ROLE_PRIORITY[ref.role] < ROLE_PRIORITY[existing.role]:
            newest = max(existing.remote_updated_at, ref.remote_updated_at)
            by_url[ref.url] = ref.model_copy(update={"remote_updated_at": newest})
        elif ref.remote_updated_at > existing.remote_updated_at:
            by_url[ref.url] = existing.model_copy(
                update={"remote_updated_at": ref.remote_updated_at}
            )

    return list(by_url.values())


class ContributionSearcher:
    """High-level interface for searching an actor's contributions."""

    def __init__(self, client: "GitHubClient"):
        """Initialize searcher with GitHub client.

        Args:
            client: Authenticated GitHubClient instance
        """
        self.client = client

    def search(
        self,
        org: str,
        user: str,
        start_date: str,
        end_date: str,
        limit: int | None = None,
    ) -> list[ContributionRef]:
        """Search all facets and return deduplicated contributions.

        Args:
            org: Organization name
            user: GitHub login of the actor
            start_date: Start of range, YYYY-MM-DD
            end_date: End of range, YYYY-MM-DD
            limit: Per-search result limit (checked after each page)

        Returns:
            Deduplicated ContributionRefs in first-seen order
        """
        found: list[ContributionRef] = []

        for facet in SearchFacet:
            query = build_contribution_query(facet, org, user, start_date, end_date)
            for search_type in search_types_for_facet(facet):
                refs = self.client.search_contributions(
                    query, search_type, FACET_ROLES[facet], limit=limit
                )
                logger.info(
                    "Facet %s (%s) returned %d results",
                    facet.value,
                    search_type,
                    len(refs),
                )
                found.extend(refs)

        contributions = dedupe_contributions(found)
        logger.info(
            "Found %d unique contributions for %s in %s", len(contributions), user, org
        )
        return contributions
