"""Parse GitHub contribution URLs into repository coordinates."""

import re
from urllib.parse import urlparse

from ..errors import MalformedReference
from .models import ContributionLocator, ContributionType

GITHUB_HOSTS = {"github.com", "www.github.com"}

# path segment -> contribution type
_PATH_KINDS = {
    "issues": ContributionType.ISSUE,
    "pull": ContributionType.PULL_REQUEST,
    "discussions": ContributionType.DISCUSSION,
}

_PATH_PATTERN = re.compile(
    r"^/(?P<owner>[^/]+)/(?P<repo>[^/]+)/(?P<kind>issues|pull|discussions)"
    r"/(?P<number>\d+)/?$"
)


def parse_contribution_url(url: str) -> ContributionLocator:
    """Parse a GitHub issue, pull request or discussion URL.

    Args:
        url: URL such as https://github.com/acme/widgets/pull/42

    Returns:
        ContributionLocator for the URL

    Raises:
        MalformedReference: If the URL is not one of the three recognised shapes

    Example:
        >>> parse_contribution_url("https://github.com/acme/widgets/issues/7")
        ContributionLocator(owner='acme', repo='widgets', type=<...>, number=7)
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or parsed.netloc not in GITHUB_HOSTS:
        raise MalformedReference(f"Not a GitHub contribution URL: {url!r}")

    match = _PATH_PATTERN.match(parsed.path)
    if not match:
        raise MalformedReference(
            f"Unrecognised contribution path in {url!r}; expected "
            f"/owner/repo/(issues|pull|discussions)/<number>"
        )
    if {match.group("owner"), match.group("repo")} & {".", ".."}:
        raise MalformedReference(f"Invalid owner or repository name in {url!r}")

    return ContributionLocator(
        owner=match.group("owner"),
        repo=match.group("repo"),
        type=_PATH_KINDS[match.group("kind")],
        number=int(match.group("number")),
    )


def is_github_url(url: str) -> bool:
    """Return True if the URL points at github.com."""
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and parsed.netloc in GITHUB_HOSTS
