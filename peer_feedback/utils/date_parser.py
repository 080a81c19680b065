"""Date handling for contribution search ranges and GitHub timestamps."""

from datetime import datetime, timezone

import typer

# Accepted --start-date / --end-date spellings, tried in order
DATE_INPUT_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
)

SEARCH_DATE_FORMAT = "%Y-%m-%d"


def parse_date_input(value: str) -> datetime:
    """Parse a date given on the command line.

    ISO dates (``2024-01-31``, ``2024/01/31``, ``2024-01-31T09:00:00Z``) and
    written-out dates (``January 31, 2024``, ``Jan 31 2024``) are accepted.

    Raises:
        ValueError: If no accepted format matches
    """
    text = value.strip()
    for date_format in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            pass

    raise ValueError(
        f"Unable to parse date '{value}'. Use YYYY-MM-DD (for example "
        f"2024-01-31) or a written date such as 'January 31, 2024'"
    )


def _warn_if_future(label: str, value: datetime, now: datetime) -> None:
    if value > now:
        typer.echo(
            f"Warning: {label} date {value.strftime(SEARCH_DATE_FORMAT)} "
            "is in the future",
            err=True,
        )


def validate_date_range(start: datetime | None, end: datetime | None) -> None:
    """Check that a search range is ordered.

    Equal start and end dates are accepted and cover a single day. Dates in
    the future only produce a warning on stderr.

    Raises:
        ValueError: If start is after end
    """
    if start is not None and end is not None and start > end:
        raise ValueError(
            f"Start date ({start.strftime(SEARCH_DATE_FORMAT)}) must not be "
            f"after end date ({end.strftime(SEARCH_DATE_FORMAT)})"
        )

    now = datetime.now()
    if start is not None:
        _warn_if_future("Start", start, now)
    if end is not None:
        _warn_if_future("End", end, now)


def format_datetime_for_github(dt: datetime) -> str:
    """Render a date the way GitHub search qualifiers expect (YYYY-MM-DD)."""
    return dt.strftime(SEARCH_DATE_FORMAT)


def parse_github_timestamp(value: str | datetime) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.

    Args:
        value: Timestamp such as ``2024-01-01T00:00:00Z`` or a datetime

    Returns:
        Timezone-aware datetime in UTC
    """
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
