"""Rate-limited, cursor-paginated execution of GitHub queries."""

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import requests
from github.GithubException import GithubException, RateLimitExceededException

from ..errors import TransientRemoteError
from ..utils.date_parser import parse_github_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")

# GitHub's hourly point budget for an authenticated user.
DEFAULT_QUOTA = 5000
DEFAULT_MIN_INTERVAL = 1.0
DEFAULT_TRANSIENT_RETRIES = 3
DEFAULT_PAGE_SIZE = 100
# Used when a rate limit error carries no reset time.
FALLBACK_RESET_SECONDS = 60.0
# Network failures and 5xx responses wait attempt x this many seconds.
TRANSIENT_BACKOFF_SECONDS = 5.0

# (query, variables) -> (response headers, GraphQL "data" object)
Transport = Callable[[str, dict[str, Any]], tuple[dict[str, Any], dict[str, Any]]]
# () -> (remaining, reset epoch seconds), or None when unknown
RateLimitReader = Callable[[], tuple[int, float] | None]


class QueryExecutor:
    """Issues remote queries under a shared rate-limit budget.

    The executor is the only place that talks to the network. It keeps a
    minimum delay between consecutive calls, tracks the remaining quota and
    reset instant reported by GitHub, and suspends the caller until the reset
    instant once the quota reaches zero. Transient failures (rate limits,
    timeouts, dropped connections, 5xx responses; see :func:`as_transient`)
    are absorbed by waiting and retrying. Every other remote error is raised
    unchanged so the caller can decide whether it is safe to skip.
    """

    def __init__(
        self,
        transport: Transport,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        default_quota: int = DEFAULT_QUOTA,
        max_transient_retries: int = DEFAULT_TRANSIENT_RETRIES,
        rate_limit_reader: RateLimitReader | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the executor.

        Args:
            transport: Callable performing one GraphQL request
            min_interval: Minimum seconds between consecutive calls
            default_quota: Quota restored after a reset
            max_transient_retries: Retries for rate limit errors before giving up
            rate_limit_reader: Reports quota after auxiliary (REST) calls
            clock: Monotonic clock used for the delay floor
            wall_clock: Epoch clock used against reset instants
            sleep: Sleep function, injectable for tests
        """
        self.transport = transport
        self.min_interval = min_interval
        self.default_quota = default_quota
        self.max_transient_retries = max_transient_retries
        self.rate_limit_reader = rate_limit_reader
        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep

        self.remaining = default_quota
        self.reset_at: float | None = None
        self.call_count = 0
        self._last_call: float | None = None

    def execute(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute one GraphQL query.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            The GraphQL ``data`` object of the response
        """
        query_variables = dict(variables or {})

        def _call() -> dict[str, Any]:
            headers, data = self.transport(query, query_variables)
            self._update_quota(headers, data)
            return data

        return self._run(_call)

    def call(self, fn: Callable[[], T]) -> T:
        """Run an auxiliary remote call under the same budget.

        Args:
            fn: Zero-argument callable performing the request

        Returns:
            Whatever ``fn`` returns
        """

        def _call() -> T:
            result = fn()
            if self.rate_limit_reader is not None:
                snapshot = self.rate_limit_reader()
                if snapshot is not None:
                    self.remaining, self.reset_at = snapshot
            return result

        return self._run(_call)

    def execute_paginated(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        limit: int | None = None,
        path: Sequence[str] = ("search",),
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Execute a connection query, following cursors until exhausted.

        The limit is checked after each page, so the result can exceed it by
        up to one page but never spans more pages than needed.

        Args:
            query: GraphQL document taking ``$first`` and ``$after``
            variables: Additional query variables
            limit: Stop once at least this many nodes are collected
            path: Keys leading from ``data`` to the connection object
            page_size: Value passed as ``$first``

        Returns:
            All collected nodes in arrival order
        """
        nodes: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            page_variables = {"first": page_size, **(variables or {}), "after": cursor}
            data = self.execute(query, page_variables)
            connection = _dig(data, path)

            nodes.extend(connection.get("nodes") or [])
            page_info = connection.get("pageInfo") or {}
            logger.debug(
                "Fetched page of %d nodes (total %d, has_next=%s)",
                len(connection.get("nodes") or []),
                len(nodes),
                page_info.get("hasNextPage"),
            )

            if limit is not None and len(nodes) >= limit:
                break
            if not page_info.get("hasNextPage") or not page_info.get("endCursor"):
                break
            cursor = page_info["endCursor"]

        return nodes

    def _run(self, call: Callable[[], T]) -> T:
        attempt = 0
        while True:
            self._wait_for_slot()
            self._last_call = self._clock()
            self.call_count += 1
            self.remaining = max(self.remaining - 1, 0)
            try:
                return call()
            except Exception as e:
                transient = as_transient(e)
                if transient is None:
                    raise
                attempt += 1
                if attempt > self.max_transient_retries:
                    logger.error(
                        "Giving up after %d transient failures: %s", attempt, e
                    )
                    if transient is e:
                        raise
                    raise transient from e
                logger.warning(
                    "Transient remote error (attempt %d/%d), retrying: %s",
                    attempt,
                    self.max_transient_retries,
                    e,
                )
                self._back_off(transient, attempt)

    def _wait_for_slot(self) -> None:
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < self.min_interval:
                self._sleep(self.min_interval - elapsed)

        if self.remaining <= 0:
            reset_at = self.reset_at if self.reset_at is not None else 0.0
            wait = reset_at - self._wall_clock()
            if wait > 0:
                logger.info("Rate limit exhausted, sleeping %.1f seconds", wait)
                self._sleep(wait)
            self.remaining = self.default_quota
            self.reset_at = None

    def _back_off(self, error: TransientRemoteError, attempt: int) -> None:
        if not error.rate_limited and error.reset_at is None:
            self._sleep(attempt * TRANSIENT_BACKOFF_SECONDS)
            return

        reset_at = error.reset_at
        if reset_at is None:
            reset_at = self._wall_clock() + FALLBACK_RESET_SECONDS
        # the wait itself happens in _wait_for_slot before the retry
        self.remaining = 0
        self.reset_at = reset_at

    def _update_quota(self, headers: dict[str, Any], data: dict[str, Any]) -> None:
        rate_limit = data.get("rateLimit") if isinstance(data, dict) else None
        if rate_limit and rate_limit.get("remaining") is not None:
            self.remaining = int(rate_limit["remaining"])
            if rate_limit.get("resetAt"):
                reset = parse_github_timestamp(rate_limit["resetAt"])
                self.reset_at = reset.timestamp()
            return

        lowered = {str(k).lower(): v for k, v in (headers or {}).items()}
        if "x-ratelimit-remaining" in lowered:
            self.remaining = int(lowered["x-ratelimit-remaining"])
            reset_at = _reset_from_headers(lowered)
            if reset_at is not None:
                self.reset_at = reset_at


def _reset_from_headers(headers: dict[str, Any]) -> float | None:
    for key, value in headers.items():
        if str(key).lower() == "x-ratelimit-reset":
            try:
                return float(value)
            except (TypeError, ValueError):
                return None
    return None


def _dig(data: dict[str, Any], path: Sequence[str]) -> dict[str, Any]:
    node: Any = data
    for key in path:
        if not isinstance(node, dict) or node.get(key) is None:
            raise ValueError(f"Response has no connection at {'.'.join(path)}")
        node = node[key]
    return node


def _is_graphql_rate_limited(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    errors = data.get("errors") or []
    return any(
        isinstance(error, dict) and error.get("type") == "RATE_LIMITED"
        for error in errors
    )


def as_transient(error: Exception) -> TransientRemoteError | None:
    """Classify a remote failure as transient, or return None.

    Transient failures are PyGithub rate limit errors, GraphQL ``RATE_LIMITED``
    errors (which PyGithub raises as a plain GithubException), 5xx responses,
    and request timeouts or connection failures.
    """
    if isinstance(error, TransientRemoteError):
        return error

    if isinstance(error, (requests.Timeout, requests.ConnectionError)):
        return TransientRemoteError(f"Network error: {error}", rate_limited=False)

    if isinstance(error, GithubException):
        rate_limited = isinstance(
            error, RateLimitExceededException
        ) or _is_graphql_rate_limited(error.data)
        if rate_limited:
            reset_at = _reset_from_headers(error.headers or {})
            return TransientRemoteError(f"Rate limited: {error}", reset_at=reset_at)
        if error.status is not None and error.status >= 500:
            return TransientRemoteError(f"Server error: {error}", rate_limited=False)

    return None
