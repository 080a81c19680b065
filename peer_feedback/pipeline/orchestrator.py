"""Run orchestration: search, fetch, analyze and summarize one actor's work."""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Protocol

from pydantic import BaseModel, Field

from ..ai.analysis import ContributionAnalyzer, ExecutiveSummarizer
from ..ai.models import AnalysisRecord, ExecutiveSummary
from ..errors import ConfigurationError, SummaryError
from ..github_client.models import (
    ContributionDetail,
    ContributionLocator,
    ContributionRef,
    PullRequestDetail,
)
from ..github_client.search import ContributionSearcher
from ..storage.cache import AnalysisCache, DetailCache
from .metrics import ContributionMetrics, aggregate_metrics
from .phases import Effect, Event, Phase, PhaseState, SkippedContribution, transition

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF = 2.0


class DetailFetcher(Protocol):
    def get_contribution(self, locator: ContributionLocator) -> ContributionDetail: ...


class RunResult(BaseModel):
    """Everything a run produced; written as JSON by ``--output-path``."""

    user: str
    organization: str
    start_date: str
    end_date: str
    contributions: list[ContributionRef] = Field(default_factory=list)
    analyses: list[AnalysisRecord] = Field(default_factory=list)
    metrics: ContributionMetrics = Field(default_factory=ContributionMetrics)
    executive_summary: ExecutiveSummary | None = None
    skipped: list[SkippedContribution] = Field(default_factory=list)


class ContributionPipeline:
    """Drives a single run through its phases, one contribution at a time.

    Per-contribution fetch and analysis failures are logged, recorded as
    skipped and do not stop the run. A failure while summarizing, or any
    ConfigurationError, ends the run.
    """

    def __init__(
        self,
        searcher: ContributionSearcher,
        fetcher: DetailFetcher,
        detail_cache: DetailCache,
        analysis_cache: AnalysisCache,
        analyzer: ContributionAnalyzer,
        summarizer: ExecutiveSummarizer,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the pipeline.

        Args:
            searcher: Finds the actor's contributions
            fetcher: Retrieves full contribution detail (usually GitHubClient)
            detail_cache: Cache of fetched detail
            analysis_cache: Cache of analyses; bound to the actor on run
            analyzer: Per-contribution analysis collaborator
            summarizer: Executive summary collaborator
            max_attempts: Analysis attempts per contribution
            retry_backoff: Base delay; attempt n waits n * retry_backoff
            sleep: Async sleep, injectable for tests
        """
        self.searcher = searcher
        self.fetcher = fetcher
        self.detail_cache = detail_cache
        self.analysis_cache = analysis_cache
        self.analyzer = analyzer
        self.summarizer = summarizer
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff = retry_backoff
        self._sleep = sleep
        self._user = ""
        self._role_description = ""

    async def run(
        self,
        organization: str,
        user: str,
        start_date: str,
        end_date: str,
        role_description: str,
        limit: int | None = None,
    ) -> RunResult:
        """Run every phase for one actor and return the result.

        Args:
            organization: GitHub organization to search
            user: GitHub login of the actor
            start_date: Start of range, YYYY-MM-DD
            end_date: End of range, YYYY-MM-DD
            role_description: The actor's job role, given to both collaborators
            limit: Per-search result limit

        Raises:
            SummaryError: If the executive summary could not be produced
            ConfigurationError: If the pipeline is wired incorrectly
        """
        self.analysis_cache.bind_actor(user)
        self._user = user
        self._role_description = role_description

        state = PhaseState()
        handlers: dict[Effect, Callable[[PhaseState], Awaitable[Event]]] = {
            Effect.FETCH: self._fetch,
            Effect.ANALYZE: self._analyze,
            Effect.SUMMARIZE: self._summarize,
        }

        event = self._search(state, organization, start_date, end_date, limit)
        while True:
            next_phase, effects = transition(state.phase, event)
            logger.debug(
                "Phase %s --%s--> %s", state.phase.value, event.value, next_phase.value
            )
            state.phase = next_phase
            if Effect.FINISH in effects:
                break
            for effect in effects:
                event = await handlers[effect](state)

        logger.info(
            "Run complete: %d analysed, %d skipped",
            len(state.analyses),
            len(state.skipped),
        )
        return RunResult(
            user=user,
            organization=organization,
            start_date=start_date,
            end_date=end_date,
            contributions=state.contributions,
            analyses=state.analyses,
            metrics=state.metrics or aggregate_metrics([]),
            executive_summary=state.summary,
            skipped=state.skipped,
        )

    def _search(
        self,
        state: PhaseState,
        organization: str,
        start_date: str,
        end_date: str,
        limit: int | None,
    ) -> Event:
        contributions = self.searcher.search(
            organization, self._user, start_date, end_date, limit=limit
        )
        state.contributions = contributions
        state.pending = deque(contributions)
        return Event.SEARCH_COMPLETED

    def _skip(
        self, state: PhaseState, ref: ContributionRef, phase: Phase, cause: Exception
    ) -> None:
        logger.warning(
            "Skipping %s [phase=%s]: %s: %s",
            ref.locator,
            phase.value,
            type(cause).__name__,
            cause,
        )
        state.skipped.append(
            SkippedContribution(
                url=ref.url,
                identity=str(ref.locator),
                phase=phase,
                cause=f"{type(cause).__name__}: {cause}",
            )
        )

    async def _fetch(self, state: PhaseState) -> Event:
        total = len(state.pending)
        while state.pending:
            ref = state.pending.popleft()
            key = ref.locator
            logger.info(
                "Fetching %d/%d: %s", total - len(state.pending), total, ref.url
            )

            try:
                cached = self.detail_cache.get(key, ref.remote_updated_at)
                if cached is not None:
                    detail = cached.data
                else:
                    detail = self.fetcher.get_contribution(key)
                    self.detail_cache.set(key, detail)
                    self.analysis_cache.clear(key.owner, key.repo, key.type, key.number)
            except ConfigurationError:
                raise
            except Exception as e:
                self._skip(state, ref, Phase.FETCH, e)
                continue

            state.fetched[key] = (ref, detail)

        return Event.FETCH_COMPLETED

    async def _analyze(self, state: PhaseState) -> Event:
        for key, (ref, detail) in state.fetched.items():
            if isinstance(detail, PullRequestDetail) and detail.state == "open":
                logger.info("Excluding open pull request %s", detail.url)
                continue

            cached = self.analysis_cache.get(key, detail.updated_at)
            if cached is not None:
                state.analyses.append(cached.data)
                continue

            record = await self._analyze_with_retry(state, ref, detail)
            if record is None:
                continue

            try:
                self.analysis_cache.set(key, record, detail.updated_at)
            except OSError as e:
                logger.warning("Could not cache analysis of %s: %s", ref.url, e)
            state.analyses.append(record)

        return Event.ANALYSIS_COMPLETED

    async def _analyze_with_retry(
        self, state: PhaseState, ref: ContributionRef, detail: ContributionDetail
    ) -> AnalysisRecord | None:
        attempt = 1
        while True:
            try:
                return await self.analyzer.analyze(
                    self._user, ref.role, detail, self._role_description
                )
            except ConfigurationError:
                raise
            except Exception as e:
                if attempt >= self.max_attempts:
                    self._skip(state, ref, Phase.ANALYZE, e)
                    return None
                delay = attempt * self.retry_backoff
                logger.warning(
                    "Analysis of %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    ref.url,
                    attempt,
                    self.max_attempts,
                    delay,
                    e,
                )
                await self._sleep(delay)
                attempt += 1

    async def _summarize(self, state: PhaseState) -> Event:
        state.metrics = aggregate_metrics(state.analyses)
        if not state.analyses:
            logger.info("No analyses survived; skipping executive summary")
            return Event.SUMMARY_SKIPPED

        try:
            state.summary = await self.summarizer.summarize(
                self._user, state.analyses, self._role_description, state.metrics
            )
        except ConfigurationError:
            raise
        except Exception as e:
            raise SummaryError(f"Executive summary failed: {e}") from e

        return Event.SUMMARY_COMPLETED
