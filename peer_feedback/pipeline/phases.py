"""Run phases and the pure transition function that sequences them."""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from ..ai.models import AnalysisRecord, ExecutiveSummary
from ..errors import PhaseTransitionError
from ..github_client.models import (
    ContributionDetail,
    ContributionLocator,
    ContributionRef,
)
from .metrics import ContributionMetrics


class Phase(str, Enum):
    """Phases of a run, in order. COMPLETE is terminal."""

    SEARCH = "search"
    FETCH = "fetch"
    ANALYZE = "analyze"
    SUMMARIZE = "summarize"
    COMPLETE = "complete"


class Event(str, Enum):
    """Outcomes reported by a phase when its work is exhausted."""

    SEARCH_COMPLETED = "search_completed"
    FETCH_COMPLETED = "fetch_completed"
    ANALYSIS_COMPLETED = "analysis_completed"
    SUMMARY_SKIPPED = "summary_skipped"
    SUMMARY_COMPLETED = "summary_completed"


class Effect(str, Enum):
    """Work the orchestrator must carry out after a transition."""

    FETCH = "fetch"
    ANALYZE = "analyze"
    SUMMARIZE = "summarize"
    FINISH = "finish"


_TRANSITIONS: dict[tuple[Phase, Event], tuple[Phase, tuple[Effect, ...]]] = {
    (Phase.SEARCH, Event.SEARCH_COMPLETED): (Phase.FETCH, (Effect.FETCH,)),
    (Phase.FETCH, Event.FETCH_COMPLETED): (Phase.ANALYZE, (Effect.ANALYZE,)),
    (Phase.ANALYZE, Event.ANALYSIS_COMPLETED): (
        Phase.SUMMARIZE,
        (Effect.SUMMARIZE,),
    ),
    (Phase.SUMMARIZE, Event.SUMMARY_SKIPPED): (Phase.COMPLETE, (Effect.FINISH,)),
    (Phase.SUMMARIZE, Event.SUMMARY_COMPLETED): (Phase.COMPLETE, (Effect.FINISH,)),
}


def transition(phase: Phase, event: Event) -> tuple[Phase, tuple[Effect, ...]]:
    """Compute the next phase and the effects to run.

    Args:
        phase: Current phase
        event: Event reported by the current phase

    Returns:
        Tuple of (next phase, effects)

    Raises:
        PhaseTransitionError: If the event is not valid in the current phase
    """
    try:
        return _TRANSITIONS[(Phase(phase), Event(event))]
    except (KeyError, ValueError):
        raise PhaseTransitionError(
            f"Event {getattr(event, 'value', event)!r} is not valid in phase "
            f"{getattr(phase, 'value', phase)!r}"
        ) from None


class SkippedContribution(BaseModel):
    """A contribution dropped from the run, kept for a manual re-run."""

    url: str = Field(..., description="URL of the contribution")
    identity: str = Field(..., description="e.g. 'issue acme/widgets#42'")
    phase: Phase = Field(..., description="Phase in which it was dropped")
    cause: str = Field(..., description="Error that caused the skip")


@dataclass
class PhaseState:
    """Mutable state of a single run, owned by the orchestrator."""

    phase: Phase = Phase.SEARCH
    contributions: list[ContributionRef] = field(default_factory=list)
    pending: deque[ContributionRef] = field(default_factory=deque)
    fetched: dict[ContributionLocator, tuple[ContributionRef, ContributionDetail]] = (
        field(default_factory=dict)
    )
    analyses: list[AnalysisRecord] = field(default_factory=list)
    skipped: list[SkippedContribution] = field(default_factory=list)
    metrics: ContributionMetrics | None = None
    summary: ExecutiveSummary | None = None
