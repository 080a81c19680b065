"""Tests for the phase transition function."""

import pytest

from peer_feedback.errors import PhaseTransitionError
from peer_feedback.pipeline.phases import Effect, Event, Phase, transition


@pytest.mark.parametrize(
    ("phase", "event", "expected_phase", "expected_effects"),
    [
        (Phase.SEARCH, Event.SEARCH_COMPLETED, Phase.FETCH, (Effect.FETCH,)),
        (Phase.FETCH, Event.FETCH_COMPLETED, Phase.ANALYZE, (Effect.ANALYZE,)),
        (
            Phase.ANALYZE,
            Event.ANALYSIS_COMPLETED,
            Phase.SUMMARIZE,
            (Effect.SUMMARIZE,),
        ),
        (Phase.SUMMARIZE, Event.SUMMARY_SKIPPED, Phase.COMPLETE, (Effect.FINISH,)),
        (
            Phase.SUMMARIZE,
            Event.SUMMARY_COMPLETED,
            Phase.COMPLETE,
            (Effect.FINISH,),
        ),
    ],
)
def test_valid_transitions(
    phase: Phase,
    event: Event,
    expected_phase: Phase,
    expected_effects: tuple[Effect, ...],
) -> None:
    assert transition(phase, event) == (expected_phase, expected_effects)


def test_phases_run_in_order() -> None:
    """Following the happy path visits every phase exactly once."""
    events = [
        Event.SEARCH_COMPLETED,
        Event.FETCH_COMPLETED,
        Event.ANALYSIS_COMPLETED,
        Event.SUMMARY_COMPLETED,
    ]
    phase = Phase.SEARCH
    visited = [phase]
    for event in events:
        phase, _effects = transition(phase, event)
        visited.append(phase)

    assert visited == list(Phase)


@pytest.mark.parametrize(
    ("phase", "event"),
    [
        (Phase.SEARCH, Event.FETCH_COMPLETED),
        (Phase.FETCH, Event.SEARCH_COMPLETED),
        (Phase.ANALYZE, Event.SUMMARY_COMPLETED),
        (Phase.SUMMARIZE, Event.ANALYSIS_COMPLETED),
    ],
)
def test_invalid_event_rejected(phase: Phase, event: Event) -> None:
    with pytest.raises(PhaseTransitionError, match=event.value):
        transition(phase, event)


@pytest.mark.parametrize("event", list(Event))
def test_complete_is_terminal(event: Event) -> None:
    with pytest.raises(PhaseTransitionError):
        transition(Phase.COMPLETE, event)


def test_unknown_event_rejected() -> None:
    with pytest.raises(PhaseTransitionError):
        transition(Phase.SEARCH, "not_an_event")  # type: ignore[arg-type]
