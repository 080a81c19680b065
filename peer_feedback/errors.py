"""Exception types raised by the contribution pipeline."""


class PeerFeedbackError(Exception):
    """Base class for all pipeline errors."""


class TransientRemoteError(PeerFeedbackError):
    """Remote call failed for a temporary reason (rate limit, timeout).

    ``reset_at`` is the epoch second at which the quota resets, when known.
    ``rate_limited`` is False for network failures and server errors, which
    are retried after a short backoff instead of waiting for a reset.
    """

    def __init__(
        self,
        message: str,
        reset_at: float | None = None,
        rate_limited: bool = True,
    ):
        super().__init__(message)
        self.reset_at = reset_at
        self.rate_limited = rate_limited


class ContributionNotFound(PeerFeedbackError):
    """A contribution identifier does not resolve on the platform."""


class MalformedReference(PeerFeedbackError, ValueError):
    """A contribution URL does not match any recognised shape."""


class OutputValidationError(PeerFeedbackError):
    """Collaborator output does not match the expected schema."""


class ConfigurationError(PeerFeedbackError):
    """The pipeline was wired or sequenced incorrectly."""


class PhaseTransitionError(PeerFeedbackError):
    """An event was delivered to a phase that cannot accept it."""


class SummaryError(PeerFeedbackError):
    """The executive summary could not be produced."""
