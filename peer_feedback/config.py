"""Configuration for the contribution pipeline."""

import os

from .errors import ConfigurationError

DEFAULT_CACHE_DIR = ".cache"
DEFAULT_MODEL = "openai:gpt-4.1"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


class PipelineConfig:
    """Configuration class read from environment variables.

    Command-line options override these values; see ``peer-feedback analyze``.
    """

    def __init__(self) -> None:
        """Initialize pipeline configuration from environment variables."""
        self.github_token: str | None = os.getenv("GITHUB_TOKEN")
        self.cache_dir: str = os.getenv("PEER_FEEDBACK_CACHE_DIR", DEFAULT_CACHE_DIR)
        self.model: str = os.getenv("PEER_FEEDBACK_MODEL", DEFAULT_MODEL)
        self.min_request_interval: float = _env_float(
            "PEER_FEEDBACK_MIN_REQUEST_INTERVAL", 1.0
        )
        self.max_attempts: int = int(_env_float("PEER_FEEDBACK_MAX_ATTEMPTS", 3))
        self.retry_backoff: float = _env_float("PEER_FEEDBACK_RETRY_BACKOFF", 2.0)
        self.debug: bool = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")

    def is_configured(self) -> bool:
        """Check if a GitHub token is available."""
        return bool(self.github_token)

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        if not self.github_token:
            raise ConfigurationError(
                "Environment variable required for GitHub access: GITHUB_TOKEN"
            )
        if self.max_attempts < 1:
            raise ConfigurationError("PEER_FEEDBACK_MAX_ATTEMPTS must be at least 1")
        if self.min_request_interval < 0 or self.retry_backoff < 0:
            raise ConfigurationError("Delays must not be negative")
