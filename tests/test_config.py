"""Tests for environment configuration."""

import pytest

from peer_feedback.config import DEFAULT_CACHE_DIR, DEFAULT_MODEL, PipelineConfig
from peer_feedback.errors import ConfigurationError

ENV_VARS = [
    "GITHUB_TOKEN",
    "PEER_FEEDBACK_CACHE_DIR",
    "PEER_FEEDBACK_MODEL",
    "PEER_FEEDBACK_MIN_REQUEST_INTERVAL",
    "PEER_FEEDBACK_MAX_ATTEMPTS",
    "PEER_FEEDBACK_RETRY_BACKOFF",
    "DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = PipelineConfig()

    assert config.github_token is None
    assert config.cache_dir == DEFAULT_CACHE_DIR
    assert config.model == DEFAULT_MODEL
    assert config.min_request_interval == 1.0
    assert config.max_attempts == 3
    assert config.retry_backoff == 2.0
    assert config.debug is False
    assert not config.is_configured()


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    monkeypatch.setenv("PEER_FEEDBACK_CACHE_DIR", "/tmp/feedback")
    monkeypatch.setenv("PEER_FEEDBACK_MODEL", "anthropic:claude-sonnet-4-0")
    monkeypatch.setenv("PEER_FEEDBACK_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("DEBUG", "true")

    config = PipelineConfig()

    assert config.is_configured()
    assert config.cache_dir == "/tmp/feedback"
    assert config.model == "anthropic:claude-sonnet-4-0"
    assert config.max_attempts == 5
    assert config.debug is True
    config.validate()


def test_validate_requires_token() -> None:
    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
        PipelineConfig().validate()


def test_non_numeric_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEER_FEEDBACK_RETRY_BACKOFF", "soon")
    with pytest.raises(ConfigurationError, match="must be a number"):
        PipelineConfig()


def test_validate_rejects_zero_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    monkeypatch.setenv("PEER_FEEDBACK_MAX_ATTEMPTS", "0")
    with pytest.raises(ConfigurationError, match="at least 1"):
        PipelineConfig().validate()
