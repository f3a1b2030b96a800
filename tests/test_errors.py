"""Tests for errors and config modules."""

import pytest

from podcast_producer import config
from podcast_producer.errors import (
    AuthenticationError,
    ConfigurationError,
    GenerationError,
    InvalidInputError,
    RateLimitError,
    SynthesisError,
    error_for_status,
    error_payload,
)


def test_error_for_status_specific_classes():
    """429 and 401/402 get their own classes."""
    assert isinstance(error_for_status(429), RateLimitError)
    assert isinstance(error_for_status(401), AuthenticationError)
    assert error_for_status(402).status == 402


def test_error_for_status_generic_keeps_status_and_detail():
    """Other statuses keep the status code and the upstream detail."""
    err = error_for_status(503, "overloaded")
    assert isinstance(err, SynthesisError)
    assert err.status == 503
    assert "503" in str(err)
    assert "overloaded" in str(err)


def test_error_for_status_default_class():
    """The fallback class is configurable."""
    assert isinstance(error_for_status(500, default=GenerationError), GenerationError)


def test_error_payload():
    """Structured payloads carry the message and status."""
    assert error_payload(RateLimitError()) == {
        "error": "Rate limit exceeded. Please try again later.",
        "status": 429,
    }
    assert error_payload(InvalidInputError("Text is required"))["status"] == 400
    assert error_payload(RuntimeError("boom")) == {"error": "boom", "status": 500}


def test_invalid_input_is_value_error():
    """Malformed-input errors are also ValueErrors."""
    assert issubclass(InvalidInputError, ValueError)


def test_require_openai_key(monkeypatch):
    """Missing key raises ConfigurationError; present key is returned."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY is not configured"):
        config.require_openai_key()
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert config.require_openai_key() == "sk-test"
