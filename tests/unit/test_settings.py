"""Unit tests for settings, errors and logging setup."""

import json
import logging

import pytest
import structlog
from pydantic import ValidationError

from flyweight_values import (
    CacheStrategy,
    FlyweightSettings,
    ImmutableValueError,
    InvalidValueError,
    SchemaDefinitionError,
    get_logger,
    setup_logging,
)


class TestFlyweightSettings:
    """Tests for FlyweightSettings."""

    def test_defaults(self, settings):
        """Test default values."""
        assert settings.enabled is True
        assert settings.cache_strategy is CacheStrategy.STRONG
        assert settings.log_level == "WARNING"
        assert settings.json_logs is False

    def test_environment_overrides(self, monkeypatch):
        """Test FLYWEIGHT_* environment variables."""
        monkeypatch.setenv("FLYWEIGHT_ENABLED", "false")
        monkeypatch.setenv("FLYWEIGHT_CACHE_STRATEGY", "weak")
        monkeypatch.setenv("FLYWEIGHT_LOG_LEVEL", "debug")

        settings = FlyweightSettings(_env_file=None)

        assert settings.enabled is False
        assert settings.cache_strategy is CacheStrategy.WEAK
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            FlyweightSettings(_env_file=None, log_level="chatty")

    def test_invalid_strategy(self):
        """Test that unknown cache strategies are rejected."""
        with pytest.raises(ValidationError):
            FlyweightSettings(_env_file=None, cache_strategy="lru")


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_str_with_details(self):
        """Test message and details formatting."""
        error = SchemaDefinitionError("Bad tag", details={"type_tag": "''"})

        assert str(error) == "Bad tag | Details: {'type_tag': \"''\"}"

    def test_to_dict(self):
        """Test serialization for structured logs."""
        error = InvalidValueError(
            "Rejected",
            type_tag="Name",
            issues=[{"type": "string_type", "loc": (), "msg": "bad", "ctx": {"x": object()}}],
        )

        data = error.to_dict()

        assert data["type"] == "InvalidValueError"
        assert data["type_tag"] == "Name"
        assert data["issues"] == [{"type": "string_type", "loc": (), "msg": "bad"}]
        assert data["cause"] is None
        assert "timestamp" in data

    def test_immutable_error_is_type_error(self):
        """Test that mutation errors can be caught as TypeError."""
        assert issubclass(ImmutableValueError, TypeError)


class TestLogging:
    """Tests for setup_logging and get_logger."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Restore structlog and stdlib logger state after each test."""
        yield
        structlog.reset_defaults()
        logging.getLogger("flyweight_values").setLevel(logging.NOTSET)

    def test_json_logs(self, caplog):
        """Test JSON rendering through the stdlib logger."""
        setup_logging(level="DEBUG", json_format=True)
        logger = get_logger("flyweight_values.test", component="tests")

        logger.info("Something happened", count=2)

        record = caplog.records[-1]
        event = json.loads(record.getMessage())
        assert record.name == "flyweight_values.test"
        assert event["event"] == "Something happened"
        assert event["count"] == 2
        assert event["component"] == "tests"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filtering(self, caplog):
        """Test that records below the configured level are dropped."""
        setup_logging(level="ERROR", json_format=True)
        logger = get_logger("flyweight_values.test")

        logger.info("Hidden")

        assert not [r for r in caplog.records if "Hidden" in r.getMessage()]
