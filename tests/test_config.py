import logging

import pytest

from live_score import config
from live_score.logging_config import setup_logging


# ---------------------------------------------------------------------------
# validate_config
# ---------------------------------------------------------------------------


def test_defaults_are_valid():
    config.validate_config()


@pytest.mark.parametrize(
    "name, value",
    [
        ("POLL_INTERVAL_SECONDS", 0),
        ("FETCH_TIMEOUT_SECONDS", -1.0),
        ("MAX_RESPONSE_BYTES", 0),
        ("SCORECARD_EVERY_N_CYCLES", -1),
        ("ALLOWED_SOURCE_DOMAIN", "localhost"),
        ("MATCH_URL", "https://example.com/live-cricket-scores/1/x"),
    ],
)
def test_invalid_settings_raise(monkeypatch, name, value):
    monkeypatch.setattr(config, name, value)
    with pytest.raises(RuntimeError):
        config.validate_config()


def test_env_helpers_fall_back_on_garbage(monkeypatch):
    monkeypatch.setenv("SOME_INT", "not-a-number")
    monkeypatch.setenv("SOME_FLOAT", "2.5")

    assert config._get_env_int("SOME_INT", 7) == 7
    assert config._get_env_float("SOME_FLOAT", 1.0) == 2.5
    assert config._get_env("MISSING_FOR_SURE_123", " x ") == "x"


# ---------------------------------------------------------------------------
# setup_logging
# ---------------------------------------------------------------------------


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        setup_logging("DEBUG")

        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
