"""
Pytest configuration and fixtures.
"""

import os

import pytest


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Isolate tests from the global settings singleton and runtime env vars."""
    from replay_runtime.config import reset_settings
    
    for name in list(os.environ):
        if name.upper().startswith("REPLAY_RUNTIME__"):
            monkeypatch.delenv(name, raising=False)
    
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    """Provide test settings with short waits."""
    from replay_runtime.config import Settings, IdleSettings, LocatorSettings
    
    return Settings(
        idle=IdleSettings(timeout_ms=200, idle_window_ms=0, poll_interval_ms=10),
        locator=LocatorSettings(wait_timeout_ms=50),
    )


@pytest.fixture
def ui_fragments():
    """UI source as captured from a stats page."""
    return ["<span class='stat-number'>5</span>"]


@pytest.fixture
def db_row_sets():
    """DB source: one query result with a count column."""
    return [[{"count": 5}]]


@pytest.fixture
def api_payloads():
    """API source: one decoded payload."""
    return [{"total_projects": 5}]
