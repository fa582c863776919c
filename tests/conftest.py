"""Pytest configuration and fixtures.

Provides environment isolation and logging hygiene. All fixtures here are
autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from adverbs.config import FrozenConfig, resolve_config

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "adverbs.config.load_dotenv", lambda *_args, **_kwargs: False
        )


@pytest.fixture(autouse=True)
def isolate_adverbs_env(request, monkeypatch):
    """Clear ADVERBS_* variables so each test starts from defaults.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("ADVERBS_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def root_at_info():
    """Lower the root logger to INFO for the test and restore it afterwards."""
    root = logging.getLogger()
    previous = root.level
    root.setLevel(logging.INFO)
    try:
        yield root
    finally:
        root.setLevel(previous)


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def default_config() -> FrozenConfig:
    return resolve_config(environ={})


@pytest.fixture
def no_retry_delay_config() -> FrozenConfig:
    return resolve_config(
        overrides={"retry_initial_delay_s": 0, "retry_max_delay_s": 0},
        environ={},
    )
