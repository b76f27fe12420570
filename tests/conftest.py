"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration and the factory test
double shared across suites. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os
from typing import Any

import pytest

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class CountingFactory:
    """Computation factory that records every invocation.

    Each call returns a fresh coroutine that succeeds with ``value`` or raises
    ``error`` when one is set.
    """

    value: Any = None
    error: BaseException | None = None
    calls: int = 0
    started: int = field(default=0)

    def __call__(self) -> Any:
        self.calls += 1
        return self._run()

    async def _run(self) -> Any:
        self.started += 1
        if self.error is not None:
            raise self.error
        return self.value


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
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_settle_env(request, monkeypatch):
    """Clear SETTLE_* variables so configuration defaults are predictable.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("SETTLE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def settle_debug_logs(caplog):
    """Capture DEBUG records from the settle loggers (not autouse)."""
    caplog.set_level(logging.DEBUG, logger="settle")
    return caplog
