"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, and shared test
doubles for operation snapshots and sleeps.
"""

from __future__ import annotations

import asyncio
import logging
import os

import pytest

from longrun.transports.scripted import ScriptedTransport

# =============================================================================
# Test Doubles
# =============================================================================


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    """Replace asyncio.sleep with a recorder that returns immediately."""
    recorded: list[float] = []

    async def fake_sleep(delay: float, result: object = None) -> object:
        recorded.append(delay)
        return result

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return recorded


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
    monkeypatch.setattr("longrun.config.load_dotenv", lambda *_a, **_k: False)


@pytest.fixture(autouse=True)
def isolate_longrun_env(monkeypatch):
    """Clear LONGRUN_* env vars to prevent test pollution."""
    for key in list(os.environ.keys()):
        if key.startswith("LONGRUN_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
