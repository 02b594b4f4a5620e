"""Tests for application lifecycle without a live bridge."""

from pathlib import Path

import pytest

from beacon.application import AgentApplication, AppState
from beacon.config import AgentConfig


@pytest.mark.asyncio
async def test_initialize_registers_handlers():
    app = AgentApplication(AgentConfig(), Path("."))

    await app.initialize()

    assert app.state == AppState.STARTING
    services = app.services
    assert services.event_manager.is_registered(services.connection)
    assert services.connection.listener_count("chat") == 1
    assert {t.name for t in services.tools} == {"query_recent_events", "get_event_stats", "cleanup_events"}


@pytest.mark.asyncio
async def test_initialize_twice_fails():
    app = AgentApplication(AgentConfig(), Path("."))
    await app.initialize()

    with pytest.raises(RuntimeError):
        await app.initialize()


@pytest.mark.asyncio
async def test_shutdown_is_idempotent():
    app = AgentApplication(AgentConfig(), Path("."))
    await app.initialize()

    await app.shutdown()
    await app.shutdown()

    assert app.state == AppState.STOPPED
    assert app.services.connection.running is False


@pytest.mark.asyncio
async def test_run_requires_initialize():
    app = AgentApplication(AgentConfig(), Path("."))
    with pytest.raises(RuntimeError):
        await app.run()
