"""Beacon agent application - main lifecycle management."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from beacon.config import AgentConfig
from beacon.core.connection import BridgeConnection
from beacon.core.event_manager import EventManager
from beacon.tools.event_tools import create_event_tools


logger = logging.getLogger("beacon")


class AppState(Enum):
    """Application lifecycle states."""
    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class Services:
    """Container for all application services."""
    config: AgentConfig
    event_manager: EventManager
    connection: BridgeConnection
    tools: list


class AgentApplication:
    """Main application class for the Beacon agent.

    Manages the complete lifecycle: initialization, running, and shutdown.
    """

    def __init__(self, config: AgentConfig, base_dir: Path):
        """Initialize application with validated configuration.

        Args:
            config: Validated AgentConfig instance.
            base_dir: Base directory of the agent checkout.
        """
        self.config = config
        self.base_dir = base_dir
        self.state = AppState.CREATED
        self.services: Optional[Services] = None
        self._shutdown_event = asyncio.Event()
        self._tasks: list[asyncio.Task] = []

    async def initialize(self) -> None:
        """Create services and attach event handlers to the bridge.

        Raises:
            RuntimeError: If initialization fails critically.
        """
        if self.state != AppState.CREATED:
            raise RuntimeError(f"Cannot initialize from state: {self.state}")

        self.state = AppState.STARTING
        logger.info("Initializing Beacon agent...")

        try:
            event_manager = EventManager.from_config(self.config)
            connection = BridgeConnection(self.config.bridge.uri, self.config.bridge)

            # Handlers subscribe to the bridge before it starts delivering
            event_manager.register_bot(connection)

            self.services = Services(
                config=self.config,
                event_manager=event_manager,
                connection=connection,
                tools=create_event_tools(event_manager.store),
            )
            logger.info(
                f"Event log ready (capacity {self.config.events.max_events}, "
                f"{len(event_manager.store.get_enabled_events())} types enabled)"
            )
            logger.info("All services initialized successfully")

        except Exception as e:
            self.state = AppState.FAILED
            logger.error(f"Initialization failed: {e}", exc_info=True)
            raise RuntimeError(f"Failed to initialize Beacon: {e}") from e

    async def run(self) -> None:
        """Run until shutdown is requested or the bridge task ends."""
        if self.state != AppState.STARTING or self.services is None:
            raise RuntimeError(f"Cannot run from state: {self.state}")

        self.state = AppState.RUNNING
        logger.info(f"Connecting to game bridge at {self.config.bridge.uri}...")

        self._setup_signal_handlers()

        try:
            bridge_task = asyncio.create_task(
                self.services.connection.connect(),
                name="bridge"
            )
            shutdown_task = asyncio.create_task(
                self._shutdown_event.wait(),
                name="shutdown"
            )
            self._tasks = [bridge_task, shutdown_task]

            done, pending = await asyncio.wait(
                self._tasks,
                return_when=asyncio.FIRST_COMPLETED,
            )

            for task in done:
                if not task.cancelled() and task.exception():
                    logger.error(f"Task {task.get_name()} failed: {task.exception()}")

        except asyncio.CancelledError:
            logger.info("Application cancelled")
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Gracefully shutdown all services."""
        if self.state in (AppState.STOPPING, AppState.STOPPED):
            return

        self.state = AppState.STOPPING
        logger.info("Shutting down Beacon agent...")

        if self.services:
            self.services.connection.stop()

        for task in self._tasks:
            if not task.done():
                task.cancel()
                try:
                    await asyncio.wait_for(task, timeout=5.0)
                except (asyncio.CancelledError, asyncio.TimeoutError):
                    pass

        if self.services:
            stats = self.services.event_manager.store.get_event_stats()
            logger.info(f"Discarding {stats['total']} in-memory events")

        self.state = AppState.STOPPED
        logger.info("Beacon agent stopped")

    def request_shutdown(self) -> None:
        """Request graceful shutdown (can be called from signal handlers)."""
        self._shutdown_event.set()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(sig: signal.Signals) -> None:
            logger.info(f"Received signal {sig.name}, requesting shutdown...")
            self.request_shutdown()

        # Only setup on Unix-like systems
        if sys.platform != "win32":
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
