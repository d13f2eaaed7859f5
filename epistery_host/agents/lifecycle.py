"""
Lifecycle Controller

Owns the agent registry for the lifetime of the process:

    IDLE -> DISCOVERING -> LOADING -> ACTIVE -> SHUTTING_DOWN -> STOPPED

Startup loads agents one at a time so route-table mutation never
interleaves. Shutdown runs once, tries every agent's cleanup regardless
of earlier failures and is bounded by a wall-clock timeout.
"""

import asyncio
import logging
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Callable

from fastapi import FastAPI

from .discovery import discover, MANIFEST_FILENAME, ENTRY_FILENAME
from .errors import AgentError, NamespaceCollisionError, LifecycleError
from .loader import AgentLoader, EXPORT_NAME, maybe_await, has_capability, unload_module
from .models import CleanupResult, RegistryEntry
from .registry import AgentRegistry

logger = logging.getLogger("epistery-host.agents.lifecycle")

WATCHDOG_GRACE = 1.0


class LifecycleState(str, Enum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    LOADING = "loading"
    ACTIVE = "active"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


_NEXT_STATE = {
    LifecycleState.IDLE: LifecycleState.DISCOVERING,
    LifecycleState.DISCOVERING: LifecycleState.LOADING,
    LifecycleState.LOADING: LifecycleState.ACTIVE,
    LifecycleState.ACTIVE: LifecycleState.SHUTTING_DOWN,
    LifecycleState.SHUTTING_DOWN: LifecycleState.STOPPED,
}


class ShutdownWatchdog:
    """Hard-exits the process if graceful shutdown overruns its budget."""

    def __init__(self, timeout: float, exit_code: int = 1, exit_func: Callable[[int], None] = os._exit):
        self.timeout = timeout
        self.exit_code = exit_code
        self._exit_func = exit_func
        self._timer: Optional[threading.Timer] = None

    def start(self):
        self._timer = threading.Timer(self.timeout, self._fire)
        self._timer.daemon = True
        self._timer.start()

    def cancel(self):
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _fire(self):
        logger.error(f"Forced shutdown after {self.timeout}s timeout")
        self._exit_func(self.exit_code)


class LifecycleController:
    """
    Discovers, loads and tears down agents.

    The registry is created here and handed out by reference; nothing
    else is allowed to trigger a mass cleanup.
    """

    def __init__(
        self,
        agents_path: str | Path,
        manifest_filename: str = MANIFEST_FILENAME,
        entry_filename: str = ENTRY_FILENAME,
        export_name: str = EXPORT_NAME,
        cleanup_timeout: float = 3.0,
        shutdown_timeout: float = 5.0,
        force_exit: bool = False,
    ):
        self.agents_path = Path(agents_path).expanduser()
        self.manifest_filename = manifest_filename
        self.entry_filename = entry_filename
        self.cleanup_timeout = cleanup_timeout
        self.shutdown_timeout = shutdown_timeout
        self.force_exit = force_exit

        self.registry = AgentRegistry()
        self.loader = AgentLoader(self.registry, export_name=export_name, cleanup_timeout=cleanup_timeout)
        self.failures: Dict[str, str] = {}

        self._state = LifecycleState.IDLE
        self._shutting_down = False
        self._cleanup_result: Optional[CleanupResult] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    def _advance(self, target: LifecycleState):
        expected = _NEXT_STATE.get(self._state)
        if target != expected:
            raise LifecycleError(f"Cannot move from {self._state.value} to {target.value}")
        logger.debug(f"Lifecycle: {self._state.value} -> {target.value}")
        self._state = target

    # =========================================================================
    # Startup
    # =========================================================================

    async def start(self, app: FastAPI) -> AgentRegistry:
        """Discover and load every agent, then wire WebSocket support."""
        self._advance(LifecycleState.DISCOVERING)
        records = discover(self.agents_path, self.manifest_filename, self.entry_filename)

        self._advance(LifecycleState.LOADING)
        for record in records:
            try:
                await self.loader.load(record, app)
            except NamespaceCollisionError as e:
                self.failures[record.local_name] = str(e)
                logger.error(f"Namespace collision, agent {record.local_name} not mounted: {e}")
            except AgentError as e:
                self.failures[record.local_name] = str(e)
                logger.error(f"Failed to load agent {record.local_name}: {e}")
            except Exception as e:
                self.failures[record.local_name] = str(e)
                logger.exception(f"Unexpected error loading agent {record.local_name}: {e}")

        await self.init_websockets(app)

        self._advance(LifecycleState.ACTIVE)
        logger.info(f"Loaded {len(self.registry)} agent module(s)")
        return self.registry

    async def init_websockets(self, app: FastAPI):
        """Give each WebSocket-capable agent the host application."""
        for entry in self.registry.entries():
            if not has_capability(entry.instance, "init_websocket"):
                continue
            try:
                await maybe_await(entry.instance.init_websocket(app))
                logger.info(f"WebSocket initialized for agent: {entry.manifest.name}")
            except Exception as e:
                logger.error(f"Failed to initialize WebSocket for {entry.manifest.name}: {e}")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self, reason: str = "shutdown") -> CleanupResult:
        """
        Clean up every agent exactly once.

        Later calls return the result of the first one. Individual cleanup
        failures are recorded and logged; they never stop the loop.
        """
        if self._shutting_down:
            logger.debug(f"Shutdown already in progress, ignoring {reason}")
            return self._cleanup_result

        self._advance(LifecycleState.SHUTTING_DOWN)
        self._shutting_down = True
        self._cleanup_result = result = CleanupResult()
        logger.info(f"Received {reason}, shutting down {len(self.registry)} agent(s)...")

        watchdog = None
        if self.force_exit:
            watchdog = ShutdownWatchdog(self.shutdown_timeout + WATCHDOG_GRACE)
            watchdog.start()

        try:
            await asyncio.wait_for(self._cleanup_all(result), timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            result.timed_out = True
            logger.error(f"Agent cleanup exceeded {self.shutdown_timeout}s, forcing shutdown")
        finally:
            if watchdog:
                watchdog.cancel()

        for entry in self.registry.entries():
            if entry.module_name:
                unload_module(entry.module_name)
        self.registry.clear()
        self._advance(LifecycleState.STOPPED)

        if result.failed:
            logger.error(f"Agent cleanup finished with {len(result.failed)} failure(s): {sorted(result.failed)}")
        else:
            logger.info("Agent modules cleaned up")
        return result

    async def _cleanup_all(self, result: CleanupResult):
        for entry in self.registry.entries():
            if not has_capability(entry.instance, "cleanup"):
                continue
            try:
                await asyncio.wait_for(self._cleanup_one(entry), timeout=self.cleanup_timeout)
            except asyncio.TimeoutError:
                result.failed[entry.local_name] = f"cleanup timed out after {self.cleanup_timeout}s"
                logger.error(f"Cleanup of agent {entry.local_name} timed out")
            except Exception as e:
                result.failed[entry.local_name] = str(e)
                logger.error(f"Error cleaning up agent {entry.local_name}: {e}")
            else:
                result.cleaned.append(entry.local_name)
                logger.info(f"Agent {entry.local_name} cleaned up")

    @staticmethod
    async def _cleanup_one(entry: RegistryEntry):
        await maybe_await(entry.instance.cleanup())
