"""
Agent Loader

Imports a discovered agent, instantiates it with its manifest config and
mounts its sub-application under both namespace paths.

Agent contract (all members optional):
    attach(router)       register routes on a fresh APIRouter
    init_websocket(app)  wire connection-upgrade handling on the host app
    cleanup()            graceful teardown

Any of them may be a coroutine function.
"""

import asyncio
import hashlib
import importlib.util
import inspect
import logging
import re
import sys
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI

from .errors import (
    MissingNameError, InvalidRouteNameError, AgentImportError,
    AgentConstructionError, AgentAttachError,
)
from .models import DiscoveryRecord, RegistryEntry
from .namespace import mount_paths_for, mount_agent, is_valid_route_name
from .registry import AgentRegistry

logger = logging.getLogger("epistery-host.agents.loader")

EXPORT_NAME = "Agent"
MODULE_PREFIX = "epistery_agent_"


async def maybe_await(value: Any) -> Any:
    """Await `value` if it is awaitable, otherwise return it."""
    if inspect.isawaitable(value):
        return await value
    return value


def has_capability(instance: Any, name: str) -> bool:
    return callable(getattr(instance, name, None))


def module_name_for(local_name: str, path: str | Path) -> str:
    """
    Unique module name for an agent directory.

    The sanitized local name keeps tracebacks readable; the path digest
    keeps "a-b" and "a_b" apart.
    """
    digest = hashlib.sha256(str(Path(path).absolute()).encode()).hexdigest()[:12]
    return f"{MODULE_PREFIX}{re.sub(r'[^0-9A-Za-z_]', '_', local_name)}_{digest}"


def unload_module(module_name: str) -> None:
    """Drop an agent module and its submodules from sys.modules."""
    for name in [n for n in sys.modules if n == module_name or n.startswith(module_name + ".")]:
        sys.modules.pop(name, None)


def import_entry(record: DiscoveryRecord, export_name: str = EXPORT_NAME):
    """
    Import the record's entry file and return its constructible export.

    The agent directory is the module's package path, so the entry file
    can import its siblings relatively. A failed import is removed from
    sys.modules again.
    """
    module_name = module_name_for(record.local_name, record.path)

    if module_name in sys.modules:
        raise AgentImportError(
            f"Module {module_name} for agent {record.local_name} is already loaded",
            local_name=record.local_name,
        )

    try:
        spec = importlib.util.spec_from_file_location(
            module_name,
            record.entry_path,
            submodule_search_locations=[str(record.path)],
        )
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot create import spec for {record.entry_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    except Exception as e:
        unload_module(module_name)
        raise AgentImportError(
            f"Failed to import agent {record.local_name}: {e}",
            local_name=record.local_name,
        ) from e

    factory = getattr(module, export_name, None)
    if not callable(factory):
        unload_module(module_name)
        raise AgentImportError(
            f"Agent {record.local_name} does not export a callable '{export_name}'",
            local_name=record.local_name,
        )

    return factory


class AgentLoader:
    """Loads one discovery record at a time into a registry and app."""

    def __init__(self, registry: AgentRegistry, export_name: str = EXPORT_NAME, cleanup_timeout: float = 3.0):
        self.registry = registry
        self.export_name = export_name
        self.cleanup_timeout = cleanup_timeout

    async def load(self, record: DiscoveryRecord, app: FastAPI) -> RegistryEntry:
        """
        Load, mount and register a single agent.

        Raises a LoadError (or NamespaceCollisionError) on failure; nothing
        is mounted or registered in that case, an instance that was already
        constructed gets its cleanup() and the module is unloaded.
        """
        local_name = record.local_name
        manifest = record.manifest

        if not manifest.name:
            raise MissingNameError(
                f"Agent {local_name} missing name in manifest, skipping",
                local_name=local_name,
            )

        paths = mount_paths_for(manifest.name)
        if not is_valid_route_name(paths.route_name):
            raise InvalidRouteNameError(
                f"Agent {local_name} has unusable name '{manifest.name}', skipping",
                local_name=local_name,
            )

        module_name = module_name_for(local_name, record.path)
        factory = import_entry(record, self.export_name)

        try:
            instance = factory(dict(manifest.config or {}))
        except Exception as e:
            unload_module(module_name)
            raise AgentConstructionError(
                f"Agent {local_name} failed to construct: {e}",
                local_name=local_name,
            ) from e

        try:
            self.registry.check_available(local_name, paths.route_name)
            router = await self._attach(local_name, instance)
        except Exception:
            await self._discard(local_name, instance, module_name)
            raise

        sub_app = FastAPI(
            title=manifest.display_name,
            version=manifest.version or "0.0.0",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )
        sub_app.include_router(router)
        mount_agent(app, paths, sub_app)

        entry = self.registry.add(RegistryEntry(
            local_name=local_name,
            manifest=manifest,
            instance=instance,
            mount_paths=paths,
            module_name=module_name,
        ))

        logger.info(
            f"Agent {manifest.name} v{manifest.version} mounted at: "
            f"{paths.canonical}/*, {paths.short}/*"
        )
        return entry

    async def _attach(self, local_name: str, instance: Any) -> APIRouter:
        router = APIRouter()
        if not has_capability(instance, "attach"):
            logger.warning(f"Agent {local_name} has no attach() method")
            return router

        try:
            await maybe_await(instance.attach(router))
        except Exception as e:
            raise AgentAttachError(
                f"Agent {local_name} failed in attach(): {e}",
                local_name=local_name,
            ) from e
        return router

    async def _discard(self, local_name: str, instance: Any, module_name: str):
        """Best-effort teardown of an agent that will not be mounted."""
        if has_capability(instance, "cleanup"):
            try:
                await asyncio.wait_for(maybe_await(instance.cleanup()), timeout=self.cleanup_timeout)
            except asyncio.TimeoutError:
                logger.error(f"Cleanup of rejected agent {local_name} timed out")
            except Exception as e:
                logger.error(f"Error cleaning up rejected agent {local_name}: {e}")
        unload_module(module_name)
