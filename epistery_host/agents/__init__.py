"""
Epistery Agents

Discovers agent packages on disk, loads them, mounts each one under its
own namespace and tears them down on shutdown. Agents live in
~/.epistery/.agents/<dir>/ with an epistery.json manifest and an
agent.py entry file.
"""

from .models import (
    AgentManifest, DiscoveryRecord, MountPaths,
    RegistryEntry, CleanupResult,
)
from .errors import (
    AgentError, ManifestError, ManifestNotFoundError, ManifestParseError,
    ManifestValidationError, LoadError, MissingNameError, InvalidRouteNameError,
    AgentImportError, AgentConstructionError, AgentAttachError,
    NamespaceCollisionError, LifecycleError,
)
from .manifest import read_manifest, parse_manifest
from .discovery import discover
from .namespace import (
    route_name_for, mount_paths_for, mount_agent,
    is_valid_route_name, routes_overlap,
)
from .registry import AgentRegistry
from .loader import AgentLoader
from .lifecycle import LifecycleController, LifecycleState, ShutdownWatchdog
from .routes import create_agent_router

__all__ = [
    "AgentManifest",
    "DiscoveryRecord",
    "MountPaths",
    "RegistryEntry",
    "CleanupResult",
    "AgentError",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "ManifestValidationError",
    "LoadError",
    "MissingNameError",
    "InvalidRouteNameError",
    "AgentImportError",
    "AgentConstructionError",
    "AgentAttachError",
    "NamespaceCollisionError",
    "LifecycleError",
    "read_manifest",
    "parse_manifest",
    "discover",
    "route_name_for",
    "mount_paths_for",
    "mount_agent",
    "is_valid_route_name",
    "routes_overlap",
    "AgentRegistry",
    "AgentLoader",
    "LifecycleController",
    "LifecycleState",
    "ShutdownWatchdog",
    "create_agent_router",
]
