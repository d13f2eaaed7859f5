"""
Agent Registry

In-memory table of active agents, keyed by local directory name in
insertion order. Process-global: enabled/default state is per-domain and
lives in the domain store, not here.
"""

import logging
from typing import Optional, Dict, List, Iterator

from .errors import NamespaceCollisionError
from .models import RegistryEntry
from .namespace import routes_overlap

logger = logging.getLogger("epistery-host.agents.registry")


class AgentRegistry:
    """
    Active agents and their mount metadata.

    Reads never call into agent instances; they only return stored
    manifest data and mount paths.
    """

    def __init__(self):
        self._entries: Dict[str, RegistryEntry] = {}
        self._routes: Dict[str, str] = {}  # route name -> local name

    # =========================================================================
    # Mutation (startup and shutdown only)
    # =========================================================================

    def check_available(self, local_name: str, route_name: str) -> None:
        """Raise NamespaceCollisionError if either key is taken."""
        if local_name in self._entries:
            raise NamespaceCollisionError(
                f"Agent '{local_name}' is already registered",
                local_name=local_name,
                route_name=route_name,
            )

        # A mount owns its whole prefix, so "org" would shadow "org/x".
        for taken, owner in self._routes.items():
            if routes_overlap(taken, route_name):
                raise NamespaceCollisionError(
                    f"Route '{route_name}' of agent '{local_name}' overlaps "
                    f"'{taken}' mounted by agent '{owner}'",
                    local_name=local_name,
                    route_name=route_name,
                )

    def add(self, entry: RegistryEntry) -> RegistryEntry:
        route_name = entry.mount_paths.route_name
        self.check_available(entry.local_name, route_name)
        self._entries[entry.local_name] = entry
        self._routes[route_name] = entry.local_name
        return entry

    def clear(self) -> None:
        self._entries.clear()
        self._routes.clear()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, local_name: str) -> Optional[RegistryEntry]:
        return self._entries.get(local_name)

    def find_by_name(self, name: str) -> Optional[RegistryEntry]:
        """Look up by manifest name, the key the domain store uses."""
        for entry in self._entries.values():
            if entry.manifest.name == name:
                return entry
        return None

    def entries(self) -> List[RegistryEntry]:
        """Snapshot in registration order."""
        return list(self._entries.values())

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, local_name: str) -> bool:
        return local_name in self._entries
