"""
Agent Models

Pydantic models for agent manifests, plus the plain records passed
between discovery, loading and the registry.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, List, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# Explicit JSON nulls fall back to these
_NULL_DEFAULTS = {
    "config": dict,
    "permissions": list,
    "no_user_interface": bool,
}


class AgentManifest(BaseModel):
    """Declarative descriptor read from an agent's epistery.json."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: Optional[str] = Field(None, description="Agent identity, may be scoped (@org/agent)")
    version: Optional[str] = None
    entry_point: Optional[str] = Field(None, alias="main", description="Informational only")
    start_command: Optional[str] = Field(None, alias="command")
    description: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    permissions: List[str] = Field(default_factory=list)

    # Presentation hints
    title: Optional[str] = None
    icon: Optional[str] = None
    widget: Optional[Any] = None
    no_user_interface: bool = Field(False, alias="noUserInterface")

    @field_validator("config", "permissions", "no_user_interface", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return _NULL_DEFAULTS[info.field_name]()
        return value

    @property
    def simple_name(self) -> str:
        """Last path segment of the name ("@geistm/adnet-agent" -> "adnet-agent")."""
        return (self.name or "").split("/")[-1]

    @property
    def display_name(self) -> str:
        return self.title or self.simple_name


@dataclass(frozen=True)
class DiscoveryRecord:
    """One loadable candidate found on disk. Consumed once by the loader."""
    local_name: str
    path: Path
    manifest: AgentManifest
    entry_path: Path


@dataclass(frozen=True)
class MountPaths:
    """The two prefixes an agent's sub-application is mounted at."""
    route_name: str
    canonical: str
    short: str

    def __iter__(self):
        yield self.canonical
        yield self.short


@dataclass
class RegistryEntry:
    """A live agent and the metadata the presentation layer reads."""
    local_name: str
    manifest: AgentManifest
    instance: Any
    mount_paths: MountPaths
    module_name: Optional[str] = None

    def to_dict(self, enabled: bool = True) -> Dict[str, Any]:
        """Listing shape used by /api/agents. Never touches the instance."""
        m = self.manifest
        return {
            "name": m.name,
            "simpleName": m.simple_name,
            "title": m.title,
            "version": m.version,
            "description": m.description,
            "icon": m.icon,
            "widget": m.widget,
            "noUserInterface": m.no_user_interface,
            "wellKnownPath": self.mount_paths.canonical,
            "shortPath": self.mount_paths.short,
            "enabled": enabled,
        }


@dataclass
class CleanupResult:
    """Outcome of a registry-wide cleanup."""
    cleaned: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.timed_out
