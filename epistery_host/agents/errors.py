"""
Agent error taxonomy.

Everything here is recoverable at the granularity of a single agent.
"""

from typing import Optional


class AgentError(Exception):
    """Base class for agent subsystem errors."""

    def __init__(self, message: str, local_name: Optional[str] = None):
        super().__init__(message)
        self.local_name = local_name


# =============================================================================
# Manifest
# =============================================================================

class ManifestError(AgentError):
    """The manifest could not be turned into an AgentManifest."""


class ManifestNotFoundError(ManifestError):
    pass


class ManifestParseError(ManifestError):
    """Not valid JSON, or not a JSON object."""


class ManifestValidationError(ManifestError):
    """A field has the wrong type or a required field is missing."""


# =============================================================================
# Loading
# =============================================================================

class LoadError(AgentError):
    """Loading one agent failed; siblings are unaffected."""


class MissingNameError(LoadError):
    pass


class InvalidRouteNameError(LoadError):
    """The manifest name does not yield a usable mount path."""


class AgentImportError(LoadError):
    """The entry file raised on import or lacks the constructible export."""


class AgentConstructionError(LoadError):
    pass


class AgentAttachError(LoadError):
    pass


class NamespaceCollisionError(AgentError):
    """Two agents resolve to the same local name or route name."""

    def __init__(self, message: str, local_name: Optional[str] = None, route_name: Optional[str] = None):
        super().__init__(message, local_name=local_name)
        self.route_name = route_name


# =============================================================================
# Lifecycle
# =============================================================================

class LifecycleError(AgentError):
    """An out-of-order lifecycle transition was requested."""
