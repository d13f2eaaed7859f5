"""
Epistery Host - Multi-tenant Domain Host with Pluggable Agents

One process claims and serves many domains. Agent modules dropped into
~/.epistery/.agents are discovered at startup and mounted under
/.well-known/epistery/agent/<name> and /agent/<name>.
"""

__version__ = "0.1.0"

from .config import HostConfig, load_config
from .server import create_app

__all__ = [
    "__version__",
    "HostConfig",
    "load_config",
    "create_app",
]
