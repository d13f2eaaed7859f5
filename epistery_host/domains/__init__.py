"""
Per-domain configuration.

Each domain claimed by the host has its own configuration document,
holding (among other things) its administrator address, default agent
and which agents are enabled.
"""

from .models import DomainAgentState
from .storage import DomainStore
from .auth import request_domain, is_admin, require_admin, WALLET_HEADER

__all__ = [
    "DomainAgentState",
    "DomainStore",
    "request_domain",
    "is_admin",
    "require_admin",
    "WALLET_HEADER",
]
