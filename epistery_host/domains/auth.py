"""
Domain resolution and administrator checks.

The administrator of a domain is identified by the wallet address stored
as `admin_address` in the domain configuration. Requests present their
address in the X-Wallet-Address header.
"""

import logging

from fastapi import HTTPException, Request

from .storage import DomainStore

logger = logging.getLogger("epistery-host.domains.auth")

WALLET_HEADER = "X-Wallet-Address"
DEFAULT_DOMAIN = "localhost"


def request_domain(request: Request) -> str:
    """Host header without the port, or localhost."""
    host = request.headers.get("host", "")
    return host.split(":")[0].lower() or DEFAULT_DOMAIN


def is_admin(store: DomainStore, domain: str, address: str | None) -> bool:
    if not address:
        return False
    admin_address = store.get(domain).get("admin_address")
    return bool(admin_address) and admin_address.lower() == address.lower()


def require_admin(request: Request) -> str:
    """FastAPI dependency: the caller's address if they administer this domain."""
    address = request.headers.get(WALLET_HEADER)
    if not address:
        raise HTTPException(status_code=401, detail="Not authenticated")

    domain = request_domain(request)
    if not is_admin(request.app.state.domains, domain, address):
        logger.warning(f"Rejected admin request for {domain} from {address}")
        raise HTTPException(status_code=403, detail="Not authorized")

    return address
