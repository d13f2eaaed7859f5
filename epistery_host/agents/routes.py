"""
Agent Presentation API Routes

FastAPI router for listing agents, building the navigation menu and the
admin-only default/enable toggles. Enablement is per domain and comes
from the domain store; the registry only supplies manifest metadata.
"""

import html
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from ..domains import request_domain, is_admin, require_admin, WALLET_HEADER
from .registry import AgentRegistry

logger = logging.getLogger("epistery-host.agents.routes")

ADMIN_LINK = '<a href="/admin"><span>Administrate</span></a>'


class SetDefaultAgentBody(BaseModel):
    agentName: Optional[str] = None


class ToggleAgentBody(BaseModel):
    agentName: Optional[str] = None
    enabled: Optional[bool] = None


def render_nav_menu(registry: AgentRegistry, state, admin: bool = False) -> str:
    """Navigation links for agents that have a UI and are enabled."""
    links = []
    for entry in registry:
        m = entry.manifest
        if m.no_user_interface or not state.is_enabled(m.name):
            continue
        name = html.escape(m.display_name)
        icon = html.escape(m.icon or "")
        links.append(
            f'<a href="{html.escape(entry.mount_paths.short)}">'
            f'<img alt="{name}" src="{icon}"> <span>{name}</span></a>'
        )

    if admin:
        links.append(ADMIN_LINK)

    return "".join(links)


def create_agent_router(registry: AgentRegistry) -> APIRouter:
    """Create FastAPI router for agent presentation endpoints."""

    router = APIRouter(prefix="/api", tags=["agents"])

    @router.get("/agents")
    async def list_agents(request: Request):
        """List active agents with their enabled state for this domain."""
        state = request.app.state.domains.agent_state(request_domain(request))
        return {
            "agents": [e.to_dict(enabled=state.is_enabled(e.manifest.name)) for e in registry],
            "defaultAgent": state.default_agent,
        }

    @router.get("/nav-menu", response_class=HTMLResponse)
    async def nav_menu(request: Request):
        """Navigation menu HTML."""
        store = request.app.state.domains
        domain = request_domain(request)
        admin = is_admin(store, domain, request.headers.get(WALLET_HEADER))
        return render_nav_menu(registry, store.agent_state(domain), admin=admin)

    @router.post("/set-default-agent")
    async def set_default_agent(
        request: Request,
        body: SetDefaultAgentBody = None,
        admin: str = Depends(require_admin),
    ):
        """Set the agent the domain root redirects to."""
        if not body or not body.agentName:
            raise HTTPException(status_code=400, detail="agentName is required")

        if registry.find_by_name(body.agentName) is None:
            raise HTTPException(status_code=404, detail="Agent not found")

        request.app.state.domains.set_default_agent(request_domain(request), body.agentName)
        return {"success": True}

    @router.post("/toggle-agent")
    async def toggle_agent(
        request: Request,
        body: ToggleAgentBody = None,
        admin: str = Depends(require_admin),
    ):
        """Enable or disable an agent for this domain."""
        if not body or not body.agentName or body.enabled is None:
            raise HTTPException(status_code=400, detail="agentName and enabled are required")

        request.app.state.domains.set_agent_enabled(
            request_domain(request), body.agentName, body.enabled
        )
        return {"success": True}

    return router
