"""
Epistery Host Server

FastAPI application that serves many domains from one process and mounts
pluggable agent modules under per-agent namespaces.
"""

import signal
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import HostConfig, load_config
from .agents import LifecycleController, create_agent_router
from .domains import DomainStore, request_domain, WALLET_HEADER

# Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("epistery-host")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    config: HostConfig = None,
    domain_store: DomainStore = None,
    force_exit: bool = False,
) -> FastAPI:
    """
    Create FastAPI application.

    Agents are loaded in the lifespan startup, before the server accepts
    connections, and cleaned up in the lifespan shutdown. `force_exit`
    arms a watchdog that kills the process if cleanup overruns.
    """
    config = config or HostConfig.from_env()

    domains = domain_store or DomainStore(
        storage=config.domains.storage,
        path=config.domains.path,
    )

    controller = LifecycleController(
        agents_path=config.agents.path,
        manifest_filename=config.agents.manifest_filename,
        entry_filename=config.agents.entry_filename,
        export_name=config.agents.export_name,
        cleanup_timeout=config.agents.cleanup_timeout,
        shutdown_timeout=config.shutdown.timeout,
        force_exit=force_exit,
    )
    registry = controller.registry

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info("Epistery Host starting...")
        await controller.start(app)

        yield

        logger.info("Epistery Host shutting down...")
        await controller.shutdown(reason="server exit")
        logger.info("Graceful shutdown complete")

    app = FastAPI(
        title="Epistery Host",
        description="Multi-tenant host for domain-scoped agent modules",
        version=__version__,
        lifespan=lifespan,
    )

    # Store components in app state
    app.state.config = config
    app.state.domains = domains
    app.state.controller = controller
    app.state.registry = registry

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Content-Type", "Authorization", WALLET_HEADER],
        expose_headers=[WALLET_HEADER],
    )

    # =========================================================================
    # Routes
    # =========================================================================

    @app.get("/")
    async def root(request: Request):
        """Redirect to the domain's default agent, or return service info."""
        domain = request_domain(request)
        state = domains.agent_state(domain)

        if state.default_agent and "home" not in request.query_params:
            entry = registry.find_by_name(state.default_agent)
            if entry:
                return RedirectResponse(entry.mount_paths.short, status_code=307)

        return {
            "service": "Epistery Host",
            "version": __version__,
            "status": controller.state.value,
            "domain": domain,
            "agents": len(registry),
            "defaultAgent": state.default_agent,
        }

    @app.get("/health")
    async def health():
        """Health check."""
        return {"status": "healthy"}

    app.include_router(create_agent_router(registry))

    return app


# =============================================================================
# Main
# =============================================================================

def main(config_path: str = None, host: str = None, port: int = None):
    """Run the Epistery Host server."""
    import uvicorn

    config = load_config(config_path) if config_path else HostConfig.from_env()
    if host:
        config.server.host = host
    if port:
        config.server.port = port

    app = create_app(config, force_exit=True)

    server = uvicorn.Server(uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    ))

    install_hangup_handler(server)
    server.run()


def install_hangup_handler(server):
    """
    Route SIGHUP into uvicorn's exit path.

    uvicorn handles SIGINT and SIGTERM itself. Returns the handler, or
    None where the platform has no SIGHUP.
    """
    if not hasattr(signal, "SIGHUP"):
        return None

    def _handle_hangup(signum, frame):
        logger.info("Received SIGHUP, initiating graceful shutdown...")
        server.handle_exit(signum, frame)

    signal.signal(signal.SIGHUP, _handle_hangup)
    return _handle_hangup


if __name__ == "__main__":
    main()
