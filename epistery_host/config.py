"""
Configuration management for Epistery Host.

Supports YAML configuration with environment variable expansion.
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any

import yaml


DEFAULT_AGENTS_PATH = "~/.epistery/.agents"
DEFAULT_DOMAINS_PATH = "~/.epistery/domains.db"


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 4080


@dataclass
class AgentsConfig:
    """Where agents live and how they are loaded."""
    path: str = DEFAULT_AGENTS_PATH
    manifest_filename: str = "epistery.json"
    entry_filename: str = "agent.py"
    export_name: str = "Agent"
    cleanup_timeout: float = 3.0


@dataclass
class DomainsConfig:
    """Per-domain configuration store."""
    storage: str = "sqlite"  # sqlite | memory
    path: str = DEFAULT_DOMAINS_PATH


@dataclass
class ShutdownConfig:
    """Graceful shutdown budget."""
    timeout: float = 5.0


@dataclass
class HostConfig:
    """Root configuration for Epistery Host."""
    server: ServerConfig = field(default_factory=ServerConfig)
    agents: AgentsConfig = field(default_factory=AgentsConfig)
    domains: DomainsConfig = field(default_factory=DomainsConfig)
    shutdown: ShutdownConfig = field(default_factory=ShutdownConfig)

    @classmethod
    def from_env(cls) -> "HostConfig":
        """Defaults, with the agents path taken from EPISTERY_AGENTS_PATH if set."""
        config = cls()
        config.agents.path = os.environ.get("EPISTERY_AGENTS_PATH", config.agents.path)
        return config


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values."""
    if isinstance(value, str):
        # Match ${VAR} or $VAR patterns
        pattern = r'\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)'

        def replace(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return re.sub(pattern, replace, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(v) for v in value]
    return value


def load_config(path: str | Path) -> HostConfig:
    """Load configuration from YAML file."""
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    data = expand_env_vars(raw)

    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 4080)),
    )

    agents_data = data.get("agents") or {}
    agents = AgentsConfig(
        path=agents_data.get("path", DEFAULT_AGENTS_PATH),
        manifest_filename=agents_data.get("manifest_filename", "epistery.json"),
        entry_filename=agents_data.get("entry_filename", "agent.py"),
        export_name=agents_data.get("export_name", "Agent"),
        cleanup_timeout=float(agents_data.get("cleanup_timeout", 3.0)),
    )

    domains_data = data.get("domains") or {}
    domains = DomainsConfig(
        storage=domains_data.get("storage", "sqlite"),
        path=domains_data.get("path", DEFAULT_DOMAINS_PATH),
    )

    shutdown_data = data.get("shutdown") or {}
    shutdown = ShutdownConfig(
        timeout=float(shutdown_data.get("timeout", 5.0)),
    )

    return HostConfig(
        server=server,
        agents=agents,
        domains=domains,
        shutdown=shutdown,
    )


def create_default_config() -> str:
    """Generate default configuration YAML."""
    return """# Epistery Host Configuration

server:
  host: 0.0.0.0
  port: 4080

# Agent modules: one directory per agent, each holding
# epistery.json and agent.py
agents:
  path: ~/.epistery/.agents
  # manifest_filename: epistery.json
  # entry_filename: agent.py
  # export_name: Agent
  cleanup_timeout: 3.0

# Per-domain configuration (admin address, default agent, enabled agents)
domains:
  storage: sqlite
  path: ~/.epistery/domains.db

shutdown:
  timeout: 5.0
"""
