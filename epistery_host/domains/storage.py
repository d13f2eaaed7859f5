"""
Domain Configuration Storage

Per-domain key-value configuration, one JSON document per domain name.
The host reads agent enablement and the default agent from here.

Storage backends:
- sqlite (default): Local SQLite database
- memory: In-memory (for testing)
"""

import sqlite3
import json
import logging
import copy
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from contextlib import contextmanager

from .models import DomainAgentState

logger = logging.getLogger("epistery-host.domains.storage")


class DomainStore:
    """Key-value configuration store keyed by domain name."""

    def __init__(self, storage: str = "sqlite", path: str = "./domains.db"):
        self.storage = storage
        self.path = Path(path).expanduser()

        if storage == "sqlite":
            self._init_sqlite()
        elif storage == "memory":
            self._documents: Dict[str, Dict[str, Any]] = {}
        else:
            raise ValueError(f"Unknown domain storage backend: {storage}")

    @contextmanager
    def _conn(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_sqlite(self):
        """Initialize database schema."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS domains (
                    domain TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
        logger.info(f"Domain storage initialized at {self.path}")

    # =========================================================================
    # Documents
    # =========================================================================

    def get(self, domain: str) -> Dict[str, Any]:
        """Configuration for `domain`, or an empty dict if none is stored."""
        domain = domain.lower()
        if self.storage == "memory":
            return copy.deepcopy(self._documents.get(domain, {}))

        with self._conn() as conn:
            row = conn.execute(
                "SELECT data FROM domains WHERE domain = ?", (domain,)
            ).fetchone()
        return json.loads(row["data"]) if row else {}

    def save(self, domain: str, data: Dict[str, Any]) -> None:
        """Replace the configuration for `domain`."""
        domain = domain.lower()
        if self.storage == "memory":
            self._documents[domain] = copy.deepcopy(data)
            return

        now = datetime.now(timezone.utc).isoformat()
        with self._conn() as conn:
            conn.execute("""
                INSERT INTO domains (domain, data, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(domain) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
            """, (domain, json.dumps(data), now))

    def update(self, domain: str, **fields: Any) -> Dict[str, Any]:
        """Merge top-level fields into the stored configuration."""
        data = self.get(domain)
        data.update(fields)
        self.save(domain, data)
        return data

    def domains(self) -> List[str]:
        if self.storage == "memory":
            return sorted(self._documents)

        with self._conn() as conn:
            rows = conn.execute("SELECT domain FROM domains ORDER BY domain").fetchall()
        return [r["domain"] for r in rows]

    # =========================================================================
    # Agent state
    # =========================================================================

    def agent_state(self, domain: str) -> DomainAgentState:
        return DomainAgentState.from_config(self.get(domain))

    def set_default_agent(self, domain: str, agent_name: Optional[str]) -> DomainAgentState:
        data = self.update(domain, default_agent=agent_name)
        logger.info(f"Default agent for {domain} set to: {agent_name}")
        return DomainAgentState.from_config(data)

    def set_agent_enabled(self, domain: str, agent_name: str, enabled: bool) -> DomainAgentState:
        data = self.get(domain)
        enabled_agents = data.get("enabled_agents") or {}
        enabled_agents[agent_name] = enabled
        data["enabled_agents"] = enabled_agents
        self.save(domain, data)
        logger.info(f"Agent {agent_name} {'enabled' if enabled else 'disabled'} for {domain}")
        return DomainAgentState.from_config(data)
