"""
Domain models.
"""

from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class DomainAgentState(BaseModel):
    """Per-domain agent presentation state, keyed by manifest name."""
    default_agent: Optional[str] = None
    enabled_agents: Dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, data: Dict[str, Any]) -> "DomainAgentState":
        return cls(
            default_agent=data.get("default_agent") or None,
            enabled_agents=data.get("enabled_agents") or {},
        )

    def is_enabled(self, name: str) -> bool:
        """Agents are enabled unless explicitly switched off."""
        return self.enabled_agents.get(name) is not False
