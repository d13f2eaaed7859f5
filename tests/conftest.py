"""Shared fixtures: agent packages written into a temporary agents root."""

import json
import textwrap

import pytest

from epistery_host.config import HostConfig
from epistery_host.domains import DomainStore
from epistery_host.server import create_app


PLAIN_AGENT = """
class Agent:
    def __init__(self, config):
        if config.get("fail_init"):
            raise RuntimeError("constructor exploded")
        self.config = config
        self.cleanup_calls = 0

    def cleanup(self):
        self.cleanup_calls += 1
        if self.config.get("fail_cleanup"):
            raise RuntimeError("cleanup exploded")
"""

PING_AGENT = """
class Agent:
    def __init__(self, config):
        self.config = config
        self.hits = 0

    def attach(self, router):
        @router.get("/ping")
        async def ping():
            self.hits += 1
            return {"pong": True, "greeting": self.config.get("greeting", "hi")}

        @router.get("/hits")
        async def hits():
            return {"hits": self.hits}
"""

_DEFAULT = object()


@pytest.fixture
def agents_root(tmp_path):
    root = tmp_path / "agents"
    root.mkdir()
    return root


@pytest.fixture
def make_agent(agents_root):
    """
    Write an agent package. Pass manifest=None or source=None to leave the
    manifest or entry file out; manifest_text writes raw manifest content.
    """
    def _make(local_name, manifest=_DEFAULT, source=PLAIN_AGENT, manifest_text=None, files=None):
        agent_dir = agents_root / local_name
        agent_dir.mkdir()

        if manifest_text is not None:
            (agent_dir / "epistery.json").write_text(manifest_text)
        elif manifest is not None:
            if manifest is _DEFAULT:
                manifest = {"name": local_name, "version": "1.0.0"}
            (agent_dir / "epistery.json").write_text(json.dumps(manifest))

        if source is not None:
            (agent_dir / "agent.py").write_text(textwrap.dedent(source))

        for filename, content in (files or {}).items():
            (agent_dir / filename).write_text(textwrap.dedent(content))

        return agent_dir

    return _make


@pytest.fixture
def domain_store():
    return DomainStore(storage="memory")


@pytest.fixture
def host_config(agents_root):
    config = HostConfig()
    config.agents.path = str(agents_root)
    config.agents.cleanup_timeout = 1.0
    config.shutdown.timeout = 2.0
    return config


@pytest.fixture
def app(host_config, domain_store):
    return create_app(host_config, domain_store=domain_store)
