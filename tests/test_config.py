"""Tests for configuration loading."""

import pytest
import yaml

from epistery_host.config import (
    HostConfig, load_config, expand_env_vars, create_default_config,
)


def test_defaults():
    config = HostConfig()

    assert config.server.port == 4080
    assert config.agents.manifest_filename == "epistery.json"
    assert config.agents.entry_filename == "agent.py"
    assert config.agents.export_name == "Agent"
    assert config.domains.storage == "sqlite"
    assert config.shutdown.timeout == 5.0


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("EPISTERY_AGENTS_PATH", str(tmp_path))

    assert HostConfig.from_env().agents.path == str(tmp_path)


def test_from_env_default(monkeypatch):
    monkeypatch.delenv("EPISTERY_AGENTS_PATH", raising=False)

    assert HostConfig.from_env().agents.path == HostConfig().agents.path


def test_load_config(tmp_path, monkeypatch):
    monkeypatch.setenv("AGENTS_HOME", "/srv/agents")
    path = tmp_path / "host.yaml"
    path.write_text(yaml.safe_dump({
        "server": {"port": "9000"},
        "agents": {"path": "${AGENTS_HOME}/enabled", "cleanup_timeout": 1},
        "domains": {"storage": "memory"},
        "shutdown": {"timeout": 2},
    }))

    config = load_config(path)

    assert config.server.port == 9000
    assert config.server.host == "0.0.0.0"
    assert config.agents.path == "/srv/agents/enabled"
    assert config.agents.cleanup_timeout == 1.0
    assert config.agents.entry_filename == "agent.py"
    assert config.domains.storage == "memory"
    assert config.shutdown.timeout == 2.0


def test_load_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(path) == HostConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_expand_env_vars(monkeypatch):
    monkeypatch.setenv("NAME", "epistery")
    monkeypatch.delenv("UNSET_VAR", raising=False)

    assert expand_env_vars({"a": ["$NAME", "${NAME}-x"], "b": 3}) == {"a": ["epistery", "epistery-x"], "b": 3}
    assert expand_env_vars("$UNSET_VAR") == "$UNSET_VAR"


def test_default_config_loads(tmp_path):
    path = tmp_path / "default.yaml"
    path.write_text(create_default_config())

    config = load_config(path)

    assert config.agents.path == "~/.epistery/.agents"
    assert config.agents.cleanup_timeout == 3.0
    assert config.server.port == 4080
