"""Tests for namespace derivation and dual mounting."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from epistery_host.agents import (
    route_name_for, mount_paths_for, mount_agent,
    is_valid_route_name, routes_overlap,
)


def test_scoped_name():
    paths = mount_paths_for("@scope/name")

    assert paths.route_name == "scope/name"
    assert paths.canonical == "/.well-known/epistery/agent/scope/name"
    assert paths.short == "/agent/scope/name"


def test_unscoped_name_unchanged():
    assert route_name_for("simple-agent") == "simple-agent"
    assert mount_paths_for("simple-agent").short == "/agent/simple-agent"


def test_only_one_leading_marker_is_stripped():
    assert route_name_for("@@double") == "@double"
    assert route_name_for("not@leading") == "not@leading"


def test_paths_are_deterministic():
    assert mount_paths_for("@a/b") == mount_paths_for("@a/b")
    assert list(mount_paths_for("@a/b")) == ["/.well-known/epistery/agent/a/b", "/agent/a/b"]


def test_both_paths_share_one_sub_app():
    """State is shared no matter which prefix was used."""
    sub_app = FastAPI()
    counter = {"n": 0}

    @sub_app.get("/count")
    async def count():
        counter["n"] += 1
        return {"n": counter["n"]}

    app = FastAPI()
    mount_agent(app, mount_paths_for("@scope/counter"), sub_app)
    client = TestClient(app)

    assert client.get("/agent/scope/counter/count").json() == {"n": 1}
    assert client.get("/.well-known/epistery/agent/scope/counter/count").json() == {"n": 2}


def test_valid_route_names():
    assert is_valid_route_name("agent")
    assert is_valid_route_name("scope/agent")
    assert is_valid_route_name(route_name_for("@scope/agent"))


def test_invalid_route_names():
    for name in ["", "/", "scope/", "/agent", "scope//agent", "../agent", "scope/."]:
        assert not is_valid_route_name(name), name
    assert not is_valid_route_name(route_name_for("@"))


def test_routes_overlap():
    assert routes_overlap("org", "org")
    assert routes_overlap("org", "org/x")
    assert routes_overlap("org/x", "org")
    assert not routes_overlap("org", "organic")
    assert not routes_overlap("org/x", "org/y")
