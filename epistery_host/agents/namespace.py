"""
Namespace Router

Derives an agent's mount paths from its manifest name and mounts one
sub-application at both of them.
"""

from fastapi import FastAPI

from .models import MountPaths

WELL_KNOWN_BASE = "/.well-known/epistery/agent"
SHORT_BASE = "/agent"
SCOPE_MARKER = "@"


def route_name_for(name: str) -> str:
    """Strip a single leading scope marker: "@geistm/adnet" -> "geistm/adnet"."""
    if name.startswith(SCOPE_MARKER):
        return name[len(SCOPE_MARKER):]
    return name


def is_valid_route_name(route_name: str) -> bool:
    """
    Non-empty, slash-separated segments with no empty, "." or ".." parts.

    "/agent/" would be trimmed to "/agent" by the router and swallow every
    other agent's short path, so such names are never mounted.
    """
    if not route_name:
        return False
    return all(segment not in ("", ".", "..") for segment in route_name.split("/"))


def routes_overlap(a: str, b: str) -> bool:
    """True if one route name is a path-segment prefix of the other."""
    return a == b or b.startswith(a + "/") or a.startswith(b + "/")


def mount_paths_for(name: str) -> MountPaths:
    route_name = route_name_for(name)
    return MountPaths(
        route_name=route_name,
        canonical=f"{WELL_KNOWN_BASE}/{route_name}",
        short=f"{SHORT_BASE}/{route_name}",
    )


def mount_agent(app: FastAPI, paths: MountPaths, sub_app: FastAPI) -> None:
    """
    Mount `sub_app` at both paths.

    Both mounts share the same instance, so agent state is the same no
    matter which prefix a caller used.
    """
    for path in paths:
        app.mount(path, sub_app)
