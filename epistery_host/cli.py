"""
Epistery Host CLI

Command-line interface for the Epistery Host server.
"""

import sys
from pathlib import Path

import click
import httpx
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from . import __version__
from .config import load_config, create_default_config, HostConfig
from .domains import WALLET_HEADER


console = Console()


def _config(ctx) -> HostConfig:
    config_path = ctx.obj.get("config_path")
    if config_path and Path(config_path).exists():
        return load_config(config_path)
    return HostConfig.from_env()


def _base_url(ctx, port: int = None) -> str:
    return f"http://localhost:{port or _config(ctx).server.port}"


@click.group()
@click.version_option(__version__, prog_name="epistery-host")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config file")
@click.pass_context
def cli(ctx, config_path: str):
    """Epistery Host - multi-tenant host for pluggable agents"""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# =============================================================================
# Server Commands
# =============================================================================

@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.pass_context
def start(ctx, host: str, port: int):
    """Start the Epistery Host server."""
    config_path = ctx.obj.get("config_path")
    if config_path and not Path(config_path).exists():
        console.print(f"[red]✗[/red] Config file not found: {config_path}")
        sys.exit(1)

    config = _config(ctx)
    if config_path:
        console.print(f"[green]✓[/green] Loaded config from {config_path}")

    console.print(Panel(
        f"[bold]Epistery Host v{__version__}[/bold]\n"
        f"Starting server on [cyan]http://{host or config.server.host}:{port or config.server.port}[/cyan]\n"
        f"Agents: [cyan]{config.agents.path}[/cyan]",
        title="🚀 Starting"
    ))

    from .server import main as server_main
    server_main(config_path, host=host, port=port)


@cli.command()
@click.option("--port", "-p", default=None, type=int, help="Server port")
@click.pass_context
def status(ctx, port: int):
    """Show server status."""
    try:
        response = httpx.get(f"{_base_url(ctx, port)}/", params={"home": 1})
        data = response.json()

        console.print(Panel(
            f"[bold green]Running[/bold green]\n\n"
            f"Version: {data.get('version', 'unknown')}\n"
            f"State: {data.get('status', 'unknown')}\n"
            f"Agents: {data.get('agents', 0)}\n"
            f"Default agent: {data.get('defaultAgent') or '-'}",
            title="📊 Epistery Host Status"
        ))
    except Exception as e:
        console.print(f"[red]✗[/red] Server not running: {e}")
        sys.exit(1)


@cli.command()
def init():
    """Initialize a new configuration file."""
    config_path = Path("epistery-host.yaml")

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    config_path.write_text(create_default_config())
    console.print(f"[green]✓[/green] Created {config_path}")
    console.print("\nDrop agents into the configured agents path, then run:")
    console.print("  [cyan]epistery-host -c epistery-host.yaml start[/cyan]")


# =============================================================================
# Agent Commands
# =============================================================================

@cli.group()
def agents():
    """Inspect and manage agent modules."""
    pass


@agents.command("discover")
@click.option("--path", "agents_path", type=click.Path(), help="Agents directory (default: from config)")
@click.pass_context
def agents_discover(ctx, agents_path: str):
    """Scan the agents directory without starting the server."""
    from .agents import discover, mount_paths_for, is_valid_route_name

    config = _config(ctx)
    root = agents_path or config.agents.path
    records = discover(root, config.agents.manifest_filename, config.agents.entry_filename)

    if not records:
        console.print(f"[yellow]No agents found in {root}[/yellow]")
        return

    table = Table(title=f"Agents in {root}")
    table.add_column("Directory", style="cyan")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Short Path")

    for record in records:
        name = record.manifest.name
        paths = mount_paths_for(name) if name else None
        if paths is None:
            short_path = "-"
        elif is_valid_route_name(paths.route_name):
            short_path = paths.short
        else:
            short_path = "[red]invalid name[/red]"

        table.add_row(
            record.local_name,
            name or "[red]missing[/red]",
            record.manifest.version or "-",
            short_path,
        )

    console.print(table)


@agents.command("list")
@click.option("--port", "-p", default=None, type=int, help="Server port")
@click.option("--domain", "-d", default=None, help="Domain to query (Host header)")
@click.pass_context
def agents_list(ctx, port: int, domain: str):
    """List agents loaded by a running server."""
    headers = {"Host": domain} if domain else {}
    try:
        response = httpx.get(f"{_base_url(ctx, port)}/api/agents", headers=headers)
        data = response.json()

        if not data.get("agents"):
            console.print("[yellow]No agents loaded[/yellow]")
            return

        table = Table(title="Active Agents")
        table.add_column("Name", style="cyan")
        table.add_column("Version")
        table.add_column("Enabled", style="green")
        table.add_column("Default")
        table.add_column("Short Path")

        for agent in data["agents"]:
            table.add_row(
                agent["name"],
                agent.get("version") or "-",
                "✓" if agent["enabled"] else "✗",
                "★" if agent["name"] == data.get("defaultAgent") else "",
                agent["shortPath"],
            )

        console.print(table)
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to list agents: {e}")
        sys.exit(1)


@agents.command("set-default")
@click.argument("agent_name")
@click.option("--admin", "-a", required=True, envvar="EPISTERY_ADMIN_ADDRESS", help="Admin wallet address")
@click.option("--domain", "-d", default=None, help="Domain (Host header)")
@click.option("--port", "-p", default=None, type=int, help="Server port")
@click.pass_context
def agents_set_default(ctx, agent_name: str, admin: str, domain: str, port: int):
    """Set the agent a domain's root redirects to."""
    headers = {WALLET_HEADER: admin}
    if domain:
        headers["Host"] = domain

    try:
        response = httpx.post(
            f"{_base_url(ctx, port)}/api/set-default-agent",
            json={"agentName": agent_name},
            headers=headers,
        )

        if response.status_code == 200:
            console.print(f"[green]✓[/green] Default agent: {agent_name}")
        else:
            console.print(f"[red]✗[/red] Failed: {response.json()}")
            sys.exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]✗[/red] Failed: {e}")
        sys.exit(1)


@agents.command("toggle")
@click.argument("agent_name")
@click.option("--enable/--disable", default=True, help="Enable or disable the agent")
@click.option("--admin", "-a", required=True, envvar="EPISTERY_ADMIN_ADDRESS", help="Admin wallet address")
@click.option("--domain", "-d", default=None, help="Domain (Host header)")
@click.option("--port", "-p", default=None, type=int, help="Server port")
@click.pass_context
def agents_toggle(ctx, agent_name: str, enable: bool, admin: str, domain: str, port: int):
    """Enable or disable an agent for a domain."""
    headers = {WALLET_HEADER: admin}
    if domain:
        headers["Host"] = domain

    try:
        response = httpx.post(
            f"{_base_url(ctx, port)}/api/toggle-agent",
            json={"agentName": agent_name, "enabled": enable},
            headers=headers,
        )

        if response.status_code == 200:
            state = "enabled" if enable else "disabled"
            console.print(f"[green]✓[/green] {agent_name} {state}")
        else:
            console.print(f"[red]✗[/red] Failed: {response.json()}")
            sys.exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]✗[/red] Failed: {e}")
        sys.exit(1)


# =============================================================================
# Main
# =============================================================================

def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
