"""
Sources Command - Site plugin inspection and management.

This module implements the commands that list the registered site plugins,
show the decoration chain of one plugin, and enable or disable plugins in
the persisted configuration.
"""

import asyncio
from typing import Optional

import typer
from rich.table import Table

from mangaweave.cli.context import get_config_manager, open_registry
from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.models import Capability
from mangaweave.core.tags import Tags
from mangaweave.ui import display_info, display_warning, get_console, handle_error

# Create sources command group
app = typer.Typer(
    name="sources",
    help="🔌 Inspect and manage site plugins",
    no_args_is_help=True,
)

console = get_console()


@app.command(name="list")
def list_sources(
    tag: Optional[str] = typer.Option(
        None,
        "--tag",
        "-t",
        help="Show only plugins carrying this tag label (e.g. Spanish)"
    ),
) -> None:
    """
    📋 List registered site plugins.

    Examples:

        mangaweave sources list

        mangaweave sources list --tag Manhwa
    """
    try:
        asyncio.run(_list_sources(tag, get_config_manager()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Source listing cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, "Failed to list sources")
        raise typer.Exit(1)


async def _list_sources(tag: Optional[str], config_manager: ConfigManager) -> None:
    async with open_registry(config_manager) as registry:
        descriptors = registry.list_plugins()
        errors = registry.errors

    if tag:
        wanted = set(Tags.find(tag))
        if not wanted:
            display_warning(f"Unknown tag '{tag}'", "⚠️  No Such Tag")
        descriptors = [d for d in descriptors if wanted.intersection(d.tags)]

    table = Table(title="🔌 Site Plugins", show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("URI", style="blue")
    table.add_column("Tags", style="muted")

    for descriptor in descriptors:
        table.add_row(
            descriptor.identifier,
            descriptor.title,
            descriptor.uri,
            ", ".join(t.label for t in descriptor.tags),
        )

    console.print(table)
    console.print(f"[muted]{len(descriptors)} plugin(s)[/muted]")

    if errors:
        display_warning(
            "\n".join(f"{name}: {error}" for name, error in errors.items()),
            "⚠️  Plugins Not Loaded",
        )


@app.command(name="show")
def show_source(
    identifier: str = typer.Argument(..., help="Plugin identifier"),
) -> None:
    """
    ℹ️  Show a plugin's description and decoration chain.

    Examples:

        mangaweave sources show barmanga
    """
    try:
        asyncio.run(_show_source(identifier, get_config_manager()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Source info cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, f"Failed to get source info for '{identifier}'")
        raise typer.Exit(1)


async def _show_source(identifier: str, config_manager: ConfigManager) -> None:
    async with open_registry(config_manager) as registry:
        plugin = registry.get_plugin(identifier)
        descriptor = plugin.descriptor
        chain = plugin.chain.describe()
        layers = plugin.chain.layers
        settings = plugin.settings

    console.print(f"[primary]{descriptor.title}[/primary] [muted]({descriptor.identifier})[/muted]")
    console.print(f"[dim]URI:[/dim] [blue]{descriptor.uri}[/blue]")
    console.print(f"[dim]Tags:[/dim] {', '.join(str(t) for t in descriptor.tags) or '-'}")
    console.print(f"[dim]Layers:[/dim] {' → '.join(layers)}")

    table = Table(title="Capabilities")
    table.add_column("Capability", style="cyan")
    table.add_column("Layer", style="accent")
    for capability in Capability:
        table.add_row(capability.value, chain.get(capability.value, "[muted]-[/muted]"))
    console.print(table)

    console.print(
        f"[dim]Settings:[/dim] anti_hotlink={settings.anti_hotlink} "
        f"max_pages={settings.max_pages} timeout={settings.timeout}"
    )


@app.command(name="enable")
def enable_source(
    identifier: str = typer.Argument(..., help="Plugin identifier to enable"),
) -> None:
    """
    ✅ Enable a site plugin.

    Examples:

        mangaweave sources enable mangacrab
    """
    try:
        get_config_manager().update_scope(identifier, enabled=True)
        display_info(f"Plugin '{identifier}' enabled.", "✅ Enabled")
    except Exception as e:
        handle_error(e, f"Failed to enable source '{identifier}'")
        raise typer.Exit(1)


@app.command(name="disable")
def disable_source(
    identifier: str = typer.Argument(..., help="Plugin identifier to disable"),
) -> None:
    """
    ❌ Disable a site plugin.

    Disabled plugins are not admitted to the registry.

    Examples:

        mangaweave sources disable mangacrab
    """
    try:
        get_config_manager().update_scope(identifier, enabled=False)
        display_info(f"Plugin '{identifier}' disabled.", "❌ Disabled")
    except Exception as e:
        handle_error(e, f"Failed to disable source '{identifier}'")
        raise typer.Exit(1)


__all__ = ["app"]
