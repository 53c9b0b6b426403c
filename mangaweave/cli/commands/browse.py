"""
Browse Command - Drive the capability contract of one plugin.

Lists the containers of a website, the chapters of a container and the
pages of a chapter, exactly as a downstream consumer would request them.
"""

import asyncio
from typing import Optional

import typer
from rich.table import Table

from mangaweave.cli.context import get_config_manager, open_registry
from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.models import Chapter, Container
from mangaweave.plugins.base import SitePlugin
from mangaweave.plugins.common.fetch import relative_path
from mangaweave.ui import get_console, handle_error, status_spinner

# Create browse command group
app = typer.Typer(
    name="browse",
    help="📚 Browse containers, chapters and pages",
    no_args_is_help=True,
)

console = get_console()

TIMEOUT_OPTION = typer.Option(
    None,
    "--timeout",
    "-t",
    help="Bound for the whole operation in seconds",
    min=1.0,
)


async def resolve_container(plugin: SitePlugin, url: str, timeout: Optional[float] = None) -> Container:
    """Resolve a container from a pasted URL, falling back to its path."""
    container = await plugin.container_from_url(plugin.resolve(url), timeout=timeout)
    if container is None:
        path = relative_path(plugin.resolve(url), plugin.uri)
        container = plugin.create_container(path, path)
    return container


@app.command(name="containers")
def browse_containers(
    identifier: str = typer.Argument(..., help="Plugin identifier"),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        help="Show at most this many containers",
        min=1,
    ),
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """
    📚 List the containers of a website.

    Examples:

        mangaweave browse containers barmanga --limit 20
    """
    try:
        asyncio.run(_browse_containers(identifier, limit, timeout, get_config_manager()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Listing cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, f"Failed to list containers of '{identifier}'")
        raise typer.Exit(1)


async def _browse_containers(
    identifier: str,
    limit: Optional[int],
    timeout: Optional[float],
    config_manager: ConfigManager,
) -> None:
    async with open_registry(config_manager) as registry:
        plugin = registry.get_plugin(identifier)
        with status_spinner(f"Listing containers of {plugin.title}..."):
            containers = await plugin.list_containers(timeout=timeout)

    shown = containers[:limit] if limit else containers
    table = Table(title=f"📚 {plugin.title}")
    table.add_column("#", justify="right", style="muted")
    table.add_column("Title", style="bold")
    table.add_column("Identifier", style="cyan")
    for number, container in enumerate(shown, 1):
        table.add_row(str(number), container.title, container.identifier)

    console.print(table)
    console.print(f"[muted]{len(shown)} of {len(containers)} container(s)[/muted]")


@app.command(name="chapters")
def browse_chapters(
    identifier: str = typer.Argument(..., help="Plugin identifier"),
    url: str = typer.Argument(..., help="Container URL (absolute or relative to the website)"),
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """
    📖 List the chapters of a container.

    Examples:

        mangaweave browse chapters jiangzaitoon https://jiangzaitoon.lgbt/manga/19-gun/
    """
    try:
        asyncio.run(_browse_chapters(identifier, url, timeout, get_config_manager()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Listing cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, f"Failed to list chapters of '{url}'")
        raise typer.Exit(1)


async def _browse_chapters(
    identifier: str,
    url: str,
    timeout: Optional[float],
    config_manager: ConfigManager,
) -> None:
    async with open_registry(config_manager) as registry:
        plugin = registry.get_plugin(identifier)
        container = await resolve_container(plugin, url, timeout)
        with status_spinner(f"Listing chapters of {container.title}..."):
            chapters = await plugin.list_chapters(container, timeout=timeout)

    table = Table(title=f"📖 {container.title}")
    table.add_column("#", justify="right", style="muted")
    table.add_column("Title", style="bold")
    table.add_column("Identifier", style="cyan")
    for number, chapter in enumerate(chapters, 1):
        table.add_row(str(number), chapter.title, chapter.identifier)

    console.print(table)
    console.print(f"[muted]Container identifier: {container.identifier}[/muted]")


@app.command(name="pages")
def browse_pages(
    identifier: str = typer.Argument(..., help="Plugin identifier"),
    url: str = typer.Argument(..., help="Container URL (absolute or relative to the website)"),
    chapter_id: str = typer.Argument(..., help="Chapter identifier as listed by 'browse chapters'"),
    timeout: Optional[float] = TIMEOUT_OPTION,
) -> None:
    """
    🖼️  List the pages of a chapter.

    Examples:

        mangaweave browse pages barmanga /manga/sample/ /manga/sample/ch-1/
    """
    try:
        asyncio.run(_browse_pages(identifier, url, chapter_id, timeout, get_config_manager()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Listing cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, f"Failed to list pages of '{chapter_id}'")
        raise typer.Exit(1)


async def _browse_pages(
    identifier: str,
    url: str,
    chapter_id: str,
    timeout: Optional[float],
    config_manager: ConfigManager,
) -> None:
    async with open_registry(config_manager) as registry:
        plugin = registry.get_plugin(identifier)
        container = await resolve_container(plugin, url, timeout)
        chapter = Chapter(container=container, identifier=chapter_id, title=chapter_id)
        with status_spinner(f"Listing pages of {chapter_id}..."):
            pages = await plugin.list_pages(chapter, timeout=timeout)

    table = Table(title=f"🖼️  {chapter_id}")
    table.add_column("Index", justify="right", style="muted")
    table.add_column("Type", style="accent")
    table.add_column("Link", style="blue")
    for page in pages:
        table.add_row(str(page.index), page.media_type, page.link)

    console.print(table)


__all__ = ["app", "resolve_container"]
