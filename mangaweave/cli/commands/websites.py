"""
Websites Command - Liveness report of all registered websites.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from mangaweave.cli.context import get_config_manager, open_registry
from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.health import StatusCode, WebsiteHealthChecker, write_reports
from mangaweave.ui import get_console, handle_error, status_spinner

# Create websites command group
app = typer.Typer(
    name="websites",
    help="🩺 Check the websites behind the plugins",
    no_args_is_help=True,
)

console = get_console()


@app.command(name="check")
def check_websites(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Report directory (defaults to health.report_directory)",
        file_okay=False,
        dir_okay=True,
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Liveness request timeout in seconds",
        min=1.0,
    ),
) -> None:
    """
    🩺 Check every registered website and write JSON, Markdown and HTML reports.

    Exits with status 1 when any website is in error.

    Examples:

        mangaweave websites check --output reports
    """
    try:
        failed = asyncio.run(_check_websites(output, timeout, get_config_manager()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Website check cancelled[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, "Failed to check websites")
        raise typer.Exit(1)

    if failed:
        raise typer.Exit(1)


async def _check_websites(output: Optional[Path], timeout: Optional[float], config_manager: ConfigManager) -> bool:
    settings = config_manager.settings.health
    bound = timeout or settings.timeout

    async with open_registry(config_manager) as registry:
        descriptors = registry.list_plugins()
        checker = WebsiteHealthChecker(http=registry.http, timeout=bound, max_concurrent=settings.max_concurrent)
        with status_spinner(f"Checking {len(descriptors)} website(s)..."):
            results = await checker.check_all(descriptors)

    paths = write_reports(results, output or Path(settings.report_directory))

    table = Table(title="🩺 Website Status")
    table.add_column("Status", justify="center")
    table.add_column("Website", style="bold")
    table.add_column("URL", style="blue")
    table.add_column("Info", style="muted")
    for result in results:
        table.add_row(result.code.symbol, result.title, result.url, result.info)

    console.print(table)
    console.print(f"[muted]Reports: {', '.join(str(path) for path in paths.values())}[/muted]")
    return any(result.code == StatusCode.ERROR for result in results)


__all__ = ["app"]
