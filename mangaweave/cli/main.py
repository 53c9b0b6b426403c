"""
CLI Main Application - Typer app entry point.

This module provides the main CLI application entry point: logging and
console setup, configuration loading and command registration.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.traceback import install as install_rich_traceback

from mangaweave import __version__
from mangaweave.core import ConfigManager, create_default_config_files
from mangaweave.core.exceptions import ConfigurationError, MangaWeaveError
from mangaweave.ui import get_console, handle_error, setup_console
from mangaweave.cli.context import get_config_manager, set_config_manager


# Create main Typer application
app = typer.Typer(
    name="mangaweave",
    help="📚 Composable content extraction from comic websites",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        get_console().print(f"[bold blue]MangaWeave[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version information and exit",
        is_flag=True,
        is_eager=True,
        callback=_version_callback,
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory path",
        exists=False,
        file_okay=False,
        dir_okay=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed logging",
        is_flag=True,
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
        is_flag=True,
    ),
) -> None:
    """
    📚 MangaWeave - Composable content extraction from comic websites.
    """
    try:
        _initialize_application(config_dir=config_dir, debug=debug, no_color=no_color)
    except Exception as e:
        if isinstance(e, MangaWeaveError):
            handle_error(e, "During application initialization")
        else:
            handle_error(e, "Unexpected error during startup", show_traceback=debug)
        raise typer.Exit(1)


def _initialize_application(
    config_dir: Optional[Path] = None,
    debug: bool = False,
    no_color: bool = False,
) -> None:
    """
    Initialize the application with configuration and UI setup.

    Args:
        config_dir: Configuration directory override
        debug: Enable debug mode
        no_color: Disable colored output
    """
    setup_console(no_color=no_color)

    if debug:
        install_rich_traceback(show_locals=True)

    # Determine configuration directory
    if config_dir is None:
        config_dir = Path("config")

    # Create default configuration if needed
    if not config_dir.exists():
        create_default_config_files(config_dir)

    try:
        config_manager = ConfigManager(config_dir)
        set_config_manager(config_manager)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}", str(config_dir))

    _setup_logging(debug, config_manager.settings.logging.level)


def _setup_logging(debug: bool = False, level_name: str = "WARNING") -> None:
    """
    Set up application logging.

    Args:
        debug: Enable debug logging
        level_name: Configured level used outside debug mode
    """
    level = logging.DEBUG if debug else getattr(logging, level_name, logging.WARNING)

    # Configure root logger
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    for name in ("aiohttp", "urllib3", "selenium"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _register_commands() -> None:
    """Register command groups with the main app."""
    # Import commands here to avoid circular imports
    from mangaweave.cli.commands import browse, sources, websites

    app.add_typer(sources.app, name="sources", help="🔌 Inspect and manage site plugins")
    app.add_typer(browse.app, name="browse", help="📚 Browse containers, chapters and pages")
    app.add_typer(websites.app, name="websites", help="🩺 Check the websites behind the plugins")


# Register commands at module level to ensure they're available for help
_register_commands()


def cli_main() -> None:
    """
    Main CLI entry point for the mangaweave command.
    """
    try:
        app()
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        handle_error(e, "Unexpected error in CLI")
        sys.exit(1)


# Export main components
__all__ = [
    "app",
    "cli_main",
    "get_config_manager",
]
