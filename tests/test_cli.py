"""Tests for the Typer command-line interface."""

import json
from pathlib import Path
from typing import Iterator, List

import pytest
from typer.testing import CliRunner

from mangaweave import __version__
from mangaweave.cli.context import set_registry_factory
from mangaweave.cli.main import app
from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.registry import PluginRegistry

from conftest import (
    EXAMPLE_CHAPTER,
    EXAMPLE_CONTAINER,
    EXAMPLE_INDEX,
    EXAMPLE_ORIGIN,
    ExampleSite,
    FakeHttpClient,
)

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "config"


@pytest.fixture
def registries() -> Iterator[List[PluginRegistry]]:
    """Route every command to a registry holding only the example plugin."""
    built: List[PluginRegistry] = []

    def factory(config_manager: ConfigManager) -> PluginRegistry:
        http = FakeHttpClient()
        http.add(f"{EXAMPLE_ORIGIN}/", "<html></html>")
        http.add(f"{EXAMPLE_ORIGIN}/manga/", EXAMPLE_INDEX)
        http.add(f"{EXAMPLE_ORIGIN}/manga/sample/", EXAMPLE_CONTAINER)
        http.add(f"{EXAMPLE_ORIGIN}/manga/sample/ch-1/", EXAMPLE_CHAPTER)
        registry = PluginRegistry(config_manager, http)
        registry.load([ExampleSite])
        built.append(registry)
        return registry

    set_registry_factory(factory)
    yield built
    set_registry_factory(None)


def invoke(config_dir: Path, *args: str):
    return runner.invoke(app, ["--config-dir", str(config_dir), "--no-color", *args])


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_config_directory_is_created(config_dir: Path, registries: List[PluginRegistry]) -> None:
    """Test the first run writes default configuration files."""
    result = invoke(config_dir, "sources", "list")

    assert result.exit_code == 0
    assert (config_dir / "settings.json").exists()
    assert (config_dir / "plugins.json").exists()


def test_sources_list(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "sources", "list")

    assert result.exit_code == 0
    assert "example" in result.stdout
    assert "1 plugin(s)" in result.stdout


def test_sources_list_filters_by_tag(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "sources", "list", "--tag", "Spanish")

    assert result.exit_code == 0
    assert "0 plugin(s)" in result.stdout


def test_sources_list_warns_about_unknown_tag(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "sources", "list", "--tag", "Klingon")

    assert result.exit_code == 0
    assert "Unknown tag" in result.stdout


def test_sources_show_prints_chain(config_dir: Path, registries: List[PluginRegistry]) -> None:
    """Test the decoration chain is shown layer by layer."""
    result = invoke(config_dir, "sources", "show", "example")

    assert result.exit_code == 0
    assert "ImageAjax" in result.stdout
    assert "list_chapters" in result.stdout
    assert "ChaptersSinglePageCSS" in result.stdout


def test_sources_show_unknown_plugin(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "sources", "show", "missing")

    assert result.exit_code == 1
    assert "Unknown plugin" in result.stdout


def test_sources_disable_and_enable(config_dir: Path, registries: List[PluginRegistry]) -> None:
    """Test the enabled flag is persisted and respected by the registry."""
    assert invoke(config_dir, "sources", "disable", "example").exit_code == 0

    stored = json.loads((config_dir / "plugins.json").read_text(encoding="utf-8"))
    assert stored["plugins"]["example"]["enabled"] is False
    assert "0 plugin(s)" in invoke(config_dir, "sources", "list").stdout

    assert invoke(config_dir, "sources", "enable", "example").exit_code == 0
    assert "1 plugin(s)" in invoke(config_dir, "sources", "list").stdout


def test_browse_containers(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "browse", "containers", "example")

    assert result.exit_code == 0
    assert "Sample Manga" in result.stdout
    assert "1 of 1 container(s)" in result.stdout


def test_browse_chapters_from_relative_url(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "browse", "chapters", "example", "/manga/sample/")

    assert result.exit_code == 0
    assert "Chapter 1" in result.stdout
    assert "Chapter 2" in result.stdout


def test_browse_pages(config_dir: Path, registries: List[PluginRegistry]) -> None:
    result = invoke(config_dir, "browse", "pages", "example", "/manga/sample/", "/manga/sample/ch-1/")

    assert result.exit_code == 0
    assert "image/jpeg" in result.stdout
    assert "001.jpg" in result.stdout


def test_browse_failure_exits_with_error(config_dir: Path, registries: List[PluginRegistry]) -> None:
    """Test typed failures are shown and turned into exit status 1."""
    result = invoke(config_dir, "browse", "pages", "example", "/manga/sample/", "/manga/sample/ch-9/")

    assert result.exit_code == 1
    assert "Not Found" in result.stdout


def test_registry_is_closed_after_command(config_dir: Path, registries: List[PluginRegistry]) -> None:
    invoke(config_dir, "browse", "containers", "example")

    assert len(registries) == 1
    assert registries[0].http._session is None


def test_websites_check_writes_reports(config_dir: Path, tmp_path: Path, registries: List[PluginRegistry]) -> None:
    """Test the health check reports every registered website."""
    output = tmp_path / "reports"

    result = invoke(config_dir, "websites", "check", "--output", str(output))

    assert result.exit_code == 0
    data = json.loads((output / "website-metrics.json").read_text(encoding="utf-8"))
    assert data == [{
        "id": "example",
        "title": "Example",
        "url": "https://example.test/",
        "code": 0,
        "info": "",
        "visitors": 0,
    }]
    assert (output / "website-metrics.md").exists()
    assert (output / "website-metrics.html").exists()
