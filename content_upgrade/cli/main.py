"""content-upgrade CLI.

`content-upgrade run params.json --library Foo --from 1.1 --to 1.6 --catalog libs.json`
upgrades one content item and prints the upgraded params.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from content_upgrade.config import settings
from content_upgrade.engine.process import upgrade_content
from content_upgrade.engine.registry import UpgradeRegistry
from content_upgrade.exceptions import ContentUpgradeError
from content_upgrade.loaders import StaticLibraryLoader

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="content-upgrade",
    help="Upgrade content parameters to newer library versions.",
    no_args_is_help=True,
)


def load_hooks(module_names: list[str]) -> UpgradeRegistry:
    """Build a registry from modules exposing ``register(registry)``."""
    registry = UpgradeRegistry()
    for name in module_names:
        module = importlib.import_module(name)
        module.register(registry)
    return registry


@app.command("run")
def run(
    params_file: Path = typer.Argument(help="File holding the serialized params"),
    library: str = typer.Option(..., "--library", "-l", help="Library name of the content"),
    old_version: str = typer.Option(..., "--from", help="Version the params were written for"),
    new_version: str = typer.Option(..., "--to", help="Version to upgrade to"),
    catalog: Path = typer.Option(..., "--catalog", "-c", help="JSON catalog of library descriptors"),
    hooks: list[str] = typer.Option([], "--hooks", help="Module exposing register(registry)"),
    content_id: str = typer.Option("", "--content-id", help="Content id used in errors"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result here"),
):
    """Upgrade a single content item."""
    logging.basicConfig(level=settings.log_level)

    try:
        loader = StaticLibraryLoader.from_file(catalog)
        registry = load_hooks(hooks)
        serialized = params_file.read_text(encoding="utf-8")
    except (OSError, ValueError, ImportError, AttributeError, ContentUpgradeError) as e:
        err_console.print(f"[red]Cannot load inputs:[/red] {escape(f'{type(e).__name__}: {e}')}")
        raise typer.Exit(code=1)

    try:
        result = asyncio.run(upgrade_content(
            library,
            old_version,
            new_version,
            serialized,
            content_id or params_file.name,
            loader=loader,
            registry=registry,
        ))
    except ContentUpgradeError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    except Exception as e:
        # Hook and loader failures are opaque
        err_console.print(f"[red]Upgrade failed:[/red] {escape(f'{type(e).__name__}: {e}')}")
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(result)
    else:
        output.write_text(result, encoding="utf-8")
        console.print(f"[green]Upgraded {library} {old_version} -> {new_version}[/green] ({output})")


@app.command("version")
def version_cmd():
    """Show content-upgrade version."""
    from content_upgrade import __version__
    console.print(f"content-upgrade v{__version__}")
