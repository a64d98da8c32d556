"""Command line diagnostics for headless-session."""

from __future__ import annotations

import base64
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from .config import HeadlessBrowserType, load_settings
from .errors import SessionError
from .factory import build_session
from .models import ActionResult

app = typer.Typer(help="Headless browser session diagnostics")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("headless-session"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def snapshot(
    url: Annotated[str, typer.Argument(help="Page to open.")],
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML settings."),
    ] = None,
    env_file: Annotated[
        Optional[Path],
        typer.Option("--env-file", help="Path to an .env file with default settings."),
    ] = None,
    backend: Annotated[
        Optional[HeadlessBrowserType],
        typer.Option("--backend", "-b", help="Automation backend to drive."),
    ] = None,
    click: Annotated[
        Optional[str],
        typer.Option("--click", help='Coordinate to click after loading, as "x,y".'),
    ] = None,
    text: Annotated[
        Optional[str],
        typer.Option("--type", help="Text to type after loading (and clicking)."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the final screenshot to this PNG file."),
    ] = None,
) -> None:
    """Open URL, optionally click and type, and report the final page state."""

    overrides: dict[str, Any] = {}
    if backend is not None:
        overrides["headless_browser_type"] = backend.value
    settings = load_settings(config_path, env_file=env_file, **overrides)

    console = Console()
    session = build_session(settings)
    try:
        session.launch_browser()
        result = session.navigate_to_url(url)
        if click:
            result = session.click(click)
        if text:
            result = session.type(text)
    except SessionError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        session.close_browser()

    _print_result(console, result)
    if output:
        _write_screenshot(result, output)
        console.print(f"Screenshot written to {output}")


def _print_result(console: Console, result: ActionResult) -> None:
    console.print(f"[cyan]URL:[/cyan] {result.current_url}")
    if result.current_mouse_position:
        console.print(f"[cyan]Mouse:[/cyan] {result.current_mouse_position}")
    console.print("[cyan]Console:[/cyan]")
    console.print(result.logs or "(no output)", style="dim", markup=False)


def _write_screenshot(result: ActionResult, path: Path) -> None:
    _, _, payload = result.screenshot.partition("base64,")
    path.write_bytes(base64.b64decode(payload))


if __name__ == "__main__":
    app()
