"""
Command-line interface for GeoGuessr Wrapped.

Uses Typer to provide a CLI with options for the main configuration
settings. Supports loading .env files for the session cookie.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console

from .config import load_config
from .fetch.client import FeedFetchError
from .output.image import clamp_map_count
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main() -> None:
    """Yearly map play counts from your GeoGuessr activity feed."""


@app.command()
def run(
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    cookie: str | None = typer.Option(
        None,
        "--cookie",
        envvar="GEOGUESSR_NCFA",
        help="Value of the _ncfa session cookie (or set GEOGUESSR_NCFA / .env).",
    ),
    year: int | None = typer.Option(None, "--year", help="Calendar year to summarize."),
    maps_in_image: int | None = typer.Option(
        None, "--maps-in-image", help="Maps drawn on the share image (1-20)."
    ),
    show_all: bool | None = typer.Option(
        None, "--show-all/--top-only", help="Print every map instead of the top list."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Fetch the activity feed and build the yearly map report.

    Args:
        output: Directory for output reports
        config: Optional path to YAML config file
        cookie: Session cookie used to authenticate feed requests
        year: Calendar year to summarize
        maps_in_image: Number of maps on the share image
        show_all: Whether to print every map
        progress: Whether to show progress bar
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    if cookie:
        cfg.feed.session_cookie = cookie
    if year is not None:
        cfg.report.year = year
    if maps_in_image is not None:
        cfg.report.image_maps = clamp_map_count(maps_in_image)
    if show_all is not None:
        cfg.report.show_all = show_all
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        output_path = run_pipeline(output, cfg, show_progress=progress, console=console)
    except FeedFetchError as exc:
        console.print(f"[bold red]Feed fetch failed[/bold red]: {exc}. Run again to retry.")
        raise typer.Exit(code=1) from exc
    console.print(f"Report generated: {output_path}")


if __name__ == "__main__":
    app()
