"""
Main pipeline orchestration for GeoGuessr Wrapped.

This module coordinates the entire workflow:
1. Set up the run folder and logging
2. Walk the private activity feed and aggregate map play counts
3. Print the summary and the ranking table
4. Write report.json, report.md, report.html and the share image

Supports both progress bar and quiet modes.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
import json
import logging
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import AppConfig, get_session_cookie
from .core.aggregator import FeedAggregator, ProgressCallback
from .core.types import AggregationProgress, Report
from .fetch.client import FeedClient
from .output.image import render_image, save_image
from .output.table import build_rich_table, render_markdown, render_report_html
from .utils.logging import log_event, setup_logging

# The feed length is unknown up front; the bar assumes ~50 pages and never
# reports completion before the walk actually ends.
EXPECTED_PAGES = 50
MAX_RUNNING_FRACTION = 0.95


def run_pipeline(
    output_dir: Path,
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
) -> Path:
    """Run the complete yearly summary pipeline.

    Args:
        output_dir: Directory for output files
        cfg: Application configuration
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)

    Returns:
        Path to the generated HTML report file

    Raises:
        FeedFetchError: If any feed page cannot be fetched. Nothing is
            written besides the log in that case.
    """
    console = console or Console()
    run_output_dir = _build_run_output_dir(output_dir, cfg)
    run_output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(cfg.logging, run_output_dir)

    log_event(
        logger,
        "Pipeline start",
        event="pipeline_start",
        year=cfg.report.year,
        output=str(run_output_dir),
    )

    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        )
        with progress:
            task = progress.add_task("Fetching games", total=100)

            def _on_progress(update: AggregationProgress) -> None:
                progress.update(
                    task,
                    description=(
                        f"Fetching games • {update.total_games} found • {update.unique_maps} maps"
                    ),
                    completed=progress_percent(update.page_count),
                )

            report = asyncio.run(_aggregate(cfg, logger, _on_progress))
            progress.update(task, completed=100)
    else:
        report = asyncio.run(_aggregate(cfg, logger, None))

    _render_summary(report, console, cfg.report.show_all)
    html_path = _write_outputs(report, run_output_dir, cfg)

    log_event(
        logger,
        "Pipeline complete",
        event="pipeline_done",
        output=str(html_path),
        total_games=report.total_games,
        unique_maps=report.unique_maps,
        pages=report.page_count,
    )
    return html_path


def progress_percent(page_count: int) -> float:
    """Estimated completion (0-95) of a walk that has read page_count pages."""
    return min(page_count / EXPECTED_PAGES, MAX_RUNNING_FRACTION) * 100


async def _aggregate(
    cfg: AppConfig, logger: logging.Logger, progress_callback: ProgressCallback | None
) -> Report:
    async with FeedClient(
        cfg.feed.base_url,
        session_cookie=get_session_cookie(cfg.feed),
        timeout=cfg.feed.timeout_seconds,
        trust_env=cfg.feed.trust_env,
        user_agent=cfg.feed.user_agent,
    ) as client:
        aggregator = FeedAggregator(
            client.fetch_page,
            target_year=cfg.report.year,
            page_delay=cfg.feed.page_delay_seconds,
            top_n=cfg.report.top_n,
            logger=logger,
        )
        return await aggregator.aggregate(progress_callback)


def _render_summary(report: Report, console: Console, show_all: bool) -> None:
    console.print(
        f"[bold]GeoGuessr Wrapped {report.year}[/bold]: "
        f"total_games={report.total_games:,}, unique_maps={report.unique_maps}, "
        f"pages={report.page_count}"
    )
    if report.all_maps:
        console.print(build_rich_table(report, show_all))


def _write_outputs(report: Report, run_output_dir: Path, cfg: AppConfig) -> Path:
    json_path = run_output_dir / "report.json"
    json_path.write_text(json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")

    if cfg.output.include_markdown:
        render_markdown(report, run_output_dir / "report.md", show_all=cfg.report.show_all)

    html_path = run_output_dir / "report.html"
    render_report_html(report, html_path, show_all=cfg.report.show_all)

    image = render_image(report, cfg.report.image_maps)
    save_image(
        image,
        run_output_dir / f"geoguessr-wrapped-{report.year}.jpg",
        quality=cfg.output.image_quality,
    )
    return html_path


def _build_run_output_dir(output_dir: Path, cfg: AppConfig) -> Path:
    """Build the output directory name based on configured mode.

    Raises:
        ValueError: If run_folder_mode is not supported
    """
    year = str(cfg.report.year)
    mode = (cfg.output.run_folder_mode or "year").lower()
    if mode == "year":
        run_dir_name = year
    elif mode == "timestamp":
        run_dir_name = datetime.now().strftime("%Y%m%d-%H%M%S")
    elif mode == "year_timestamp":
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        run_dir_name = f"{year}-{timestamp}"
    else:
        raise ValueError(
            "Unsupported run_folder_mode. Use 'year', 'timestamp', or 'year_timestamp'."
        )
    return output_dir / run_dir_name
