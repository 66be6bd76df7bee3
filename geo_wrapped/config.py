"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FeedConfig: Private activity feed endpoint and HTTP settings
- ReportConfig: Target year and ranking sizes
- OutputConfig: Output folder and image settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


@dataclass
class FeedConfig:
    """Configuration for fetching the private activity feed.

    Attributes:
        base_url: GeoGuessr site root; the feed lives under /api/v4/feed/private
        session_cookie: Optional inline value of the `_ncfa` session cookie
        session_cookie_env: Environment variable holding the session cookie
        timeout_seconds: HTTP request timeout
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        page_delay_seconds: Pause between page requests
    """

    base_url: str = "https://www.geoguessr.com"
    session_cookie: str | None = None
    session_cookie_env: str = "GEOGUESSR_NCFA"
    timeout_seconds: float = 20.0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    page_delay_seconds: float = 0.1


@dataclass
class ReportConfig:
    """Configuration for the yearly summary.

    Attributes:
        year: Calendar year to summarize
        top_n: Number of maps kept in the top list
        image_maps: Number of maps drawn on the share image (1-20)
        show_all: Print every map instead of the top list
    """

    year: int = 2025
    top_n: int = 30
    image_maps: int = 15
    show_all: bool = False


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        run_folder_mode: How to name output folders ("year", "timestamp", "year_timestamp")
        image_quality: JPEG quality of the share image
        include_markdown: Whether to also write a markdown report
    """

    run_folder_mode: str = "year"
    image_quality: int = 90
    include_markdown: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    feed: FeedConfig = field(default_factory=FeedConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG = AppConfig()


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(DEFAULT_CONFIG, raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "feed": {
            "base_url": cfg.feed.base_url,
            "session_cookie": cfg.feed.session_cookie,
            "session_cookie_env": cfg.feed.session_cookie_env,
            "timeout_seconds": cfg.feed.timeout_seconds,
            "trust_env": cfg.feed.trust_env,
            "user_agent": cfg.feed.user_agent,
            "page_delay_seconds": cfg.feed.page_delay_seconds,
        },
        "report": {
            "year": cfg.report.year,
            "top_n": cfg.report.top_n,
            "image_maps": cfg.report.image_maps,
            "show_all": cfg.report.show_all,
        },
        "output": {
            "run_folder_mode": cfg.output.run_folder_mode,
            "image_quality": cfg.output.image_quality,
            "include_markdown": cfg.output.include_markdown,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        feed=FeedConfig(**data["feed"]),
        report=ReportConfig(**data["report"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_session_cookie(cfg: FeedConfig) -> str | None:
    """Get the session cookie from inline config or environment variable."""
    if cfg.session_cookie:
        return cfg.session_cookie
    return os.getenv(cfg.session_cookie_env)
