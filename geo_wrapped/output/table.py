"""Map ranking table renderers for GeoGuessr Wrapped."""

from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path

from rich.table import Table

from ..core.types import MapCounter, Report

_RANK_COLORS = {0: "#fbbf24", 1: "#9ca3af", 2: "#f87171"}
_RICH_RANK_STYLES = {0: "bold yellow", 1: "bold white", 2: "bold red"}


def select_maps(report: Report, show_all: bool = False) -> list[MapCounter]:
    """Return the rows to display: the top list, or every map."""
    return list(report.all_maps if show_all else report.top_maps)


def table_title(report: Report, show_all: bool = False) -> str:
    if show_all:
        return f"All {report.unique_maps} Maps"
    return f"Top {report.top_n} Maps"


def format_share(report: Report, counter: MapCounter) -> str:
    return f"{report.share(counter):.1f}%"


def build_rich_table(report: Report, show_all: bool = False) -> Table:
    """Build a console table of map play counts."""
    table = Table(title=table_title(report, show_all))
    table.add_column("Rank", justify="left")
    table.add_column("Map", justify="left")
    table.add_column("Plays", justify="right")
    table.add_column("Share", justify="right", style="dim")

    for index, counter in enumerate(select_maps(report, show_all)):
        table.add_row(
            str(index + 1),
            counter.map_name,
            str(counter.count),
            format_share(report, counter),
            style=_RICH_RANK_STYLES.get(index),
        )
    return table


def render_markdown(
    report: Report,
    output_path: Path | None = None,
    title: str | None = None,
    show_all: bool = False,
) -> str:
    """Render the ranking as markdown and optionally write to disk."""
    title = title or f"GeoGuessr Wrapped {report.year}"
    lines = [
        f"# {title}",
        "",
        f"- Total games: {report.total_games:,}",
        f"- Unique maps: {report.unique_maps}",
        "",
        f"## {table_title(report, show_all)}",
        "",
        "| Rank | Map | Plays | Share |",
        "| ---: | --- | ---: | ---: |",
    ]
    for index, counter in enumerate(select_maps(report, show_all), start=1):
        name = counter.map_name.replace("|", "\\|")
        lines.append(f"| {index} | {name} | {counter.count} | {format_share(report, counter)} |")

    text = "\n".join(lines) + "\n"
    if output_path is not None:
        output_path.write_text(text, encoding="utf-8")
    return text


def render_report_html(
    report: Report, output_path: Path, title: str | None = None, show_all: bool = False
) -> None:
    """Render the full HTML report page to disk."""
    output_path.write_text(render_html(report, title, show_all), encoding="utf-8")


def render_html(report: Report, title: str | None = None, show_all: bool = False) -> str:
    """Render a standalone HTML page with the stats cards and the map table."""
    safe_title = escape(title or f"GeoGuessr Wrapped {report.year}")
    generated_at = datetime.now().strftime("%Y-%m-%d %H:%M")

    rows: list[str] = []
    for index, counter in enumerate(select_maps(report, show_all)):
        rank_color = _RANK_COLORS.get(index, "#6b7280")
        weight = "600" if index < 3 else "500"
        rows.append(
            f"""
            <tr>
              <td class="rank" style="color: {rank_color};">{index + 1}</td>
              <td style="font-weight: {weight};">{escape(counter.map_name)}</td>
              <td class="num">{counter.count}</td>
              <td class="num muted">{format_share(report, counter)}</td>
            </tr>
            """
        )
    rows_html = "\n".join(rows)

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{safe_title}</title>
  <style>
    body {{
      margin: 32px auto;
      max-width: 880px;
      padding: 0 16px;
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
      color: #111827;
      background: #f8f9fa;
    }}
    .stats {{ display: flex; gap: 16px; margin-bottom: 24px; }}
    .stat {{ flex: 1; padding: 24px; border-radius: 12px; }}
    .stat.games {{ background: #e0f2fe; border: 1px solid #bae6fd; color: #0369a1; }}
    .stat.maps {{ background: #dcfce7; border: 1px solid #86efac; color: #14532d; }}
    .stat .value {{ font-size: 40px; font-weight: 800; }}
    .stat .label {{ font-size: 13px; font-weight: 600; text-transform: uppercase; }}
    table {{ width: 100%; border-collapse: collapse; background: #ffffff; border-radius: 12px; }}
    th {{ text-align: left; padding: 16px 20px; font-size: 11px; color: #6b7280; text-transform: uppercase; }}
    td {{ padding: 16px 20px; font-size: 14px; border-bottom: 1px solid #f3f4f6; }}
    tr:nth-child(even) td {{ background: #fafbfc; }}
    .rank {{ font-weight: 600; }}
    .num {{ text-align: right; }}
    .muted {{ color: #6b7280; }}
    footer {{ margin-top: 24px; font-size: 12px; color: #6b7280; }}
  </style>
</head>
<body>
  <h1>{safe_title}</h1>
  <div class="stats">
    <div class="stat games">
      <div class="value">{report.total_games:,}</div>
      <div class="label">Total Games</div>
    </div>
    <div class="stat maps">
      <div class="value">{report.unique_maps}</div>
      <div class="label">Unique Maps</div>
    </div>
  </div>
  <h3>{escape(table_title(report, show_all))}</h3>
  <table>
    <thead>
      <tr><th>Rank</th><th>Map</th><th class="num">Plays</th><th class="num">Share</th></tr>
    </thead>
    <tbody>
      {rows_html}
    </tbody>
  </table>
  <footer>Generated {generated_at} from {report.page_count} feed pages</footer>
</body>
</html>
"""
