"""Presentation of finished reports as a terminal bar chart or JSON."""

from __future__ import annotations

import json
from typing import List, Sequence

from rich.console import Console
from rich.text import Text

from .models import LanguageStat

BAR_WIDTH = 60
LEGEND_WIDTH = 80

_DEFAULT_COLOR = "#858585"

_LANGUAGE_COLORS = {
    "rust": "#dea584",
    "javascript": "#f1e05a",
    "typescript": "#316cc2",
    "python": "#3572a5",
    "html": "#e34c26",
    "css": "#563d7c",
    "go": "#00add8",
    "json": "#298666",
    "json with comments": "#298666",
    "markdown": "#083fa1",
    "other": _DEFAULT_COLOR,
}


def language_color(language: str) -> str:
    return _LANGUAGE_COLORS.get(language.lower(), _DEFAULT_COLOR)


def bar_segments(stats: Sequence[LanguageStat], width: int = BAR_WIDTH) -> List[int]:
    """Return the cell width of each row; the last row takes whatever is left."""
    widths: List[int] = []
    used = 0
    for index, stat in enumerate(stats):
        if index == len(stats) - 1:
            cells = max(width - used, 0)
        else:
            cells = min(int(round(stat.ratio * width)), width - used)
        widths.append(cells)
        used += cells
    return widths


def legend_lines(stats: Sequence[LanguageStat], width: int = LEGEND_WIDTH) -> List[Text]:
    lines: List[Text] = []
    current = Text()
    for stat in stats:
        item = Text()
        item.append("●", style=language_color(stat.language))
        item.append(" ")
        item.append(stat.language, style="bold")
        item.append(f" {stat.ratio * 100:.1f}%   ")
        if current.plain and len(current.plain) + len(item.plain) > width:
            lines.append(current)
            current = Text()
        current.append_text(item)
    if current.plain:
        lines.append(current)
    return lines


def render_report(stats: Sequence[LanguageStat], console: Console | None = None) -> None:
    """Print the proportional bar and its legend."""
    console = console or Console()
    if not stats:
        console.print(Text("No recognised files", style="bright_black"))
        return

    bar = Text()
    for stat, cells in zip(stats, bar_segments(stats)):
        if cells > 0:
            bar.append("█" * cells, style=language_color(stat.language))

    console.print()
    console.print(bar)
    console.print()
    for line in legend_lines(stats):
        console.print(line)
    console.print()


def report_to_json(stats: Sequence[LanguageStat]) -> str:
    """Serialise rows in the response shape used by JSON consumers."""
    return json.dumps([stat.to_dict() for stat in stats], indent=2, ensure_ascii=False)


__all__ = [
    "BAR_WIDTH",
    "bar_segments",
    "language_color",
    "legend_lines",
    "render_report",
    "report_to_json",
]
