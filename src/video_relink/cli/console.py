import logging
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route ``video_relink`` log records through rich; ``verbose`` enables per-item detail."""
    logger = logging.getLogger("video_relink")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]], title: str | None = None) -> None:
    table = Table(title=title, show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    console.print(table)
