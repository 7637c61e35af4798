"""Progress bar column definitions and reusable styles."""

from __future__ import annotations

from dataclasses import dataclass

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    ProgressColumn,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass
class ProgressStyle:
    """
    Container describing a named progress style.

    Attributes:
        name (str): Unique style identifier.
        columns (tuple[ProgressColumn, ...]): Rich column layout.

    """

    name: str
    columns: tuple[ProgressColumn, ...]


# Document streams have no known length, so the default style counts
# documents instead of drawing a percentage bar.
style_stream = ProgressStyle(
    name="stream",
    columns=(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} documents"),
        TextColumn("|"),
        TimeElapsedColumn(),
    ),
)

style_bounded = ProgressStyle(
    name="bounded",
    columns=(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("|"),
        TimeElapsedColumn(),
    ),
)
