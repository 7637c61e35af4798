from __future__ import annotations

from rich.console import Console
from rich.progress import Progress

from .progress_styles import style_bounded, style_stream


class ProgressTask:
    """
    A lazily-started rich progress task.

    Disabled tasks are no-ops, so callers can tick unconditionally. Use as a
    context manager to make sure the live display is stopped.
    """

    def __init__(
        self,
        *,
        description: str,
        total: int | None = None,
        enabled: bool = True,
        console: Console | None = None,
    ):
        self.description = description
        self.total = total
        self.enabled = enabled
        self.completed = 0

        self._console = console
        self._progress: Progress | None = None
        self._task_id = None

    def start(self):
        if not self.enabled or self._progress is not None:
            return
        style = style_stream if self.total is None else style_bounded
        self._progress = Progress(
            *style.columns,
            console=self._console or Console(stderr=True),
            transient=False,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(self.description, total=self.total)

    def tick(self, n: int = 1):
        self.completed += n
        if not self.enabled:
            return
        if self._progress is None:
            self.start()
        self._progress.advance(self._task_id, n)

    def finish(self):
        if self._progress is None:
            return
        self._progress.stop()
        self._progress = None
        self._task_id = None

    def __enter__(self) -> ProgressTask:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish()
