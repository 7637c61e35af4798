"""Logging formatter implementations for ModularTC outputs."""

import logging
import os
import sys
import textwrap
from datetime import datetime
from pathlib import Path


class ModularTCFormatter(logging.Formatter):
    """Single-line formatter with timestamp, level, and source location."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = record.levelname.ljust(8)
        location = f"{record.module}:{record.lineno}"
        return f"[{timestamp}] {level} {location} | {record.getMessage()}"


class _BannerMixin:
    """Shared helpers for banner-style formatters."""

    max_width: int = 88

    def _wrap(self, text: str, *, indent: int = 1) -> list[str]:
        """
        Wrap text to the banner width, keeping explicit newlines.

        Args:
            text (str): Message to wrap.
            indent (int): Spaces to indent each wrapped line.

        Returns:
            list[str]: Wrapped and indented lines.

        """
        pad = " " * indent
        width = self.max_width - 2 * indent
        lines: list[str] = []
        for line in text.split("\n"):
            if not line.strip():
                lines.append(pad)
                continue
            leading = line[: len(line) - len(line.lstrip())]
            lines.extend(
                pad + leading + part
                for part in textwrap.wrap(line.strip(), width=width - len(leading))
            )
        return lines

    def _color(self, text: str, *, code: int) -> str:
        if not sys.stderr.isatty() or os.environ.get("TERM") in (None, "dumb"):
            return text
        return f"\033[{code}m{text}\033[0m"

    def _separator(self, label: str | None = None) -> str:
        if not label:
            return "─" * self.max_width
        core = f" {label} "
        side = (self.max_width - len(core)) // 2
        return "─" * side + core + "─" * (self.max_width - side - len(core))


class ModularTCBannerFormatter(ModularTCFormatter, _BannerMixin):
    """
    Banner-style formatter for standard ModularTC logs.

    Label format:
        "{LEVEL}" or "{LEVEL} - {title_desc}"

    Pass ``extra={"title_desc": "Connector"}`` to label a block and
    ``extra={"omit_origin": True}`` to hide the timestamp/location line.
    """

    def __init__(self, *, max_width: int = 88) -> None:
        super().__init__()
        self.max_width = max_width

    def format(self, record: logging.LogRecord) -> str:
        custom = getattr(record, "title_desc", None)
        title = f"{record.levelname} - {custom}" if custom else record.levelname

        lines = [self._separator(title)]
        if not getattr(record, "omit_origin", False):
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
            lines.extend(self._wrap(f"[{timestamp}] {record.module}:{record.lineno}"))
        lines.extend(self._wrap(record.getMessage()))
        lines.append(self._separator())
        return "\n".join(lines)


class WarningFormatter(ModularTCFormatter, _BannerMixin):
    """
    Banner formatter for warnings emitted through :func:`modulartc.utils.logging.warn`.

    Expects the ``warning_*`` attributes that :func:`warn` attaches to the
    record (category, filename, lineno, message, hints).
    """

    def __init__(self, *, max_width: int = 88) -> None:
        super().__init__()
        self.max_width = max_width

    def format(self, record: logging.LogRecord) -> str:
        category = getattr(record, "warning_category", UserWarning)
        filename = getattr(record, "warning_filename", "<unknown>")
        lineno = getattr(record, "warning_lineno", 0)
        hints = getattr(record, "warning_hints", None)

        lines = [self._color(self._separator(category.__name__), code=33)]
        lines.append(f" Location: {Path(filename).name}:{lineno}")
        lines.append("")
        lines.extend(self._wrap(record.getMessage()))
        if hints:
            lines.append("")
            for hint in [hints] if isinstance(hints, str) else list(hints):
                lines.extend(self._wrap(hint))
        lines.append(self._color(self._separator(), code=33))
        return "\n".join(lines)
