"""Warning emission utilities with consistent ModularTC formatting."""

from __future__ import annotations

import inspect
import warnings
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from .logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

_logger = get_logger("warnings")


WarningPayload = dict[str, object]
_WARNING_HOOK: ContextVar[Callable[[WarningPayload], bool] | None] = ContextVar(
    "_WARNING_HOOK",
    default=None,
)


def _caller_location(stacklevel: int) -> tuple[str, int]:
    frame = inspect.currentframe()
    try:
        # currentframe -> warn -> caller (+ stacklevel)
        for _ in range(stacklevel + 1):
            if frame is None or frame.f_back is None:
                break
            frame = frame.f_back
        if frame is None:
            return "<unknown>", 0
        return frame.f_code.co_filename, frame.f_lineno
    finally:
        del frame


def warn(
    message: str,
    *,
    category: type[Warning] = UserWarning,
    hints: str | Iterable[str] | None = None,
    stacklevel: int = 1,
) -> None:
    """
    Emit a formatted ModularTC warning with optional hints and source context.

    Use this instead of :func:`warnings.warn` inside ModularTC modules. The
    warning is routed through the ModularTC logging system and registered
    (silently) with the stdlib warnings machinery.

    Args:
        message (str): Warning message text.
        category (type[Warning]): Warning category class.
        hints (str | Iterable[str] | None): Optional corrective hints.
        stacklevel (int): Stack level adjustment for locating the call site.

    """
    filename, lineno = _caller_location(stacklevel)
    payload = {
        "category": category,
        "filename": filename,
        "lineno": lineno,
        "message": message,
        "hints": hints,
    }

    hook = _WARNING_HOOK.get()
    if hook is not None and hook(payload):
        return

    _logger.warning(
        message,
        extra={f"warning_{k}": v for k, v in payload.items()},
    )

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category)
        warnings.warn(message, category=category, stacklevel=stacklevel + 2)


@contextmanager
def catch_warnings():
    """
    Capture ModularTC warnings emitted within the block.

    Yields:
        WarningInterceptor: Accessor for the captured payloads.

    """
    captured: list[WarningPayload] = []

    def hook(payload: WarningPayload) -> bool:
        captured.append(payload)
        return True

    token = _WARNING_HOOK.set(hook)
    try:
        yield WarningInterceptor(captured)
    finally:
        _WARNING_HOOK.reset(token)


class WarningInterceptor:
    """Container exposing captured warning payloads in emission order."""

    def __init__(self, captured: list[WarningPayload]):
        self._captured = captured

    def __len__(self) -> int:
        return len(self._captured)

    @property
    def messages(self) -> list[str]:
        return [str(w["message"]) for w in self._captured]

    def match(self, text: str) -> bool:
        """Return True if any captured message contains `text`."""
        return any(text in m for m in self.messages)

    def of_category(self, category: type[Warning]) -> list[WarningPayload]:
        """Return captured payloads whose category is (a subclass of) `category`."""
        return [w for w in self._captured if issubclass(w["category"], category)]
