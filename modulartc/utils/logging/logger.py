from __future__ import annotations

import logging
import os

from .formatters import ModularTCBannerFormatter, WarningFormatter

"""
Example usage of logging:

```python
from modulartc.utils.logging import get_logger

logger = get_logger("connector")
logger.info("Feature extraction started")
```

Set ``MODULARTC_LOG_LEVEL=DEBUG`` to see per-file reader and vocabulary
messages without changing code.
"""


_LOGGER_NAME = "modulartc"
_LEVEL_ENV_VAR = "MODULARTC_LOG_LEVEL"


def _resolve_level(level: int | str | None) -> int:
    """
    Resolve a logging level from an int, a level name, or the environment.

    Priority (highest to lowest):
        1. Explicit `level`
        2. ``MODULARTC_LOG_LEVEL`` environment variable
        3. ``logging.INFO``
    """
    if level is None:
        level = os.getenv(_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            msg = f"Unknown logging level: {level!r}"
            raise ValueError(msg)
        return resolved
    return level


def get_logger(
    name: str | None = None,
    level: int | str | None = None,
) -> logging.Logger:
    """
    Return a configured ModularTC logger instance.

    Args:
        name (str | None):
            Optional child logger name (e.g., "vocabulary", "filters").
        level (int | str | None):
            Logging level applied when the logger is first configured.
            Defaults to ``MODULARTC_LOG_LEVEL`` or INFO.

    Returns:
        logging.Logger:
            Configured logger instance.

    """
    logger_name = _LOGGER_NAME if name is None else f"{_LOGGER_NAME}.{name}"
    logger = logging.getLogger(logger_name)

    # Configure only once
    if not logger.handlers:
        logger.setLevel(_resolve_level(level))
        logger.propagate = False

        handler = logging.StreamHandler()
        if name == "warnings":
            handler.setFormatter(WarningFormatter())
        else:
            handler.setFormatter(ModularTCBannerFormatter())
        logger.addHandler(handler)

    return logger


def set_log_level(level: int | str) -> None:
    """
    Set the level of every ModularTC logger created so far.

    Args:
        level (int | str): Level number or name (e.g., "DEBUG").

    """
    resolved = _resolve_level(level)
    for name, logger in logging.root.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (name == _LOGGER_NAME or name.startswith(_LOGGER_NAME + ".")):
            logger.setLevel(resolved)
