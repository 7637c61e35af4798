"""Lightweight error mode enumeration used by per-document processing."""

from enum import Enum


class ErrorMode(str, Enum):
    """Strategies for responding to recoverable per-document errors."""

    RAISE = "raise"
    WARN = "warn"
    IGNORE = "ignore"
