"""Protocols describing configurable components."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Configurable(Protocol):
    """Protocol for components that can be rebuilt from a plain configuration."""

    def get_config(self) -> dict[str, Any]:
        """
        Return the configuration needed by :meth:`from_config`.

        Returns:
            dict[str, Any]: JSON-serializable configuration mapping.

        """
        ...

    @classmethod
    def from_config(cls, config: dict[str, Any]):
        """
        Construct a component from the output of :meth:`get_config`.

        Args:
            config (dict[str, Any]): Serialized configuration mapping.

        Returns:
            Configurable: Instance of the implementing class.

        """
        ...
