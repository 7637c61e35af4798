"""Static component registries with case-insensitive lookups."""

from __future__ import annotations

from typing import Any

from modulartc.utils.errors.exceptions import UnknownComponentError


class CaseInsensitiveRegistry(dict):
    """
    Dictionary-like registry mapping configuration tags to component classes.

    Description:
        Tags are stored exactly as registered (preserving casing) while
        lookups (`[]`, :meth:`get`, :meth:`resolve`, membership checks)
        normalize to lowercase. Two tags that only differ in casing are
        rejected to avoid ambiguous configurations.

        Registries are filled once at import time and resolved eagerly when a
        configuration is validated, so an unknown tag fails before any
        document is processed.

    Attributes:
        kind (str): Human readable component kind used in error messages.
        _lower_map (dict[str, str]): Mapping of lowercased tags to canonical tags.

    """

    def __init__(self, kind: str = "component", *args, **kwargs):
        """
        Initialize the registry and optionally seed it with entries.

        Args:
            kind (str): Component kind (e.g., "feature extractor").
            *args (Any): Optional mapping or iterable of pairs to preload.
            **kwargs (Any): Additional tag-class pairs to register.

        """
        super().__init__()
        self.kind = kind
        self._lower_map: dict[str, str] = {}
        if args or kwargs:
            self.update(*args, **kwargs)

    def _normalize(self, key: str) -> str:
        if not isinstance(key, str):
            msg = f"Registry keys must be strings, got {type(key)}"
            raise TypeError(msg)
        return key.lower()

    def get_original_key(self, key: str) -> str | None:
        """Return the tag as registered, or None if `key` is unknown."""
        return self._lower_map.get(self._normalize(key))

    def __setitem__(self, key: str, value):
        lk = self._normalize(key)
        if lk in self._lower_map and self._lower_map[lk] != key:
            msg = (
                f"Cannot register '{key}' - lowercase equivalent collides with "
                f"existing key '{self._lower_map[lk]}'"
            )
            raise KeyError(msg)
        super().__setitem__(key, value)
        self._lower_map[lk] = key

    def __getitem__(self, key: str):
        orig = self.get_original_key(key)
        if orig is None:
            raise KeyError(key)
        return super().__getitem__(orig)

    def __delitem__(self, key: str):
        orig = self.get_original_key(key)
        if orig is None:
            raise KeyError(key)
        del self._lower_map[orig.lower()]
        super().__delitem__(orig)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get_original_key(key) is not None

    def get(self, key: str, default=None):
        orig = self.get_original_key(key)
        if orig is None:
            return default
        return super().get(orig, default)

    def update(self, *args, **kwargs):
        for k, v in dict(*args, **kwargs).items():
            self[k] = v

    def register(self, name: str, obj: Any):
        """
        Register an object under a new tag.

        Args:
            name (str): Tag to register with.
            obj (Any): Class or factory to store.

        Raises:
            KeyError: If the tag is already taken (case-insensitive).

        """
        if name.lower() in self._lower_map:
            msg = f"Duplicate {self.kind} tag (case-insensitive): {name}"
            raise KeyError(msg)
        self[name] = obj

    def resolve(self, name: str) -> Any:
        """
        Return the object registered under `name`.

        Args:
            name (str): Configuration tag.

        Returns:
            Any: Registered class or factory.

        Raises:
            UnknownComponentError: If no entry matches `name`.

        """
        obj = self.get(name)
        if obj is None:
            raise UnknownComponentError(
                kind=self.kind,
                name=name,
                available=sorted(self.keys()),
            )
        return obj
