"""Serializable key-to-count table backing vocabulary-based feature extractors."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING

from modulartc.core.data.schema_constants import VOCABULARY_FORMAT_VERSION
from modulartc.utils.errors.exceptions import FeatureStoreWriteError, VocabularyError
from modulartc.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

logger = get_logger("vocabulary")


def _rank_key(item: tuple[str, int]) -> tuple[int, str]:
    # Descending count, then ascending key
    key, count = item
    return (-count, key)


class VocabularyStore:
    """
    Frequency distribution over feature keys (n-grams, relations, ...).

    Description:
        A VocabularyStore is created empty at the start of a counting pass,
        filled by exactly one :class:`FrequencyCollector`, saved once and
        read-only afterwards. :meth:`top_k` derives the bounded vocabulary used
        during extraction; ranking is by descending count with ties broken by
        ascending key so that vocabularies are reproducible across runs.

    Attributes:
        read_only (bool): Whether mutating methods are disabled.

    """

    def __init__(
        self,
        counts: Mapping[str, int] | None = None,
        *,
        read_only: bool = False,
    ):
        self._counts: Counter[str] = Counter()
        for key, count in (counts or {}).items():
            self._check_entry(key, count)
            if count:
                self._counts[key] = int(count)
        self.read_only = read_only

    @staticmethod
    def _check_entry(key: str, count: int) -> None:
        if not isinstance(key, str):
            msg = f"Vocabulary keys must be strings, got {type(key)}."
            raise VocabularyError(msg)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            msg = f"Count for key '{key}' must be a non-negative integer, got {count!r}."
            raise VocabularyError(msg)

    def _ensure_writable(self, method: str) -> None:
        if self.read_only:
            msg = f"Cannot call `{method}` on a read-only VocabularyStore."
            raise VocabularyError(msg)

    # ================================================
    # Mutation (collection phase only)
    # ================================================
    def increment(self, key: str, n: int = 1) -> None:
        """
        Add `n` occurrences of `key`.

        Args:
            key (str): Feature key.
            n (int, optional): Number of occurrences. Defaults to 1.

        Raises:
            VocabularyError: If the store is read-only or `n` is negative.

        """
        self._ensure_writable("increment")
        self._check_entry(key, n)
        if n:
            self._counts[key] += n

    def increment_all(self, keys: Iterable[str]) -> None:
        self._ensure_writable("increment_all")
        for key in keys:
            self.increment(key)

    def merge(self, other: VocabularyStore | Mapping[str, int]) -> None:
        """
        Add all counts of `other` to this store.

        Args:
            other (VocabularyStore | Mapping[str, int]): Counts to add.

        Raises:
            VocabularyError: If this store is read-only.

        """
        self._ensure_writable("merge")
        items = other.items() if isinstance(other, VocabularyStore) else dict(other).items()
        for key, count in items:
            self._check_entry(key, count)
        for key, count in items:
            if count:
                self._counts[key] += count

    # ================================================
    # Read access
    # ================================================
    def count(self, key: str) -> int:
        return self._counts.get(key, 0)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def items(self) -> list[tuple[str, int]]:
        """Return ``(key, count)`` pairs in rank order."""
        return sorted(self._counts.items(), key=_rank_key)

    def keys(self) -> list[str]:
        """Return keys in rank order."""
        return [k for k, _ in self.items()]

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VocabularyStore):
            return NotImplemented
        return self._counts == other._counts

    __hash__ = None

    def __repr__(self) -> str:
        return f"VocabularyStore(n_keys={len(self)}, total={self.total}, read_only={self.read_only})"

    def top_k(self, k: int) -> VocabularyStore:
        """
        Return a new read-only store with the `k` highest-ranked keys.

        Args:
            k (int): Maximum number of keys to keep. Must be non-negative.

        Returns:
            VocabularyStore: Truncated, read-only store.

        """
        if k < 0:
            msg = f"top_k requires k >= 0, got {k}."
            raise VocabularyError(msg)
        return VocabularyStore(dict(self.items()[:k]), read_only=True)

    # ================================================
    # Persistence
    # ================================================
    def save(self, path: str | Path) -> Path:
        """
        Write the store as JSON to `path`.

        The file is written to a temporary sibling first and then renamed, so
        a failed write never leaves a truncated vocabulary behind.

        Args:
            path (str | Path): Destination file.

        Returns:
            Path: The written file.

        Raises:
            FeatureStoreWriteError: If the file cannot be written.

        """
        path = Path(path)
        tmp = path.with_name(path.name + ".tmp")
        payload = {
            "format_version": VOCABULARY_FORMAT_VERSION,
            "counts": dict(sorted(self._counts.items())),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            tmp.replace(path)
        except (OSError, ValueError) as exc:
            tmp.unlink(missing_ok=True)
            raise FeatureStoreWriteError(str(path), "Failed to save vocabulary.") from exc

        logger.debug(f"Saved vocabulary with {len(self)} keys to {path}.")
        return path

    @classmethod
    def load(cls, path: str | Path, *, read_only: bool = True) -> VocabularyStore:
        """
        Load a store previously written by :meth:`save`.

        Args:
            path (str | Path): Vocabulary file.
            read_only (bool, optional): Whether the loaded store is read-only.
                Defaults to True.

        Returns:
            VocabularyStore: Loaded store.

        Raises:
            VocabularyError: If the file is missing or not a vocabulary file.

        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as exc:
            msg = f"Vocabulary file not found: {path}"
            raise VocabularyError(msg) from exc
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"Could not read vocabulary file: {path}"
            raise VocabularyError(msg) from exc

        if not isinstance(payload, dict) or "counts" not in payload:
            msg = f"File is not a vocabulary file: {path}"
            raise VocabularyError(msg)
        version = payload.get("format_version")
        if version != VOCABULARY_FORMAT_VERSION:
            msg = f"Unsupported vocabulary format version {version!r} in {path}."
            raise VocabularyError(msg)

        return cls(payload["counts"], read_only=read_only)
