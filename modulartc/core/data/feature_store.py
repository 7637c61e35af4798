"""On-disk instance store written by one extraction run."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

import numpy as np
import pandas as pd
import pyarrow as pa

from modulartc.core.data.instance import Instance
from modulartc.core.data.schema_constants import (
    DOMAIN_FEATURES,
    DOMAIN_INSTANCE_ID,
    DOMAIN_OUTCOMES,
    DOMAIN_POSITION,
    DOMAIN_SEQUENCE_ID,
    DOMAIN_WEIGHT,
    FILENAME_FEATURE_TABLE,
    FILENAME_INSTANCES,
    FILENAME_MANIFEST,
    PARTIAL_SUFFIX,
    STORE_FORMAT_VERSION,
    FeatureEncoding,
)
from modulartc.utils.errors.exceptions import FeatureStoreWriteError, IncompleteFeatureStoreError
from modulartc.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

logger = get_logger("feature_store")

_BATCH_SIZE = 1024


def _partial_path(path: Path) -> Path:
    return path.with_name(path.name + PARTIAL_SUFFIX)


def _write_json(data: dict[str, Any], save_path: Path) -> Path:
    """Write `data` as JSON to `save_path` via a partial file."""
    partial = _partial_path(save_path)
    try:
        with partial.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        partial.replace(save_path)
    except (OSError, ValueError) as exc:
        partial.unlink(missing_ok=True)
        raise FeatureStoreWriteError(save_path, str(exc)) from exc
    return save_path


class InstanceStreamWriter:
    """
    Appends instances to a JSON-lines file, one instance per line.

    Instances are written to ``<path>.part`` and the file is moved to
    `path` on :meth:`close`. :meth:`abort` removes the partial file, so an
    aborted run never leaves a readable instance file behind.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.n_written = 0
        self._fh: IO[str] | None = None

    @property
    def partial_path(self) -> Path:
        return _partial_path(self.path)

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self) -> InstanceStreamWriter:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.partial_path.open("w", encoding="utf-8")
        except OSError as exc:
            raise FeatureStoreWriteError(self.partial_path, str(exc)) from exc
        self.n_written = 0
        return self

    def write(self, instance: Instance) -> None:
        if self._fh is None:
            msg = "Writer is not open."
            raise FeatureStoreWriteError(self.path, msg)
        try:
            self._fh.write(json.dumps(instance.to_dict(), ensure_ascii=False))
            self._fh.write("\n")
        except (OSError, ValueError) as exc:
            raise FeatureStoreWriteError(self.partial_path, str(exc)) from exc
        self.n_written += 1

    def write_all(self, instances: Iterable[Instance]) -> None:
        for inst in instances:
            self.write(inst)

    def close(self) -> Path:
        """Flush and publish the instance file. Returns its final path."""
        if self._fh is None:
            msg = "Writer is not open."
            raise FeatureStoreWriteError(self.path, msg)
        try:
            self._fh.close()
            self.partial_path.replace(self.path)
        except OSError as exc:
            raise FeatureStoreWriteError(self.path, str(exc)) from exc
        finally:
            self._fh = None
        return self.path

    def abort(self) -> None:
        """Drop everything written so far."""
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        self.partial_path.unlink(missing_ok=True)

    def __enter__(self) -> InstanceStreamWriter:
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.abort()
        elif self.is_open:
            self.close()
        return False


class FeatureStore:
    """
    Directory holding the instances of one run.

    Description:
        While a run is in progress the store consists of ``instances.jsonl``
        only. Filters and feature-space reconciliation rewrite that file as
        a stream (:meth:`rewrite`), so a store never has to fit in memory.

        :meth:`finalize` converts the instances into an Arrow IPC file
        (``features.arrow``) and writes ``manifest.json`` with
        ``"complete": true``. Only a finalized store can be opened with
        :meth:`load`; a directory without a complete manifest is the
        remainder of an aborted run.

        Arrow layout:

        - ``instance_id`` (string), ``sequence_id`` / ``position`` (int64),
          ``weight`` (float64), ``outcomes`` (list<string>).
        - ``features``: in dense encoding a struct with one field per
          feature name (sorted); in sparse encoding a map from feature name
          to value. Numeric values are stored as float64; a feature with
          any string value is stored as string.

    Attributes:
        directory (Path): Output directory of the run.
        encoding (FeatureEncoding): Dense or sparse encoding.

    """

    def __init__(
        self,
        directory: str | Path,
        encoding: FeatureEncoding | str = FeatureEncoding.DENSE,
    ):
        self.directory = Path(directory)
        self.encoding = FeatureEncoding(encoding)

    def __repr__(self) -> str:
        return f"FeatureStore(directory='{self.directory}', encoding='{self.encoding.value}')"

    # ================================================
    # Paths
    # ================================================
    @property
    def instances_path(self) -> Path:
        return self.directory / FILENAME_INSTANCES

    @property
    def table_path(self) -> Path:
        return self.directory / FILENAME_FEATURE_TABLE

    @property
    def manifest_path(self) -> Path:
        return self.directory / FILENAME_MANIFEST

    def writer(self) -> InstanceStreamWriter:
        """Return a writer for this store's instance file."""
        return InstanceStreamWriter(self.instances_path)

    # ================================================
    # Reading instances
    # ================================================
    def iter_instances(self) -> Iterator[Instance]:
        """
        Stream the instances of this store in write order.

        Raises:
            IncompleteFeatureStoreError: If no instance file has been published.

        """
        if not self.instances_path.exists():
            raise IncompleteFeatureStoreError(self.instances_path, "no instance file was published.")
        with self.instances_path.open(encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    yield Instance.from_dict(json.loads(line))

    def __iter__(self) -> Iterator[Instance]:
        return self.iter_instances()

    @property
    def n_instances(self) -> int:
        return sum(1 for _ in self.iter_instances())

    def feature_names(self) -> list[str]:
        """Sorted union of the feature names of all instances."""
        names: set[str] = set()
        for inst in self.iter_instances():
            names.update(inst.feature_names)
        return sorted(names)

    def outcomes(self) -> list[str]:
        """Sorted set of all outcome labels."""
        labels: set[str] = set()
        for inst in self.iter_instances():
            labels.update(inst.outcomes)
        return sorted(labels)

    # ================================================
    # Rewriting
    # ================================================
    def rewrite(self, fn: Callable[[Instance], Instance | None]) -> int:
        """
        Replace every instance by ``fn(instance)``, streaming.

        Instances for which `fn` returns None are dropped. The instance file
        is swapped only after all instances were rewritten; on error the
        original file stays untouched.

        Returns:
            int: Number of instances in the rewritten file.

        """
        writer = InstanceStreamWriter(self.instances_path)
        source = self.iter_instances()
        with writer:
            for inst in source:
                new = fn(inst)
                if new is not None:
                    writer.write(new)
        logger.debug(f"Rewrote {writer.n_written} instances of '{self.instances_path}'.")
        return writer.n_written

    # ================================================
    # Finalization
    # ================================================
    def finalize(self, feature_names: Iterable[str], outcomes: Iterable[str] | None = None) -> Path:
        """
        Write the Arrow feature table and mark the store complete.

        Args:
            feature_names (Iterable[str]): Feature space of the store.
            outcomes (Iterable[str], optional): Outcome labels. Collected
                from the instances if omitted.

        Returns:
            Path: Path of the manifest.

        """
        names = sorted(set(feature_names))
        if outcomes is None:
            outcomes = self.outcomes()
        schema = self._schema(names)

        n_rows = 0
        partial = _partial_path(self.table_path)
        try:
            with pa.OSFile(str(partial), "wb") as sink, pa.ipc.new_file(sink, schema) as ipc_writer:
                batch: list[Instance] = []
                for inst in self.iter_instances():
                    batch.append(inst)
                    if len(batch) >= _BATCH_SIZE:
                        ipc_writer.write_batch(self._record_batch(batch, names, schema))
                        n_rows += len(batch)
                        batch = []
                if batch:
                    ipc_writer.write_batch(self._record_batch(batch, names, schema))
                    n_rows += len(batch)
            partial.replace(self.table_path)
        except (OSError, pa.ArrowException) as exc:
            partial.unlink(missing_ok=True)
            raise FeatureStoreWriteError(self.table_path, str(exc)) from exc

        manifest = {
            "format_version": STORE_FORMAT_VERSION,
            "complete": True,
            "encoding": self.encoding.value,
            "n_instances": n_rows,
            "feature_names": names,
            "outcomes": sorted(set(outcomes)),
        }
        path = _write_json(manifest, self.manifest_path)
        logger.info(
            f"Finalized {n_rows} instances with {len(names)} features.",
            extra={"title_desc": f"FeatureStore: {self.directory.name}"},
        )
        return path

    def _value_types(self, names: list[str]) -> dict[str, pa.DataType]:
        str_valued: set[str] = set()
        for inst in self.iter_instances():
            str_valued.update(f.name for f in inst.features if isinstance(f.value, str))
        return {n: (pa.string() if n in str_valued else pa.float64()) for n in names}

    def _schema(self, names: list[str]) -> pa.Schema:
        value_types = self._value_types(names)
        if self.encoding is FeatureEncoding.DENSE:
            feature_type = pa.struct([pa.field(n, value_types[n]) for n in names])
        else:
            any_str = any(t == pa.string() for t in value_types.values())
            feature_type = pa.map_(pa.string(), pa.string() if any_str else pa.float64())
        return pa.schema(
            [
                pa.field(DOMAIN_INSTANCE_ID, pa.string()),
                pa.field(DOMAIN_SEQUENCE_ID, pa.int64()),
                pa.field(DOMAIN_POSITION, pa.int64()),
                pa.field(DOMAIN_WEIGHT, pa.float64()),
                pa.field(DOMAIN_OUTCOMES, pa.list_(pa.string())),
                pa.field(DOMAIN_FEATURES, feature_type),
            ],
        )

    def _record_batch(self, batch: list[Instance], names: list[str], schema: pa.Schema) -> pa.RecordBatch:
        feature_type = schema.field(DOMAIN_FEATURES).type

        if self.encoding is FeatureEncoding.DENSE:
            casts = {f.name: (str if f.type == pa.string() else float) for f in feature_type}
            features = []
            for inst in batch:
                values = inst.feature_dict()
                features.append(
                    {n: (casts[n](values[n]) if n in values else None) for n in names},
                )
        else:
            cast = str if feature_type.item_type == pa.string() else float
            features = [[(f.name, cast(f.value)) for f in inst.features] for inst in batch]

        return pa.RecordBatch.from_arrays(
            [
                pa.array([i.instance_id for i in batch], type=pa.string()),
                pa.array([i.sequence_id for i in batch], type=pa.int64()),
                pa.array([i.position for i in batch], type=pa.int64()),
                pa.array([i.weight for i in batch], type=pa.float64()),
                pa.array([list(i.outcomes) for i in batch], type=pa.list_(pa.string())),
                pa.array(features, type=feature_type),
            ],
            schema=schema,
        )

    # ================================================
    # Completed stores
    # ================================================
    def read_manifest(self) -> dict[str, Any]:
        if not self.manifest_path.exists():
            raise IncompleteFeatureStoreError(self.directory, "no manifest was written.")
        with self.manifest_path.open(encoding="utf-8") as f:
            return json.load(f)

    @property
    def is_complete(self) -> bool:
        if not self.manifest_path.exists():
            return False
        return bool(self.read_manifest().get("complete", False)) and self.table_path.exists()

    @classmethod
    def load(cls, directory: str | Path) -> FeatureStore:
        """
        Open a finalized store.

        Raises:
            IncompleteFeatureStoreError: If the directory holds no completed run.

        """
        directory = Path(directory)
        candidate = cls(directory)
        manifest = candidate.read_manifest()
        if not manifest.get("complete", False) or not candidate.table_path.exists():
            raise IncompleteFeatureStoreError(directory)
        return cls(directory, encoding=manifest["encoding"])

    def to_table(self) -> pa.Table:
        """Read the finalized Arrow feature table."""
        if not self.is_complete:
            raise IncompleteFeatureStoreError(self.directory)
        with pa.memory_map(str(self.table_path), "r") as source:
            return pa.ipc.open_file(source).read_all()

    def to_pandas(self) -> pd.DataFrame:
        """
        Return one row per instance with one column per feature.

        Metadata columns (``instance_id``, ``sequence_id``, ``position``,
        ``weight``, ``outcomes``) come first. In sparse encoding, absent
        features are filled with 0.
        """
        table = self.to_table()
        names = self.read_manifest()["feature_names"]
        meta = table.drop_columns([DOMAIN_FEATURES]).to_pandas()

        if self.encoding is FeatureEncoding.DENSE:
            struct_col = table.column(DOMAIN_FEATURES).combine_chunks()
            feats = pd.DataFrame(
                {n: struct_col.field(n).to_pandas() for n in names},
                index=meta.index,
            )
        else:
            rows = [dict(entries) for entries in table.column(DOMAIN_FEATURES).to_pylist()]
            feats = pd.DataFrame(rows, columns=names, index=meta.index).fillna(0)
        return pd.concat([meta, feats], axis=1)

    def to_numpy(self, feature_names: Iterable[str] | None = None) -> np.ndarray:
        """
        Return the feature matrix as float64.

        Args:
            feature_names (Iterable[str], optional): Column order. Defaults to
                the sorted feature names of the store. Names unknown to the
                store are filled with 0.

        Returns:
            np.ndarray: Array of shape (n_instances, n_features).

        """
        df = self.to_pandas()
        names = self.read_manifest()["feature_names"] if feature_names is None else list(feature_names)
        return df.reindex(columns=names, fill_value=0).to_numpy(dtype=np.float64)

    def discard(self) -> None:
        """Remove every file this store may have written, partial or complete."""
        for path in (self.instances_path, self.table_path, self.manifest_path):
            path.unlink(missing_ok=True)
            _partial_path(path).unlink(missing_ok=True)

