"""Unit tests for modulartc.core.data.feature_store module."""

import json

import numpy as np
import pyarrow as pa
import pytest

from modulartc.core.data.feature_store import FeatureStore, InstanceStreamWriter
from modulartc.core.data.instance import Feature, Instance
from modulartc.core.data.schema_constants import FeatureEncoding
from modulartc.utils.errors.exceptions import FeatureStoreWriteError, IncompleteFeatureStoreError


def _instances() -> list[Instance]:
    return [
        Instance((Feature("ngram_a", 1), Feature("ngram_b", 0)), ("pos",), instance_id="1"),
        Instance((Feature("ngram_a", 0), Feature("ngram_b", 1)), ("neg",), instance_id="2"),
        Instance((Feature("ngram_a", 1), Feature("ngram_b", 1)), ("pos",), instance_id="3"),
    ]


@pytest.fixture
def dense_store(tmp_path) -> FeatureStore:
    store = FeatureStore(tmp_path / "run")
    with store.writer() as w:
        w.write_all(_instances())
    return store


# ---------------------------------------------------------------------
# InstanceStreamWriter
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_writer_publishes_only_on_close(tmp_path):
    writer = InstanceStreamWriter(tmp_path / "instances.jsonl").open()
    writer.write(_instances()[0])
    assert writer.partial_path.exists()
    assert not writer.path.exists()

    writer.close()
    assert writer.path.exists()
    assert not writer.partial_path.exists()
    assert writer.n_written == 1


@pytest.mark.unit
def test_writer_abort_leaves_nothing(tmp_path):
    path = tmp_path / "instances.jsonl"
    with pytest.raises(RuntimeError), InstanceStreamWriter(path) as w:
        w.write(_instances()[0])
        raise RuntimeError("boom")
    assert not path.exists()
    assert not w.partial_path.exists()


@pytest.mark.unit
def test_write_on_closed_writer_raises(tmp_path):
    with pytest.raises(FeatureStoreWriteError):
        InstanceStreamWriter(tmp_path / "x.jsonl").write(_instances()[0])


@pytest.mark.unit
def test_unencodable_instance_raises_write_error(tmp_path):
    path = tmp_path / "instances.jsonl"
    with pytest.raises(FeatureStoreWriteError), InstanceStreamWriter(path) as w:
        w.write(Instance((Feature("\ud83d", 1),), ("pos",)))
    assert not path.exists()
    assert not w.partial_path.exists()


# ---------------------------------------------------------------------
# Reading & rewriting
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_iteration_and_summaries(dense_store: FeatureStore):
    assert dense_store.n_instances == 3
    assert [i.instance_id for i in dense_store] == ["1", "2", "3"]
    assert dense_store.feature_names() == ["ngram_a", "ngram_b"]
    assert dense_store.outcomes() == ["neg", "pos"]


@pytest.mark.unit
def test_reading_unpublished_store_raises(tmp_path):
    with pytest.raises(IncompleteFeatureStoreError):
        list(FeatureStore(tmp_path).iter_instances())


@pytest.mark.unit
def test_rewrite_maps_and_drops(dense_store: FeatureStore):
    n = dense_store.rewrite(lambda inst: None if inst.instance_id == "2" else inst.with_weight(5))
    assert n == 2
    assert [(i.instance_id, i.weight) for i in dense_store] == [("1", 5.0), ("3", 5.0)]


@pytest.mark.unit
def test_failed_rewrite_keeps_original(dense_store: FeatureStore):
    def _fail(inst):
        if inst.instance_id == "2":
            raise ValueError("bad instance")
        return inst.with_weight(9)

    with pytest.raises(ValueError, match="bad instance"):
        dense_store.rewrite(_fail)
    assert [i.weight for i in dense_store] == [1.0, 1.0, 1.0]
    assert not dense_store.writer().partial_path.exists()


# ---------------------------------------------------------------------
# Finalization
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_store_is_incomplete_until_finalized(dense_store: FeatureStore):
    assert not dense_store.is_complete
    with pytest.raises(IncompleteFeatureStoreError):
        FeatureStore.load(dense_store.directory)

    dense_store.finalize(["ngram_a", "ngram_b"])
    assert dense_store.is_complete

    manifest = json.loads(dense_store.manifest_path.read_text())
    assert manifest["complete"] is True
    assert manifest["n_instances"] == 3
    assert manifest["feature_names"] == ["ngram_a", "ngram_b"]
    assert manifest["outcomes"] == ["neg", "pos"]


@pytest.mark.unit
def test_dense_table_and_views(dense_store: FeatureStore):
    dense_store.finalize(["ngram_b", "ngram_a"])
    loaded = FeatureStore.load(dense_store.directory)
    assert loaded.encoding is FeatureEncoding.DENSE

    table = loaded.to_table()
    assert isinstance(table, pa.Table)
    assert table.num_rows == 3
    assert pa.types.is_struct(table.schema.field("features").type)

    df = loaded.to_pandas()
    assert list(df["instance_id"]) == ["1", "2", "3"]
    assert list(df["ngram_a"]) == [1.0, 0.0, 1.0]

    X = loaded.to_numpy()
    np.testing.assert_array_equal(X, np.array([[1, 0], [0, 1], [1, 1]], dtype=float))
    assert loaded.to_numpy(["ngram_b", "unknown"]).tolist() == [[0, 0], [1, 0], [1, 0]]


@pytest.mark.unit
def test_sparse_table_fills_absent_features(tmp_path):
    store = FeatureStore(tmp_path / "sparse", encoding="sparse")
    with store.writer() as w:
        w.write(Instance((Feature("f_a", 2),), ("x",)))
        w.write(Instance((Feature("f_b", 3),), ("y",)))
    store.finalize(store.feature_names())

    loaded = FeatureStore.load(store.directory)
    assert loaded.encoding is FeatureEncoding.SPARSE
    assert pa.types.is_map(loaded.to_table().schema.field("features").type)
    np.testing.assert_array_equal(loaded.to_numpy(), np.array([[2.0, 0.0], [0.0, 3.0]]))


@pytest.mark.unit
def test_string_valued_features_are_stored_as_strings(tmp_path):
    store = FeatureStore(tmp_path / "str")
    with store.writer() as w:
        w.write(Instance((Feature("pos_tag", "NN"), Feature("len", 3)), ("x",)))
    store.finalize(store.feature_names())

    struct_type = store.to_table().schema.field("features").type
    assert struct_type.field("pos_tag").type == pa.string()
    assert struct_type.field("len").type == pa.float64()


@pytest.mark.unit
def test_discard_removes_all_files(dense_store: FeatureStore):
    dense_store.finalize(dense_store.feature_names())
    dense_store.discard()
    assert not dense_store.instances_path.exists()
    assert not dense_store.table_path.exists()
    assert not dense_store.manifest_path.exists()
