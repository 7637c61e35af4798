"""Unit tests for modulartc.core.data.instance module."""

import json

import pytest

from modulartc.core.data.instance import Feature, Instance


@pytest.mark.unit
def test_feature_default_detection():
    assert Feature("f", 0).is_default
    assert Feature("f", 0.0).is_default
    assert not Feature("f", 1).is_default
    assert not Feature("f", "0").is_default


@pytest.mark.unit
def test_instance_is_immutable_and_derives_copies():
    inst = Instance(features=[Feature("a", 1)], outcomes=["pos"], instance_id="1")
    assert inst.features == (Feature("a", 1),)

    weighted = inst.with_weight(2)
    assert weighted.weight == 2.0
    assert inst.weight == 1.0

    with pytest.raises(AttributeError):
        inst.weight = 3.0


@pytest.mark.unit
def test_to_dict_is_json_serializable_and_preserves_order():
    inst = Instance(
        features=(Feature("z", 1), Feature("a", "x")),
        outcomes=("A", "B"),
        instance_id="d_0_1",
        sequence_id=0,
        position=1,
    )
    restored = Instance.from_dict(json.loads(json.dumps(inst.to_dict())))
    assert restored == inst
    assert restored.feature_names == ["z", "a"]
    assert restored.feature_dict() == {"z": 1, "a": "x"}
