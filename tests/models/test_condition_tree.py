"""Unit tests for condition tree models."""

from pydantic import ValidationError
import pytest

from app.models.condition_tree import EMPTY_TREE, ConditionTree, LeafCondition


def test_empty_tree_defaults():
    assert EMPTY_TREE.op == "&"
    assert EMPTY_TREE.c == ()
    assert EMPTY_TREE.is_empty()


def test_tree_is_immutable():
    tree = ConditionTree(op="|", c=(LeafCondition(type="group"),))

    with pytest.raises(ValidationError):
        tree.op = "&"


def test_leaf_params_are_read_only():
    leaf = LeafCondition(type="group", params={"id": 3})

    with pytest.raises(TypeError):
        leaf.params["id"] = 4

    assert leaf.params["id"] == 3


def test_leaf_params_are_copied_from_input():
    raw = {"id": 3, "extra": [1]}
    leaf = LeafCondition(type="group", params=raw)

    raw["id"] = 4
    raw["extra"].append(2)

    assert dict(leaf.params) == {"id": 3, "extra": [1]}


def test_invalid_operator_rejected():
    with pytest.raises(ValidationError):
        ConditionTree(op="!")


def test_leaf_requires_type():
    with pytest.raises(ValidationError):
        LeafCondition(type="")


def test_structural_equality():
    a = ConditionTree(c=(LeafCondition(type="group", params={"id": 1}),), showc=frozenset({0}))
    b = ConditionTree(c=(LeafCondition(type="group", params={"id": 1}),), showc=frozenset({0}))

    assert a == b
    assert a.is_visible(0)
