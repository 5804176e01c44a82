"""Unit tests for condition tree parsing and serialization."""

import json

import pytest

from app.availability.exceptions import MalformedTreeError
from app.availability.tree import DEFAULT_TREE_JSON, parse, serialize
from app.models.condition_tree import EMPTY_TREE, ConditionTree, LeafCondition


NESTED_TREE_JSON = (
    '{"op":"&","c":['
    '{"type":"date","d":">=","t":1700000000},'
    '{"op":"|","c":[{"type":"group","id":3},{"type":"grade","id":"quiz1","min":50}],"showc":[1]}'
    '],"showc":[0,1]}'
)


@pytest.mark.parametrize("raw", [None, "", "   ", DEFAULT_TREE_JSON])
def test_parse_empty_inputs_return_empty_tree(raw):
    """Should parse absent and default trees to the empty sentinel."""
    assert parse(raw) is EMPTY_TREE


def test_parse_nested_tree_structure():
    """Should build nodes and leaves with their visible indices."""
    tree = parse(NESTED_TREE_JSON)

    assert tree.op == "&"
    assert tree.showc == frozenset({0, 1})
    assert tree.c[0] == LeafCondition(type="date", params={"d": ">=", "t": 1700000000})

    inner = tree.c[1]
    assert isinstance(inner, ConditionTree)
    assert inner.op == "|"
    assert inner.is_visible(1)
    assert not inner.is_visible(0)


def test_serialize_round_trips_byte_for_byte():
    """Should serialize a parsed tree back to the same compact JSON."""
    assert serialize(parse(NESTED_TREE_JSON)) == NESTED_TREE_JSON


def test_parse_serialize_structural_equality():
    """Should give an equal tree after serialize and parse."""
    tree = ConditionTree(
        op="|",
        c=(
            LeafCondition(type="completion", params={"cm": 7, "e": 1}),
            ConditionTree(op="&", c=(LeafCondition(type="group"),), showc=frozenset({0})),
        ),
        showc=frozenset({1, 0}),
    )

    assert parse(serialize(tree)) == tree


def test_serialize_sorts_showc_indices():
    tree = parse('{"op":"&","c":[{"type":"group"},{"type":"group","id":1}],"showc":[1,0]}')

    assert json.loads(serialize(tree))["showc"] == [0, 1]


def test_serialize_empty_tree_gives_default_json():
    assert serialize(EMPTY_TREE) == DEFAULT_TREE_JSON


def test_parse_accepts_decoded_dict():
    tree = parse({"op": "|", "c": [{"type": "group"}]})

    assert tree.op == "|"
    assert tree.showc == frozenset()


def test_parse_empty_or_is_not_the_empty_sentinel():
    """Should keep an empty OR, which is never satisfied."""
    tree = parse('{"op":"|","c":[],"showc":[]}')

    assert tree is not EMPTY_TREE
    assert tree.op == "|"


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '{"op":"!","c":[],"showc":[]}',
        '{"c":[],"showc":[]}',
        '{"op":"&","c":{},"showc":[]}',
        '{"op":"&","c":[],"showc":{}}',
        '{"op":"&","c":[{"type":"group"}],"showc":[1]}',
        '{"op":"&","c":[{"type":"group"}],"showc":[-1]}',
        '{"op":"&","c":[{"type":"group"}],"showc":[true]}',
        '{"op":"&","c":[{"type":"group"}],"showc":["0"]}',
        '{"op":"&","c":[{"type":"group"},{"type":"group"}],"showc":[0,0]}',
        '{"op":"&","c":[{"id":3}],"showc":[]}',
        '{"op":"&","c":[{"type":""}],"showc":[]}',
        '{"op":"&","c":[5],"showc":[]}',
        '{"op":"&","c":[],"showc":[],"show":true}',
    ],
)
def test_parse_malformed_trees_raise(raw):
    """Should reject invalid JSON and invalid structure."""
    with pytest.raises(MalformedTreeError):
        parse(raw)


def test_parse_error_reports_nested_path():
    with pytest.raises(MalformedTreeError, match=r"root\.c\[0\]"):
        parse('{"op":"&","c":[{"op":"?","c":[]}],"showc":[]}')


def test_leaf_type_is_not_looked_up_when_parsing():
    """Should parse leaves of unregistered kinds; they fail at evaluation."""
    tree = parse('{"op":"&","c":[{"type":"profile","sf":"email"}],"showc":[0]}')

    assert tree.c[0].type == "profile"
