"""Parse and serialize stored condition trees.

Stored format::

    {"op": "&" | "|", "c": [<node> | <leaf>, ...], "showc": [<index>, ...]}

Leaves are objects carrying a ``type`` tag plus kind-specific keys.
"""

import json
from typing import Any

from app.availability.exceptions import MalformedTreeError
from app.models.condition_tree import EMPTY_TREE, ConditionTree, LeafCondition


DEFAULT_TREE_JSON = '{"op":"&","c":[],"showc":[]}'

_NODE_KEYS = {"op", "c", "showc"}


def parse(raw: str | bytes | dict | None) -> ConditionTree:
    """Parse stored JSON (or an already decoded dict) into a ConditionTree.

    Missing or blank input, and a tree without conditions, give ``EMPTY_TREE``.

    Raises:
        MalformedTreeError: If the input is not valid JSON or not a valid tree
    """
    if raw is None:
        return EMPTY_TREE

    if isinstance(raw, (str, bytes)):
        if not raw.strip():
            return EMPTY_TREE
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedTreeError(f"Condition tree is not valid JSON: {e}") from e
    else:
        data = raw

    tree = _parse_node(data, "root")
    if tree == EMPTY_TREE:
        return EMPTY_TREE
    return tree


def serialize(tree: ConditionTree) -> str:
    """Serialize a tree to compact JSON; the inverse of ``parse``."""
    return json.dumps(_dump_node(tree), separators=(",", ":"), ensure_ascii=False)


def _parse_node(data: Any, path: str) -> ConditionTree:
    if not isinstance(data, dict):
        raise MalformedTreeError(f"{path}: expected an object, got {type(data).__name__}")

    unexpected = set(data) - _NODE_KEYS
    if unexpected:
        raise MalformedTreeError(f"{path}: unexpected keys {sorted(unexpected)}")

    op = data.get("op")
    if op not in ("&", "|"):
        raise MalformedTreeError(f"{path}: 'op' must be '&' or '|', got {op!r}")

    children = data.get("c")
    if not isinstance(children, list):
        raise MalformedTreeError(f"{path}: 'c' must be a list")

    showc = data.get("showc", [])
    if not isinstance(showc, list):
        raise MalformedTreeError(f"{path}: 'showc' must be a list")
    for index in showc:
        # bool is an int subclass; true/false are not valid indices here
        if isinstance(index, bool) or not isinstance(index, int):
            raise MalformedTreeError(f"{path}: 'showc' entries must be integers, got {index!r}")
        if not 0 <= index < len(children):
            raise MalformedTreeError(f"{path}: 'showc' index {index} out of range")
    if len(set(showc)) != len(showc):
        raise MalformedTreeError(f"{path}: 'showc' contains duplicate indices")

    parsed = []
    for i, child in enumerate(children):
        child_path = f"{path}.c[{i}]"
        if isinstance(child, dict) and "op" in child:
            parsed.append(_parse_node(child, child_path))
        else:
            parsed.append(_parse_leaf(child, child_path))

    return ConditionTree(op=op, c=tuple(parsed), showc=frozenset(showc))


def _parse_leaf(data: Any, path: str) -> LeafCondition:
    if not isinstance(data, dict):
        raise MalformedTreeError(f"{path}: expected a condition object")

    kind = data.get("type")
    if not isinstance(kind, str) or not kind:
        raise MalformedTreeError(f"{path}: condition is missing a 'type'")

    params = {k: v for k, v in data.items() if k != "type"}
    return LeafCondition(type=kind, params=params)


def _dump_node(node: ConditionTree | LeafCondition) -> dict:
    if isinstance(node, LeafCondition):
        return {"type": node.type, **node.params}
    return {
        "op": node.op,
        "c": [_dump_node(child) for child in node.c],
        "showc": sorted(node.showc),
    }
