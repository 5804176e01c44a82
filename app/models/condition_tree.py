"""Condition tree models for conditional availability.

A tree node combines its children with AND (``&``) or OR (``|``). ``showc``
holds the indices of children whose failure is reported to the user; the
other children still count towards the result but stay hidden.
"""

from copy import deepcopy
from types import MappingProxyType
from typing import Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class LeafCondition(BaseModel):
    """A single opaque condition, identified by its ``type`` tag.

    ``params`` is a read-only copy of the leaf's other stored keys.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1, description="Condition type tag, e.g. 'date'")
    params: Mapping[str, Any] = Field(
        default_factory=dict, description="Remaining keys of the stored leaf"
    )

    @field_validator("params", mode="after")
    @classmethod
    def _read_only_params(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(deepcopy(dict(value)))

    @field_serializer("params")
    def _dump_params(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)


class ConditionTree(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: Literal["&", "|"] = Field(default="&", description="'&' for AND, '|' for OR")
    c: tuple[Union["ConditionTree", LeafCondition], ...] = Field(
        default=(), description="Ordered child nodes and leaves"
    )
    showc: frozenset[int] = Field(
        default_factory=frozenset, description="Indices of children shown to the user"
    )

    def is_visible(self, index: int) -> bool:
        return index in self.showc

    def is_empty(self) -> bool:
        return not self.c


ConditionTree.model_rebuild()

# Tree with no conditions at all; always satisfied.
EMPTY_TREE = ConditionTree()
