"""Leaf condition kinds and the registry that maps type tags to them.

A condition kind is any object offering ``is_satisfied(user_id, course_id,
context)`` and ``describe(strings)``. Kinds are registered by type tag with a
factory that builds one from the leaf's stored parameters, so new kinds can be
added without changing the evaluator::

    registry.register("profile", ProfileCondition.from_params)
"""

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Literal, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from app.availability.exceptions import MalformedTreeError, UnknownConditionKindError
from app.availability.strings import StringLookup
from app.models.condition_tree import ConditionTree, LeafCondition


logger = logging.getLogger(__name__)


# Activity completion states, as stored by the host platform
COMPLETION_INCOMPLETE = 0
COMPLETION_COMPLETE = 1
COMPLETION_COMPLETE_PASS = 2
COMPLETION_COMPLETE_FAIL = 3


class LearnerDataSource(Protocol):
    """Per-user course data the built-in conditions read."""

    def grade_percent(self, user_id: str, course_id: str, item_id: str) -> float | None: ...

    def group_ids(self, user_id: str, course_id: str) -> set[str]: ...

    def activity_completion_state(self, user_id: str, course_id: str, cm_id: str) -> int: ...


class AvailabilityContext:
    """Everything a condition may consult besides the user and course."""

    def __init__(self, learner_data: LearnerDataSource, now: datetime | None = None):
        self.learner_data = learner_data
        self.now = now or datetime.now(timezone.utc)


class Condition(Protocol):
    def is_satisfied(self, user_id: str, course_id: str, context: AvailabilityContext) -> bool: ...

    def describe(self, strings: StringLookup) -> str: ...


ConditionFactory = Callable[[dict[str, Any]], Condition]


class ConditionRegistry:
    """Maps condition type tags to factories."""

    def __init__(self):
        self._factories: dict[str, ConditionFactory] = {}

    def register(self, kind: str, factory: ConditionFactory) -> None:
        if kind in self._factories:
            logger.warning(f"Replacing registered factory for condition type '{kind}'")
        self._factories[kind] = factory

    def kinds(self) -> list[str]:
        return sorted(self._factories)

    def build(self, leaf: LeafCondition) -> Condition:
        """Build the condition for a leaf.

        Raises:
            UnknownConditionKindError: If no factory is registered for the leaf's type
            MalformedTreeError: If the factory rejects the leaf's parameters
        """
        factory = self._factories.get(leaf.type)
        if factory is None:
            raise UnknownConditionKindError(leaf.type)
        return factory(dict(leaf.params))

    def validate(self, node: ConditionTree | LeafCondition, skip_unknown: bool = False) -> None:
        """Build every leaf of a tree once so bad parameters surface up front.

        Args:
            node: Tree (or single leaf) to check
            skip_unknown: Leave unregistered types to fail when evaluated

        Raises:
            MalformedTreeError: If any leaf has invalid parameters
            UnknownConditionKindError: If a leaf's type is not registered and
                ``skip_unknown`` is false
        """
        if isinstance(node, ConditionTree):
            for child in node.c:
                self.validate(child, skip_unknown)
            return

        try:
            self.build(node)
        except UnknownConditionKindError:
            if not skip_unknown:
                raise


class _ParamsModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_params(cls, params: dict[str, Any]):
        try:
            return cls.model_validate(params)
        except ValidationError as e:
            raise MalformedTreeError(
                f"Invalid parameters for '{cls.__name__}': {e.errors(include_url=False)}"
            ) from e


def _format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%d %B %Y, %H:%M")


def _format_percent(value: float) -> str:
    return f"{value:g}"


class DateCondition(_ParamsModel):
    """Available from (``>=``) or until (``<``) a unix timestamp."""

    d: Literal[">=", "<"]
    t: int

    def is_satisfied(self, user_id: str, course_id: str, context: AvailabilityContext) -> bool:
        now = int(context.now.timestamp())
        if self.d == ">=":
            return now >= self.t
        return now < self.t

    def describe(self, strings: StringLookup) -> str:
        key = "date_from" if self.d == ">=" else "date_until"
        return strings.get_string(key, date=_format_timestamp(self.t))


class GradeCondition(_ParamsModel):
    """Grade (percentage) for an item within ``[min, max)``; bounds are optional."""

    id: str | int
    min: float | None = None
    max: float | None = None

    @model_validator(mode="after")
    def _check_range(self):
        if self.min is not None and self.max is not None and self.min >= self.max:
            raise ValueError("'min' must be lower than 'max'")
        return self

    def is_satisfied(self, user_id: str, course_id: str, context: AvailabilityContext) -> bool:
        grade = context.learner_data.grade_percent(user_id, course_id, str(self.id))
        if grade is None:
            return False
        if self.min is not None and grade < self.min:
            return False
        if self.max is not None and grade >= self.max:
            return False
        return True

    def describe(self, strings: StringLookup) -> str:
        item = str(self.id)
        if self.min is not None and self.max is not None:
            return strings.get_string(
                "grade_range",
                item=item,
                min=_format_percent(self.min),
                max=_format_percent(self.max),
            )
        if self.min is not None:
            return strings.get_string("grade_min", item=item, min=_format_percent(self.min))
        if self.max is not None:
            return strings.get_string("grade_max", item=item, max=_format_percent(self.max))
        return strings.get_string("grade_any", item=item)


class GroupCondition(_ParamsModel):
    """Membership of one group, or of any group in the course when ``id`` is absent."""

    id: str | int | None = None

    def is_satisfied(self, user_id: str, course_id: str, context: AvailabilityContext) -> bool:
        groups = context.learner_data.group_ids(user_id, course_id)
        if self.id is None:
            return bool(groups)
        return str(self.id) in groups

    def describe(self, strings: StringLookup) -> str:
        if self.id is None:
            return strings.get_string("group_any")
        return strings.get_string("group_specific", group=str(self.id))


class CompletionCondition(_ParamsModel):
    """Completion state ``e`` of activity ``cm``."""

    cm: str | int
    e: Literal[0, 1, 2, 3] = COMPLETION_COMPLETE

    def is_satisfied(self, user_id: str, course_id: str, context: AvailabilityContext) -> bool:
        state = context.learner_data.activity_completion_state(user_id, course_id, str(self.cm))
        if self.e == COMPLETION_COMPLETE:
            # A passed activity is complete too
            return state in (COMPLETION_COMPLETE, COMPLETION_COMPLETE_PASS)
        return state == self.e

    def describe(self, strings: StringLookup) -> str:
        key = {
            COMPLETION_INCOMPLETE: "completion_incomplete",
            COMPLETION_COMPLETE: "completion_complete",
            COMPLETION_COMPLETE_PASS: "completion_pass",
            COMPLETION_COMPLETE_FAIL: "completion_fail",
        }[self.e]
        return strings.get_string(key, cm=str(self.cm))


def build_default_registry() -> ConditionRegistry:
    """Registry with the built-in date, grade, group and completion kinds."""
    registry = ConditionRegistry()
    registry.register("date", DateCondition.from_params)
    registry.register("grade", GradeCondition.from_params)
    registry.register("group", GroupCondition.from_params)
    registry.register("completion", CompletionCondition.from_params)
    return registry


default_registry = build_default_registry()
