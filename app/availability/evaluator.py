"""Recursive evaluation of condition trees for a user in a course."""

from app.availability.conditions import AvailabilityContext, ConditionRegistry, default_registry
from app.availability.strings import StringLookup, default_strings
from app.models.availability import EvaluationResult
from app.models.condition_tree import ConditionTree, LeafCondition


class AvailabilityEvaluator:
    """Decide whether a condition tree lets a user into a course or activity.

    Args:
        context: Learner data and evaluation time used by the leaf conditions
        registry: Condition kinds to resolve leaves with
        strings: Display text lookup for explanations
    """

    def __init__(
        self,
        context: AvailabilityContext,
        registry: ConditionRegistry | None = None,
        strings: StringLookup | None = None,
    ):
        self.context = context
        self.registry = registry or default_registry
        self.strings = strings or default_strings

    def evaluate(self, tree: ConditionTree, user_id: str, course_id: str) -> EvaluationResult:
        """
        Evaluate a tree for one user.

        Returns:
            EvaluationResult with the visible blocking reasons when not satisfied

        Raises:
            UnknownConditionKindError: If a leaf's type is not registered
            MalformedTreeError: If a leaf's parameters are invalid
        """
        satisfied, reasons = self._evaluate(tree, user_id, course_id)
        if satisfied:
            return EvaluationResult(satisfied=True)
        return EvaluationResult(satisfied=False, explanation=" and ".join(reasons) or None)

    def is_available(self, tree: ConditionTree, user_id: str, course_id: str) -> bool:
        return self.evaluate(tree, user_id, course_id).satisfied

    def describe(self, tree: ConditionTree) -> str:
        return describe_tree(tree, self.registry, self.strings)

    def _evaluate(
        self, node: ConditionTree | LeafCondition, user_id: str, course_id: str
    ) -> tuple[bool, list[str]]:
        if isinstance(node, LeafCondition):
            condition = self.registry.build(node)
            if condition.is_satisfied(user_id, course_id, self.context):
                return True, []
            return False, [condition.describe(self.strings)]

        if node.op == "&":
            return self._evaluate_and(node, user_id, course_id)
        return self._evaluate_or(node, user_id, course_id)

    def _evaluate_and(
        self, node: ConditionTree, user_id: str, course_id: str
    ) -> tuple[bool, list[str]]:
        satisfied = True
        reasons: list[str] = []
        for index, child in enumerate(node.c):
            visible = node.is_visible(index)
            if not satisfied and not visible:
                # Result already decided; hidden children add no explanation
                continue

            child_ok, child_reasons = self._evaluate(child, user_id, course_id)
            if not child_ok:
                satisfied = False
                if visible:
                    reasons.extend(_group(child_reasons))
        return satisfied, ([] if satisfied else reasons)

    def _evaluate_or(
        self, node: ConditionTree, user_id: str, course_id: str
    ) -> tuple[bool, list[str]]:
        reasons: list[str] = []
        for index, child in enumerate(node.c):
            child_ok, child_reasons = self._evaluate(child, user_id, course_id)
            if child_ok:
                return True, []
            if node.is_visible(index):
                reasons.extend(_group(child_reasons))
        return False, reasons


def describe_tree(
    tree: ConditionTree,
    registry: ConditionRegistry | None = None,
    strings: StringLookup | None = None,
) -> str:
    """Full description of every condition in a tree, hidden ones included."""
    registry = registry or default_registry
    strings = strings or default_strings
    if tree.is_empty():
        return strings.get_string("noconditions")
    return _describe(tree, registry, strings)


def _describe(
    node: ConditionTree | LeafCondition, registry: ConditionRegistry, strings: StringLookup
) -> str:
    if isinstance(node, LeafCondition):
        return registry.build(node).describe(strings)

    parts = []
    for child in node.c:
        if isinstance(child, ConditionTree) and child.is_empty():
            continue
        text = _describe(child, registry, strings)
        if isinstance(child, ConditionTree) and len(child.c) > 1:
            text = f"({text})"
        parts.append(text)
    if not parts:
        return strings.get_string("noconditions")
    joiner = " and " if node.op == "&" else " or "
    return joiner.join(parts)


def _group(reasons: list[str]) -> list[str]:
    if len(reasons) > 1:
        return [f"({' and '.join(reasons)})"]
    return reasons
