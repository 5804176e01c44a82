"""Titles and progress details of availability criteria for completion reports."""

from app.availability.conditions import ConditionRegistry
from app.availability.evaluator import describe_tree
from app.availability.strings import StringLookup, default_strings
from app.availability.tree import parse
from app.models.availability import CriterionDetails
from app.models.completion import CompletionRecord
from app.models.criterion import Criterion


class CriterionReport:
    def __init__(
        self, strings: StringLookup | None = None, registry: ConditionRegistry | None = None
    ):
        self.strings = strings or default_strings
        self.registry = registry

    def get_title(self) -> str:
        return self.strings.get_string("accessrestrictions")

    def get_type_title(self) -> str:
        return self.strings.get_string("restrictaccess")

    def get_title_detailed(self, criterion: Criterion) -> str:
        tree = parse(criterion.availability)
        return describe_tree(tree, self.registry, self.strings)

    def get_status(self, completion: CompletionRecord | None) -> str:
        if completion is None or not completion.is_complete:
            return self.strings.get_string("notcomplete")
        return self.strings.get_string(
            "complete_on", date=completion.time_completed.strftime("%d %B %Y")
        )

    def get_details(
        self,
        criterion: Criterion,
        completion: CompletionRecord | None,
        explanation: str | None = None,
    ) -> CriterionDetails:
        """
        Progress details for one user.

        Args:
            criterion: The availability criterion
            completion: The user's completion record, if any
            explanation: Visible reasons the user is still blocked

        Returns:
            CriterionDetails with type, criteria, requirement and status
        """
        detailed = self.get_title_detailed(criterion)
        return CriterionDetails(
            type=self.get_title(),
            criteria=detailed,
            requirement=explanation or detailed,
            status=self.get_status(completion),
        )
