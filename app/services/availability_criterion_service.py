from datetime import datetime, timedelta, timezone
import logging

from app.availability.conditions import AvailabilityContext, ConditionRegistry
from app.availability.evaluator import AvailabilityEvaluator
from app.availability.strings import StringLookup
from app.availability.tree import parse
from app.core.config import settings
from app.models.availability import CriterionDetails, EvaluationResult
from app.models.criterion import Criterion
from app.services.completion_service import CompletionService
from app.services.criteria_service import CriteriaService
from app.services.criterion_report import CriterionReport
from app.services.learner_data_service import LearnerDataService


logger = logging.getLogger(__name__)


class AvailabilityCriterionService:
    """Per-user checks of availability criteria."""

    def __init__(
        self,
        db,
        criteria_service=None,
        completion_service=None,
        learner_data=None,
        registry: ConditionRegistry | None = None,
        strings: StringLookup | None = None,
    ):
        self.db = db
        self.criteria_service = criteria_service or CriteriaService(db)
        self.completion_service = completion_service or CompletionService(db)
        self.learner_data = learner_data or LearnerDataService(db)
        self.registry = registry
        self.strings = strings
        self.report = CriterionReport(strings=strings, registry=registry)

    def _evaluator(self, now: datetime | None = None) -> AvailabilityEvaluator:
        context = AvailabilityContext(self.learner_data, now=now)
        return AvailabilityEvaluator(context, registry=self.registry, strings=self.strings)

    def check(
        self, availability: str | None, user_id: str, course_id: str, now: datetime | None = None
    ) -> EvaluationResult:
        """Evaluate a serialized tree for one user."""
        tree = parse(availability)
        return self._evaluator(now).evaluate(tree, user_id, course_id)

    def review(
        self, criterion: Criterion, user_id: str, mark: bool = True, now: datetime | None = None
    ) -> bool:
        """
        Decide whether a user has completed the criterion.

        Args:
            criterion: The availability criterion to review
            user_id: The user to check
            mark: Store a completion record when the user passes

        Returns:
            True when the user is (or already was) complete
        """
        existing = self.completion_service.find_completion(user_id, criterion.id)
        if existing is not None and existing.is_complete:
            return True

        now = now or datetime.now(timezone.utc)
        result = self.check(criterion.availability, user_id, criterion.course_id, now=now)
        if not result.satisfied:
            return False

        if mark:
            backdated = now - timedelta(seconds=settings.COMPLETION_BACKDATE_SECONDS)
            self.completion_service.mark_complete(
                user_id, criterion.course_id, criterion.id, backdated
            )
            logger.info(f"User '{user_id}' completed criterion '{criterion.id}'")
        return True

    def get_details(self, criteria_id: str, user_id: str) -> CriterionDetails:
        criterion = self.criteria_service.get_criterion(criteria_id)
        completion = self.completion_service.find_completion(user_id, criteria_id)

        explanation = None
        if completion is None or not completion.is_complete:
            result = self.check(criterion.availability, user_id, criterion.course_id)
            explanation = result.explanation
        return self.report.get_details(criterion, completion, explanation)
