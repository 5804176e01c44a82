"""Periodic job that marks users complete once their availability tree passes.

Runs must not overlap; the scheduler (or the reconcile route's lock) is
responsible for that. Each user is handled independently, so a run that is
cancelled or fails part-way can simply be run again.
"""

from datetime import datetime, timedelta
import logging
import threading

from app.availability.conditions import AvailabilityContext, ConditionRegistry, default_registry
from app.availability.evaluator import AvailabilityEvaluator
from app.availability.exceptions import (
    MalformedTreeError,
    StoreWriteConflict,
    UnknownConditionKindError,
)
from app.availability.tree import parse
from app.core.config import settings
from app.models.availability import CriterionError, ReconciliationReport
from app.models.completion import CompletionRecordCreate
from app.models.criterion import Criterion
from app.services.completion_service import CompletionService
from app.services.course_service import CourseService
from app.services.criteria_service import CriteriaService
from app.services.enrollment_service import EnrollmentService
from app.services.learner_data_service import LearnerDataService


logger = logging.getLogger(__name__)


class CompletionReconciler:
    def __init__(
        self,
        db,
        criteria_service=None,
        course_service=None,
        enrollment_service=None,
        completion_service=None,
        learner_data=None,
        registry: ConditionRegistry | None = None,
        backdate_seconds: int | None = None,
    ):
        self.db = db
        self.criteria_service = criteria_service or CriteriaService(db)
        self.course_service = course_service or CourseService(db)
        self.enrollment_service = enrollment_service or EnrollmentService(db)
        self.completion_service = completion_service or CompletionService(db)
        self.learner_data = learner_data or LearnerDataService(db)
        self.registry = registry or default_registry
        if backdate_seconds is None:
            backdate_seconds = settings.COMPLETION_BACKDATE_SECONDS
        self.backdate = timedelta(seconds=backdate_seconds)

    def run_once(
        self, current_time: datetime, cancel_event: threading.Event | None = None
    ) -> ReconciliationReport:
        """
        Evaluate every enrolled user without a completion record and mark
        those whose availability tree is satisfied.

        Args:
            current_time: Evaluation time; completions are backdated from it
            cancel_event: When set, the run stops before the next user

        Returns:
            ReconciliationReport with counts and per-item errors
        """
        report = ReconciliationReport(started_at=current_time)
        evaluator = AvailabilityEvaluator(
            AvailabilityContext(self.learner_data, now=current_time), registry=self.registry
        )
        time_completed = current_time - self.backdate

        enabled_courses = self.course_service.get_completion_enabled_course_ids()
        criteria = [
            c for c in self.criteria_service.fetch_criteria() if c.course_id in enabled_courses
        ]
        logger.info(f"Reconciling {len(criteria)} availability criteria")

        for criterion in criteria:
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                break
            report.criteria_checked += 1
            self._reconcile_criterion(criterion, evaluator, time_completed, report, cancel_event)
            if report.cancelled:
                break

        if report.cancelled:
            logger.warning("Completion reconciliation cancelled before finishing")
        logger.info(
            f"Completion reconciliation finished: criteria={report.criteria_checked}, "
            f"evaluated={report.users_evaluated}, marked={report.completions_marked}, "
            f"errors={len(report.errors)}"
        )
        return report

    def _reconcile_criterion(
        self,
        criterion: Criterion,
        evaluator: AvailabilityEvaluator,
        time_completed: datetime,
        report: ReconciliationReport,
        cancel_event: threading.Event | None,
    ) -> None:
        try:
            tree = parse(criterion.availability)
            # Bad leaf parameters fail the whole criterion; unknown types fail per user
            self.registry.validate(tree, skip_unknown=True)
            users = self.enrollment_service.enrolled_users(criterion.course_id)
        except MalformedTreeError as e:
            logger.error(f"Skipping criterion '{criterion.id}': malformed condition tree: {e}")
            report.errors.append(CriterionError(criteria_id=criterion.id, error=str(e)))
            return
        except Exception as e:
            logger.exception(f"Skipping criterion '{criterion.id}': {e}")
            report.errors.append(CriterionError(criteria_id=criterion.id, error=str(e)))
            return

        for user in users:
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                return

            try:
                if self.completion_service.find_completion(user.id, criterion.id) is not None:
                    continue

                report.users_evaluated += 1
                if not evaluator.is_available(tree, user.id, criterion.course_id):
                    continue

                self.completion_service.insert_completion(
                    CompletionRecordCreate(
                        user_id=user.id,
                        course_id=criterion.course_id,
                        criteria_id=criterion.id,
                        time_completed=time_completed,
                    )
                )
                report.completions_marked += 1
            except StoreWriteConflict:
                report.already_complete += 1
            except (UnknownConditionKindError, MalformedTreeError) as e:
                logger.warning(
                    f"Skipping user '{user.id}' for criterion '{criterion.id}': {e}"
                )
                report.errors.append(
                    CriterionError(criteria_id=criterion.id, user_id=user.id, error=str(e))
                )
            except Exception as e:
                logger.exception(
                    f"Failed to reconcile user '{user.id}' for criterion '{criterion.id}': {e}"
                )
                report.errors.append(
                    CriterionError(criteria_id=criterion.id, user_id=user.id, error=str(e))
                )
