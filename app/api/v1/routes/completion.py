"""Completion endpoints: single-user review and the scheduled reconciliation run."""

from datetime import datetime, timezone
import logging
import threading

from fastapi import APIRouter, Depends, HTTPException, status

from app.availability.exceptions import AvailabilityError
from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.availability import ReconciliationReport, ReviewRequest, ReviewResponse
from app.models.user import User
from app.services.availability_criterion_service import AvailabilityCriterionService
from app.services.completion_reconciler import CompletionReconciler
from app.services.criteria_service import CriteriaService

logger = logging.getLogger(__name__)

router = APIRouter()

# Only one reconciliation run per process at a time
_reconcile_lock = threading.Lock()


@router.post("/review", response_model=ReviewResponse)
async def review_completion(
    request: ReviewRequest,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Review one user against a criterion, marking completion if requested.

    Raises:
        404: Criterion not found
        422: Stored tree is malformed or uses an unknown condition type
    """
    criterion = CriteriaService(db).get_criterion(request.criteria_id)
    service = AvailabilityCriterionService(db)
    try:
        complete = service.review(criterion, request.user_id, mark=request.mark)
    except AvailabilityError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return ReviewResponse(
        criteria_id=request.criteria_id, user_id=request.user_id, complete=complete
    )


@router.post("/reconcile", response_model=ReconciliationReport)
def reconcile_completions(
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Run the completion reconciliation job once.

    Raises:
        409: A run is already in progress
    """
    if not _reconcile_lock.acquire(blocking=False):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Completion reconciliation is already running.",
        )

    try:
        logger.info(f"Completion reconciliation started by user '{current_user.id}'")
        reconciler = CompletionReconciler(db)
        return reconciler.run_once(datetime.now(timezone.utc))
    finally:
        _reconcile_lock.release()
