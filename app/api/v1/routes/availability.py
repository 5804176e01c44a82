"""Availability check endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.availability.exceptions import AvailabilityError
from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.availability import AvailabilityCheckRequest, EvaluationResult
from app.models.user import User
from app.services.availability_criterion_service import AvailabilityCriterionService

router = APIRouter()


@router.post("/evaluate", response_model=EvaluationResult)
async def evaluate_availability(
    request: AvailabilityCheckRequest,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Evaluate a condition tree for a user in a course.

    Returns:
        EvaluationResult with the visible blocking reasons

    Raises:
        422: Tree is malformed or uses an unknown condition type
    """
    service = AvailabilityCriterionService(db)
    try:
        return service.check(request.availability, request.user_id, request.course_id)
    except AvailabilityError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
