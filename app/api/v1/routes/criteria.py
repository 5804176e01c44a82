"""Criterion endpoints for configuring availability-based completion."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.availability.exceptions import AvailabilityError
from app.dependencies.auth import get_current_user
from app.initializers.firestore import get_db
from app.models.availability import CriterionDetails
from app.models.criterion import Criterion, CriterionCreate
from app.models.user import User
from app.services.availability_criterion_service import AvailabilityCriterionService
from app.services.criteria_service import CriteriaService

router = APIRouter()


@router.post("", response_model=Criterion, status_code=status.HTTP_201_CREATED)
async def create_criterion(
    criterion_data: CriterionCreate,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create an availability criterion for a course.

    Raises:
        400: Tree has no conditions
        422: Tree is malformed or uses an unknown condition type
    """
    criteria_service = CriteriaService(db)
    try:
        return criteria_service.create_criterion(criterion_data)
    except AvailabilityError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("", response_model=list[Criterion])
async def list_criteria(
    course_id: str | None = None,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    criteria_service = CriteriaService(db)
    return criteria_service.fetch_criteria(course_id)


@router.get("/{criteria_id}", response_model=Criterion)
async def get_criterion(
    criteria_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a criterion by ID.

    Raises:
        404: Criterion not found
    """
    criteria_service = CriteriaService(db)
    return criteria_service.get_criterion(criteria_id)


@router.get("/{criteria_id}/details/{user_id}", response_model=CriterionDetails)
async def get_criterion_details(
    criteria_id: str,
    user_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a user's progress details on a criterion for completion reports.

    Raises:
        404: Criterion not found
        422: Stored tree is malformed or uses an unknown condition type
    """
    service = AvailabilityCriterionService(db)
    try:
        return service.get_details(criteria_id, user_id)
    except AvailabilityError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.delete("/course/{course_id}")
async def delete_course_criteria(
    course_id: str,
    db=Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove a course's availability criteria and their completion records."""
    criteria_service = CriteriaService(db)
    return criteria_service.delete_criteria_for_course(course_id)
