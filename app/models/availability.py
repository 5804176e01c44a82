"""Request and result models for availability checks and completion runs."""

from datetime import datetime

from pydantic import BaseModel, Field


class EvaluationResult(BaseModel):
    satisfied: bool
    explanation: str | None = Field(
        default=None, description="Visible reasons access is blocked, if any"
    )


class AvailabilityCheckRequest(BaseModel):
    availability: str | None = Field(default=None, description="Serialized condition tree")
    user_id: str
    course_id: str


class ReviewRequest(BaseModel):
    criteria_id: str
    user_id: str
    mark: bool = True


class ReviewResponse(BaseModel):
    criteria_id: str
    user_id: str
    complete: bool


class CriterionDetails(BaseModel):
    """Progress details of one criterion for a user, as shown in reports."""

    type: str
    criteria: str
    requirement: str
    status: str


class CriterionError(BaseModel):
    criteria_id: str
    user_id: str | None = None
    error: str


class ReconciliationReport(BaseModel):
    started_at: datetime
    criteria_checked: int = 0
    users_evaluated: int = 0
    completions_marked: int = 0
    already_complete: int = 0
    errors: list[CriterionError] = Field(default_factory=list)
    cancelled: bool = False
