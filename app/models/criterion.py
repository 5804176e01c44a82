from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


CRITERIA_TYPE_AVAILABILITY = "availability"


class Criterion(BaseModel):
    id: str
    course_id: str = Field(..., description="ID of the course this criterion belongs to")
    criteria_type: Literal["availability"] = CRITERIA_TYPE_AVAILABILITY
    availability: str | None = Field(
        default=None, description="Serialized condition tree; None means no restrictions"
    )
    module_instance: str | None = Field(
        default=None, description="Optional activity the criterion is attached to"
    )
    created_at: datetime = Field(default_factory=datetime.today)


class CriterionCreate(BaseModel):
    course_id: str
    availability: str | None = Field(
        default=None, description='Condition tree JSON, e.g. {"op":"&","c":[],"showc":[]}'
    )
    module_instance: str | None = None
