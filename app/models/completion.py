from datetime import datetime

from pydantic import BaseModel, Field


class CompletionRecord(BaseModel):
    id: str = Field(..., description="Composite key: {userId}_{criteriaId}")
    user_id: str
    course_id: str
    criteria_id: str
    time_completed: datetime | None = Field(
        default=None, description="When the criterion was met; None while incomplete"
    )

    @property
    def is_complete(self) -> bool:
        return self.time_completed is not None


class CompletionRecordCreate(BaseModel):
    user_id: str
    course_id: str
    criteria_id: str
    time_completed: datetime | None = None
