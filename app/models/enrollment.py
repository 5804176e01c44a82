from datetime import datetime

from pydantic import BaseModel, Field


class Enrollment(BaseModel):
    id: str = Field(..., description="Composite key: {userId}_{courseId}")
    user_id: str = Field(..., description="ID of the enrolled user")
    course_id: str = Field(..., description="ID of the course")
    user_name: str = Field(default="", description="User name (denormalized from users)")
    enrolled_at: datetime = Field(default_factory=datetime.today)
