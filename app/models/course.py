from pydantic import BaseModel, Field


class Course(BaseModel):
    id: str
    full_name: str = ""
    enable_completion: bool = Field(
        default=False, description="Whether completion tracking is enabled for the course"
    )
