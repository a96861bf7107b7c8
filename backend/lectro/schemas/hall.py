from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class LectureHallCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=5000)
    has_projector: bool = True

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Hall name cannot be empty")
        return trimmed


class LectureHallOut(BaseModel):
    id: str
    name: str
    capacity: int
    has_projector: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
