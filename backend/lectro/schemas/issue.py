from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from lectro.models.equipment_issue import IssueStatus


class IssueCreate(BaseModel):
    hall_id: str = Field(min_length=1, max_length=36)
    equipment_type: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=5, max_length=5000)

    @field_validator("equipment_type", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Value cannot be blank")
        return trimmed


class IssueStatusUpdate(BaseModel):
    status: IssueStatus


class IssueOut(BaseModel):
    id: str
    hall_id: str
    reported_by_id: str
    equipment_type: str
    description: str
    status: IssueStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class IssueListItemOut(IssueOut):
    hall: str
    reporter: str
