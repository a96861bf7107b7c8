from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class SubjectCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Subject code cannot be empty")
        return code

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return value.strip()


class SubjectOut(BaseModel):
    id: str
    code: str
    name: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class EnrollmentCreate(BaseModel):
    student_ids: list[str] = Field(min_length=1, max_length=1000)


class EnrollmentOut(BaseModel):
    subject_id: str
    enrolled: list[str]
    already_enrolled: int
