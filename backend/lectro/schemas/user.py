from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from lectro.models.user import UserRole


class UserBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    university_id: str = Field(min_length=1, max_length=50)
    role: UserRole
    batch: str | None = Field(default=None, max_length=50)
    department: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("university_id")
    @classmethod
    def normalize_university_id(cls, value: str) -> str:
        trimmed = value.strip().upper()
        if not trimmed:
            raise ValueError("University id cannot be empty")
        return trimmed

    @field_validator("batch", "department")
    @classmethod
    def normalize_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class UserCreate(UserBase):
    password: str | None = Field(default=None, min_length=8, max_length=128)

    @model_validator(mode="after")
    def validate_role_specific_fields(self) -> "UserCreate":
        # Batches only group students.
        if self.role != UserRole.student:
            self.batch = None
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserOut(UserBase):
    id: str
    is_active: bool = True
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut
