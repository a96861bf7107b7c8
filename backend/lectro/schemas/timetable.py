from datetime import date, datetime, time

from pydantic import BaseModel, Field, model_validator


def _ensure_time_order(start_time: time, end_time: time) -> None:
    if end_time <= start_time:
        raise ValueError("end_time must be later than start_time")


class TimetableEntryCreate(BaseModel):
    date: date
    start_time: time
    end_time: time
    subject_id: str = Field(min_length=1, max_length=36)
    hall_id: str = Field(min_length=1, max_length=36)
    lecturer_id: str = Field(min_length=1, max_length=36)

    @model_validator(mode="after")
    def validate_time_window(self) -> "TimetableEntryCreate":
        _ensure_time_order(self.start_time, self.end_time)
        return self


class RecurringScheduleCreate(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    hall_id: str = Field(min_length=1, max_length=36)
    lecturer_id: str = Field(min_length=1, max_length=36)
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    # Monday == 0; defaults to the weekday of start_date.
    weekday: int | None = Field(default=None, ge=0, le=6)

    @model_validator(mode="after")
    def validate_window(self) -> "RecurringScheduleCreate":
        _ensure_time_order(self.start_time, self.end_time)
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class TimetableEntryOut(BaseModel):
    id: str
    date: date
    start_time: time
    end_time: time
    subject_id: str
    hall_id: str
    lecturer_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ScheduleEntryOut(BaseModel):
    timetable_id: str
    date: date
    start_time: time
    end_time: time
    subject_id: str
    subject_code: str
    subject_name: str
    hall_id: str
    hall_name: str
    lecturer_id: str
    lecturer_name: str


class RecurringScheduleOut(BaseModel):
    created: int
    entries: list[TimetableEntryOut]


class RosterStudentOut(BaseModel):
    student_id: str
    name: str
    university_id: str
    batch: str | None = None
