from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from lectro.models.swap_request import SwapStatus


class SwapRequestCreate(BaseModel):
    timetable_id: str = Field(min_length=1, max_length=36)
    target_lecturer_id: str = Field(min_length=1, max_length=36)
    proposed_date: date
    proposed_start_time: time
    proposed_end_time: time
    proposed_hall_id: str = Field(min_length=1, max_length=36)

    @model_validator(mode="after")
    def validate_proposed_window(self) -> "SwapRequestCreate":
        if self.proposed_end_time <= self.proposed_start_time:
            raise ValueError("proposed_end_time must be later than proposed_start_time")
        return self


class SwapRespond(BaseModel):
    status: Literal["accepted", "rejected"]


class SwapRequestOut(BaseModel):
    id: str
    timetable_id: str
    requesting_lecturer_id: str
    target_lecturer_id: str
    proposed_date: date
    proposed_start_time: time
    proposed_end_time: time
    proposed_hall_id: str
    target_status: SwapStatus
    hod_status: SwapStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class SwapSummaryOut(BaseModel):
    swap_id: str
    requesting_lecturer_id: str
    requesting_lecturer: str
    target_lecturer_id: str
    target_lecturer: str
    subject_code: str
    subject_name: str
    original_date: date
    original_start: time
    original_end: time
    proposed_date: date
    proposed_start_time: time
    proposed_end_time: time
    proposed_hall: str
    target_status: SwapStatus
    hod_status: SwapStatus
    created_at: datetime | None = None


class SwapRespondOut(BaseModel):
    success: bool
    message: str
    swap_id: str
    target_status: SwapStatus
    hod_status: SwapStatus
