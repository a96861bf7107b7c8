from pydantic import BaseModel, Field


class AttendanceMark(BaseModel):
    student_id: str = Field(min_length=1, max_length=36)
    is_present: bool


class AttendanceSubmit(BaseModel):
    attendance_records: list[AttendanceMark] = Field(min_length=1, max_length=1000)


class AttendanceSubmitOut(BaseModel):
    success: bool
    message: str
    recorded: int


class SubjectAttendanceOut(BaseModel):
    subject_code: str
    subject_name: str
    total_classes: int
    attended_classes: int
    percentage: int
