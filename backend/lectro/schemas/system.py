from pydantic import BaseModel


class LecturerOption(BaseModel):
    id: str
    name: str
    university_id: str

    model_config = {"from_attributes": True}


class HallOption(BaseModel):
    id: str
    name: str
    capacity: int

    model_config = {"from_attributes": True}


class SubjectOption(BaseModel):
    id: str
    code: str
    name: str

    model_config = {"from_attributes": True}


class SystemDataOut(BaseModel):
    lecturers: list[LecturerOption]
    halls: list[HallOption]
    subjects: list[SubjectOption]
