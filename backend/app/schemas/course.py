"""Course schemas."""

from pydantic import BaseModel, ConfigDict


class CourseCreate(BaseModel):
    name: str


class CourseRead(BaseModel):
    id: int
    team_lead_id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
