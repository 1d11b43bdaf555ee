"""User schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class BoeRead(BaseModel):
    id: int
    name: str
    email: str
    reports_to_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
