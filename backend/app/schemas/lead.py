"""Lead schemas: the typed record exchanged at every JSON boundary."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


def _as_utc(v):
    if v is None:
        return v
    if isinstance(v, str) and v.endswith("Z"):
        return v[:-1] + "+00:00"
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class LeadCreate(BaseModel):
    """Schema for BOE manual lead creation."""

    name: str
    phone: str
    email: Optional[EmailStr] = None
    college: Optional[str] = None
    certification: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LeadRead(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    college: Optional[str] = None
    certification: Optional[str] = None
    source_id: Optional[int] = None
    status: str
    retry_count: int = 0
    assigned_boe_id: Optional[int] = None
    assigned_boe_name: Optional[str] = None
    pipeline: Optional[str] = None
    next_followup_at: Optional[datetime] = None
    is_active: bool = True
    conversion_due_amount: Optional[Decimal] = None
    conversion_pending: bool = False
    created_at: datetime

    @field_validator("next_followup_at", "created_at", mode="before")
    @classmethod
    def ensure_timezone(cls, v):
        return _as_utc(v)

    model_config = ConfigDict(from_attributes=True)


class LeadStatusUpdate(BaseModel):
    status: Optional[str] = None


class LeadStatusHistoryRead(BaseModel):
    id: int
    lead_id: int
    updated_by: Optional[int] = None
    old_status: Optional[str] = None
    new_status: str
    created_at: datetime

    @field_validator("created_at", mode="before")
    @classmethod
    def ensure_timezone(cls, v):
        return _as_utc(v)

    model_config = ConfigDict(from_attributes=True)
