"""Conversion details schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConversionDetailsIn(BaseModel):
    """Request body for create/update; every field optional so rules can report what is missing."""

    course_name: Optional[str] = None
    course_fee: Optional[Decimal] = None
    amount_paid: Optional[Decimal] = None
    due_amount: Optional[Decimal] = None


class ConversionDetailsPayload(BaseModel):
    """Normalized, validated conversion terms."""

    course_name: Optional[str] = None
    course_fee: Decimal
    amount_paid: Decimal
    due_amount: Decimal


class ConversionDetailsRead(ConversionDetailsPayload):
    id: int
    lead_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
