"""Conversion details persistence. Rules are shared with the client-side validator."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.errors import ValidationError
from backend.app.models.conversion_details import ConversionDetails
from backend.app.models.lead import Lead
from backend.app.schemas.conversion_details import ConversionDetailsIn
from backend.app.services.conversion_validator import validate_conversion_details

logger = logging.getLogger(__name__)


def get_conversion_details(db: Session, lead_id: int) -> Optional[ConversionDetails]:
    return db.query(ConversionDetails).filter(ConversionDetails.lead_id == lead_id).first()


def create_conversion_details(db: Session, lead: Lead, details_in: ConversionDetailsIn) -> ConversionDetails:
    """Insert details for ``lead``. Raises ValueError with a readable reason when the terms are invalid."""
    try:
        payload = validate_conversion_details(
            course_name=details_in.course_name,
            course_fee=details_in.course_fee,
            amount_paid=details_in.amount_paid,
            due_amount=details_in.due_amount,
        )
    except ValidationError as exc:
        raise ValueError(exc.message) from exc

    details = ConversionDetails(lead_id=lead.id, **payload.model_dump())
    db.add(details)
    db.commit()
    db.refresh(details)
    logger.info(
        "Conversion details recorded for lead %s: fee=%s paid=%s due=%s",
        lead.id,
        details.course_fee,
        details.amount_paid,
        details.due_amount,
    )
    return details


def update_conversion_details(db: Session, details: ConversionDetails, details_in: ConversionDetailsIn) -> ConversionDetails:
    """Amend stored terms (e.g. a later payment). Omitted fields keep their stored values;
    an omitted due amount is re-derived from fee and paid."""
    course_name = details_in.course_name if details_in.course_name is not None else details.course_name
    course_fee = details_in.course_fee if details_in.course_fee is not None else details.course_fee
    amount_paid = details_in.amount_paid if details_in.amount_paid is not None else details.amount_paid
    try:
        payload = validate_conversion_details(
            course_name=course_name,
            course_fee=course_fee,
            amount_paid=amount_paid,
            due_amount=details_in.due_amount,
        )
    except ValidationError as exc:
        raise ValueError(exc.message) from exc

    for field, value in payload.model_dump().items():
        setattr(details, field, value)
    db.commit()
    db.refresh(details)
    logger.info(
        "Conversion details amended for lead %s: paid=%s due=%s",
        details.lead_id,
        details.amount_paid,
        details.due_amount,
    )
    return details
