"""Client-side gate for status changes.

Moving a lead to Converted is a two-write sequence against the API:
conversion details first, then the status. The guard validates the details
locally, skips the details write when a previous attempt already committed
them, and reports a status-write failure after a committed details write as
``PendingConversionError`` so the caller resumes with the status write only.
"""

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from backend.app.core.errors import PendingConversionError, RemoteError, TransitionBlocked
from backend.app.schemas.conversion_details import ConversionDetailsRead
from backend.app.schemas.lead import LeadRead
from backend.app.services.conversion_validator import validate_conversion_details
from backend.app.services.lead_status import LeadStatus, is_terminal
from backend.app.services.leads_api_client import LeadsApiClient

logger = logging.getLogger(__name__)

CONVERTED = LeadStatus.CONVERTED.value
DETAIL_FIELDS = ("course_name", "course_fee", "amount_paid", "due_amount")

DetailsInput = Union[Mapping[str, Any], BaseModel]


def _details_fields(details: DetailsInput) -> dict:
    raw = details.model_dump() if isinstance(details, BaseModel) else dict(details)
    return {field: raw.get(field) for field in DETAIL_FIELDS}


class StatusTransitionGuard:
    def __init__(self, client: LeadsApiClient):
        self.client = client
        self._statuses: Optional[list[str]] = None

    def statuses(self, refresh: bool = False) -> list[str]:
        if self._statuses is None or refresh:
            self._statuses = self.client.get_statuses()
        return self._statuses

    def change_status(
        self,
        lead: LeadRead,
        target: str,
        details: Optional[DetailsInput] = None,
        known_course_count: int = 0,
    ) -> LeadRead:
        """Move ``lead`` to ``target``.

        Raises ``TransitionBlocked`` for terminal leads, unknown targets and Converted without
        details, ``ValidationError`` for bad details (nothing is sent), and
        ``RemoteError``/``PendingConversionError`` for API failures.
        """
        if target == lead.status:
            return lead
        if is_terminal(lead.status):
            logger.warning("Lead %s: %s is terminal, cannot move to %r", lead.id, lead.status, target)
            raise TransitionBlocked(lead.id, target, "Lead is in a terminal status")
        if target not in self.statuses():
            logger.warning("Lead %s: unknown status %r", lead.id, target)
            raise TransitionBlocked(lead.id, target, "Unknown status")
        if target != CONVERTED:
            return self.client.update_status(lead.id, target)

        if lead.conversion_pending:
            logger.info("Lead %s already has conversion details; resuming status write", lead.id)
            return self.resume_conversion(lead.id)
        if details is None:
            logger.warning("Lead %s: conversion details required before Converted", lead.id)
            raise TransitionBlocked(lead.id, target, "Conversion details required")

        payload = validate_conversion_details(**_details_fields(details), known_course_count=known_course_count)
        try:
            saved = self.client.create_conversion_details(lead.id, payload)
        except RemoteError as exc:
            if exc.status_code != 409:
                raise
            # Details committed by an earlier attempt; finish with the status write only
            logger.info("Lead %s already has conversion details; resuming status write", lead.id)
            return self.resume_conversion(lead.id)
        return self._write_converted(lead.id, saved)

    def resume_conversion(self, lead_id: int) -> LeadRead:
        """Finish an interrupted conversion by issuing only the status write."""
        saved = self.client.get_conversion_details(lead_id)
        if saved is None:
            logger.warning("Lead %s: nothing to resume, no conversion details recorded", lead_id)
            raise TransitionBlocked(lead_id, CONVERTED, "Conversion details required")
        return self._write_converted(lead_id, saved)

    def amend_payment(
        self,
        lead_id: int,
        course_name: Any = None,
        course_fee: Any = None,
        amount_paid: Any = None,
        due_amount: Any = None,
        known_course_count: int = 0,
    ) -> ConversionDetailsRead:
        """Update a converted lead's payment terms.

        Omitted name, fee and paid keep their stored values; an omitted due
        amount is recomputed from fee and paid.
        """
        if course_name is None or course_fee is None or amount_paid is None:
            stored = self.client.get_conversion_details(lead_id)
            if stored is not None:
                course_name = stored.course_name if course_name is None else course_name
                course_fee = stored.course_fee if course_fee is None else course_fee
                amount_paid = stored.amount_paid if amount_paid is None else amount_paid
        payload = validate_conversion_details(
            course_name=course_name,
            course_fee=course_fee,
            amount_paid=amount_paid,
            due_amount=due_amount,
            known_course_count=known_course_count,
        )
        return self.client.update_conversion_details(lead_id, payload)

    def _write_converted(self, lead_id: int, saved: ConversionDetailsRead) -> LeadRead:
        try:
            return self.client.update_status(lead_id, CONVERTED)
        except RemoteError as exc:
            logger.error("Lead %s: details saved but status write failed: %s", lead_id, exc)
            raise PendingConversionError(lead_id, saved, exc) from exc
