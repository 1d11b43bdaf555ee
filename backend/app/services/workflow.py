"""Workflow rules for status changes: what is allowed, and what else changes with it."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now
from backend.app.services.lead_status import (
    CALLBACK_STATUSES,
    ENROLLED_PIPELINE,
    TERMINATED_STATUSES,
    LeadStatus,
    is_active_status,
    is_known_status,
)

# Highest retry_count from which each DNR stage may still be entered
DNR_RETRY_LIMITS = {
    LeadStatus.DNR1.value: 1,
    LeadStatus.DNR2.value: 2,
    LeadStatus.DNR3.value: 3,
}


@dataclass
class TransitionCheck:
    allowed: bool
    reason: Optional[str] = None
    # HTTP status the API layer should answer with when not allowed
    status_code: int = 400


def validate_transition(
    lead,
    new_status: str,
    *,
    is_team_lead: bool,
    has_conversion_details: bool,
) -> TransitionCheck:
    """Check a status change against the workflow. Same-status requests are not checked here."""
    if not is_known_status(new_status):
        return TransitionCheck(False, f"Unknown status: {new_status}")
    if not lead.is_active:
        return TransitionCheck(False, "Cannot update inactive lead")
    if not is_team_lead and lead.assigned_boe_id is None:
        return TransitionCheck(False, "Lead is not assigned")
    if lead.status == LeadStatus.NEW.value and new_status == LeadStatus.DNR4.value:
        return TransitionCheck(False, "Cannot skip from NEW to DNR4")
    limit = DNR_RETRY_LIMITS.get(new_status)
    if limit is not None and (lead.retry_count or 0) >= limit:
        return TransitionCheck(False, f"Retry limit for {new_status}")
    if new_status == LeadStatus.CONVERTED.value and not has_conversion_details:
        return TransitionCheck(False, "Conversion details required before marking as Converted", 409)
    return TransitionCheck(True)


def next_followup_date(now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) + timedelta(hours=get_settings().followup_delay_hours)


def get_updates_for_new_status(lead, new_status: str, now: Optional[datetime] = None) -> dict:
    """Field updates applied together with ``status``; ``is_active`` always follows the status."""
    updates = {"status": new_status, "is_active": is_active_status(new_status)}
    retry_count = lead.retry_count or 0
    if new_status in DNR_RETRY_LIMITS:
        updates["retry_count"] = DNR_RETRY_LIMITS[new_status]
        updates["next_followup_at"] = next_followup_date(now)
    elif new_status == LeadStatus.DNR4.value:
        updates["next_followup_at"] = next_followup_date(now)
    elif new_status in CALLBACK_STATUSES:
        updates["retry_count"] = retry_count + 1
        updates["next_followup_at"] = next_followup_date(now)
    elif new_status in TERMINATED_STATUSES:
        updates["next_followup_at"] = None
    elif new_status == LeadStatus.CONVERTED.value:
        updates["pipeline"] = ENROLLED_PIPELINE
        updates["next_followup_at"] = None
    return updates
