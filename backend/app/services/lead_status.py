"""Closed call-status enumeration and the status groups derived from it."""

from enum import Enum


class LeadStatus(str, Enum):
    NEW = "NEW"
    DNR1 = "DNR1"
    DNR2 = "DNR2"
    DNR3 = "DNR3"
    DNR4 = "DNR4"
    CUT_CALL = "Cut Call"
    CALL_BACK = "Call Back"
    NOT_INTERESTED = "Not Interested"
    DENIED = "Denied"
    CONVERTED = "Converted"


# Order served by GET /leads/statuses
ALL_STATUSES = [status.value for status in LeadStatus]
KNOWN_STATUSES = frozenset(ALL_STATUSES)

CALLBACK_STATUSES = (LeadStatus.CUT_CALL.value, LeadStatus.CALL_BACK.value)
TERMINATED_STATUSES = (LeadStatus.NOT_INTERESTED.value, LeadStatus.DENIED.value)
TERMINAL_STATUSES = frozenset(TERMINATED_STATUSES + (LeadStatus.CONVERTED.value,))

ENROLLED_PIPELINE = "ENROLLED"
DEFAULT_PIPELINE = "LEADS"


def is_known_status(status: str | None) -> bool:
    return status in KNOWN_STATUSES


def is_terminal(status: str | None) -> bool:
    return status in TERMINAL_STATUSES


def is_active_status(status: str | None) -> bool:
    """A lead is active exactly while its status is not terminal."""
    return not is_terminal(status)
