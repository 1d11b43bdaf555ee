"""Error taxonomy shared by the lead workflows and the API client."""

from typing import Any, Optional


class LeadDeskError(Exception):
    """Base class for errors raised by LeadDesk services."""


class ValidationError(LeadDeskError):
    """Client-detectable input problem; blocks submission and never reaches the network."""

    COURSE_REQUIRED = "CourseRequired"
    AT_LEAST_ONE_FIELD_REQUIRED = "AtLeastOneFieldRequired"
    FEE_REQUIRED = "FeeRequired"
    FEE_NEGATIVE = "FeeNegative"
    PAID_NEGATIVE = "PaidNegative"
    PAID_EXCEEDS_FEE = "PaidExceedsFee"
    DUE_NEGATIVE = "DueNegative"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class TransitionBlocked(LeadDeskError):
    """The target status needs a precondition that is not met yet."""

    def __init__(self, lead_id: int, target: str, reason: str):
        super().__init__(f"Lead {lead_id}: cannot move to {target}: {reason}")
        self.lead_id = lead_id
        self.target = target
        self.reason = reason


class PartialBatchFailure(LeadDeskError):
    """Some, but not all, items of a bulk operation were applied."""

    def __init__(self, assigned: int, failed: int, total: int):
        super().__init__(f"{failed} of {total} leads could not be assigned ({assigned} assigned)")
        self.assigned = assigned
        self.failed = failed
        self.total = total


class RemoteError(LeadDeskError):
    """Backend or transport failure, surfaced verbatim. Never retried automatically."""

    def __init__(self, status_code: Optional[int], detail: str):
        prefix = f"HTTP {status_code}: " if status_code is not None else "Network error: "
        super().__init__(prefix + detail)
        self.status_code = status_code
        self.detail = detail


class PendingConversionError(RemoteError):
    """Conversion details were committed but the status write to Converted failed.

    The lead keeps its previous status. Resuming only the status write is safe;
    the financial details must not be submitted again.
    """

    def __init__(self, lead_id: int, details: Any, cause: RemoteError):
        super().__init__(
            cause.status_code,
            f"Conversion details saved for lead {lead_id} but status update failed: {cause.detail}. "
            "Retry the status update only.",
        )
        self.lead_id = lead_id
        self.details = details
        self.cause = cause
