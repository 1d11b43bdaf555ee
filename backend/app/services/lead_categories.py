"""Sidebar categories: map leads to call-pipeline buckets, count and filter them.

Every member of ``LeadStatus`` is owned by exactly one status bucket below.
``old`` is the complement of the closed enumeration, so it only ever holds
legacy or imported values that the workflow does not know about. The
ownership table is checked at import time.
"""

from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from backend.app.core.time import ensure_utc, utc_now
from backend.app.services.lead_status import KNOWN_STATUSES, LeadStatus

NEW = "new"
OLD = "old"
DNR1 = "dnr1"
DNR2 = "dnr2"
DNR3 = "dnr3"
DNR4 = "dnr4"
CUT_CALL = "cutCall"
CALL_BACK = "callBack"
CALLBACK_CUT = "callbackCut"
FOLLOW_UP_DUE = "followUpDue"
CONVERTED = "converted"
TERMINATED = "terminated"
COMPLETED = "completed"

STATUS_BUCKET: Dict[LeadStatus, str] = {
    LeadStatus.NEW: NEW,
    LeadStatus.DNR1: DNR1,
    LeadStatus.DNR2: DNR2,
    LeadStatus.DNR3: DNR3,
    LeadStatus.DNR4: DNR4,
    LeadStatus.CUT_CALL: CUT_CALL,
    LeadStatus.CALL_BACK: CALL_BACK,
    LeadStatus.CONVERTED: CONVERTED,
    LeadStatus.NOT_INTERESTED: TERMINATED,
    LeadStatus.DENIED: TERMINATED,
}

_unplaced = set(LeadStatus) - set(STATUS_BUCKET)
if _unplaced:
    raise RuntimeError(f"Lead statuses without a category: {sorted(s.value for s in _unplaced)}")

# Grouped variants: one bucket spanning several statuses
GROUPED_BUCKETS: Dict[str, frozenset] = {
    CALLBACK_CUT: frozenset({LeadStatus.CUT_CALL.value, LeadStatus.CALL_BACK.value}),
    COMPLETED: frozenset(
        {LeadStatus.CONVERTED.value, LeadStatus.NOT_INTERESTED.value, LeadStatus.DENIED.value}
    ),
}

# Category sets used by each dashboard
BOE_SIDEBAR = (NEW, OLD, DNR1, DNR2, DNR3, DNR4, CUT_CALL, CALL_BACK, FOLLOW_UP_DUE, CONVERTED)
GROUPED_SIDEBAR = (NEW, OLD, DNR1, DNR2, DNR3, DNR4, CALLBACK_CUT, FOLLOW_UP_DUE, COMPLETED)
TEAM_LEAD_SIDEBAR = (NEW, OLD, DNR1, DNR2, DNR3, DNR4, CALL_BACK, FOLLOW_UP_DUE, CONVERTED, TERMINATED)

LeadPredicate = Callable[[object], bool]


def _statuses_in_bucket(bucket: str) -> frozenset:
    if bucket in GROUPED_BUCKETS:
        return GROUPED_BUCKETS[bucket]
    return frozenset(status.value for status, owner in STATUS_BUCKET.items() if owner == bucket)


def is_followup_due(lead, now: datetime) -> bool:
    """Inclusive boundary: a follow-up due exactly at ``now`` is due, not upcoming."""
    followup_at = ensure_utc(getattr(lead, "next_followup_at", None))
    return followup_at is not None and followup_at <= now


def category_predicate(category: str, now: Optional[datetime] = None) -> LeadPredicate:
    now = ensure_utc(now) or utc_now()
    if category == OLD:
        return lambda lead: lead.status not in KNOWN_STATUSES
    if category == FOLLOW_UP_DUE:
        return lambda lead: is_followup_due(lead, now)
    statuses = _statuses_in_bucket(category)
    if not statuses:
        raise ValueError(f"Unknown lead category: {category}")
    return lambda lead: lead.status in statuses


def get_category_counts(
    leads: Iterable,
    categories: Iterable[str] = BOE_SIDEBAR,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    now = ensure_utc(now) or utc_now()
    lead_list = list(leads)
    counts: Dict[str, int] = {}
    for category in categories:
        matches = category_predicate(category, now)
        counts[category] = sum(1 for lead in lead_list if matches(lead))
    return counts


def filter_leads(leads: Iterable, category: Optional[str], now: Optional[datetime] = None) -> List:
    """Leads in ``category``; no category returns every lead, in input order."""
    lead_list = list(leads)
    if not category:
        return lead_list
    matches = category_predicate(category, now)
    return [lead for lead in lead_list if matches(lead)]
