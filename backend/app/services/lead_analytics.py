"""Lead analytics reducers.

Every function takes an in-memory lead collection (ORM rows or ``LeadRead``
records, already filtered by date range and team) and returns summary rows.
Inputs are never mutated; an empty collection yields zero counts and zero
percentages.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from backend.app.core.time import ensure_utc, utc_now
from backend.app.schemas.analytics import (
    AgentBreakdown,
    CountRow,
    DayRow,
    FollowUpSplit,
    LeadAnalyticsOverview,
    LeadsOverTime,
    PipelineRow,
    RetryRow,
)
from backend.app.services.lead_categories import TEAM_LEAD_SIDEBAR, get_category_counts, is_followup_due
from backend.app.services.pipeline_insights import get_pipeline_insight

UNKNOWN = "Unknown"


def percentage(count: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(count / total * 100, 2)


def _count_rows(counter: Counter, total: int) -> List[CountRow]:
    # sorted() is stable, so ties keep first-seen order
    ordered = sorted(counter.items(), key=lambda item: item[1], reverse=True)
    return [CountRow(key=key, count=count, percentage=percentage(count, total)) for key, count in ordered]


def count_by_status(leads: Iterable) -> List[CountRow]:
    lead_list = list(leads)
    counter = Counter(lead.status or UNKNOWN for lead in lead_list)
    return _count_rows(counter, len(lead_list))


def count_by_pipeline(leads: Iterable) -> List[PipelineRow]:
    lead_list = list(leads)
    total = len(lead_list)
    counter = Counter(lead.pipeline or UNKNOWN for lead in lead_list)
    rows = []
    for name, count in counter.items():
        share = percentage(count, total)
        rows.append(PipelineRow(key=name, count=count, percentage=share, insight=get_pipeline_insight(name, share)))
    return rows


def agent_label(lead) -> str:
    return getattr(lead, "assigned_boe_name", None) or f"BOE #{lead.assigned_boe_id}"


def count_by_agent(leads: Iterable) -> AgentBreakdown:
    """Per-BOE counts over assigned leads; percentages are shares of all leads."""
    lead_list = list(leads)
    total = len(lead_list)
    assigned = [lead for lead in lead_list if lead.assigned_boe_id is not None]
    counter = Counter(agent_label(lead) for lead in assigned)
    return AgentBreakdown(
        rows=_count_rows(counter, total),
        assigned_count=len(assigned),
        unassigned_count=total - len(assigned),
    )


def count_by_retry(leads: Iterable) -> List[RetryRow]:
    counter = Counter(int(lead.retry_count or 0) for lead in leads)
    return [RetryRow(retry_count=retry, count=counter[retry]) for retry in sorted(counter)]


def leads_over_time(leads: Iterable) -> LeadsOverTime:
    counter: Counter = Counter()
    for lead in leads:
        created_at = ensure_utc(getattr(lead, "created_at", None))
        if created_at is not None:
            counter[created_at.date().isoformat()] += 1
    days = [DayRow(date=day, count=counter[day]) for day in sorted(counter)]
    total = sum(counter.values())
    avg_per_day = round(total / len(days), 1) if days else 0.0
    peak_day = max(counter.values()) if counter else 0
    return LeadsOverTime(days=days, total=total, avg_per_day=avg_per_day, peak_day=peak_day)


def follow_up_split(leads: Iterable, now: Optional[datetime] = None) -> FollowUpSplit:
    now = ensure_utc(now) or utc_now()
    overdue = 0
    upcoming = 0
    for lead in leads:
        if getattr(lead, "next_followup_at", None) is None:
            continue
        if is_followup_due(lead, now):
            overdue += 1
        else:
            upcoming += 1
    return FollowUpSplit(overdue=overdue, upcoming=upcoming)


def inactive_by_status(leads: Iterable) -> List[CountRow]:
    return count_by_status(lead for lead in leads if not lead.is_active)


def build_lead_overview(leads: Iterable, now: Optional[datetime] = None) -> LeadAnalyticsOverview:
    now = ensure_utc(now) or utc_now()
    lead_list = list(leads)
    return LeadAnalyticsOverview(
        as_of=now.isoformat(),
        total=len(lead_list),
        categories=get_category_counts(lead_list, TEAM_LEAD_SIDEBAR, now),
        by_status=count_by_status(lead_list),
        by_pipeline=count_by_pipeline(lead_list),
        by_agent=count_by_agent(lead_list),
        by_retry=count_by_retry(lead_list),
        over_time=leads_over_time(lead_list),
        follow_up=follow_up_split(lead_list, now),
        inactive_by_status=inactive_by_status(lead_list),
    )
