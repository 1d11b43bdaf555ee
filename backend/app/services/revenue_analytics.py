"""Revenue reporting from converted leads' conversion details."""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import Session

from backend.app.core.time import day_bounds, ensure_utc
from backend.app.models.conversion_details import ConversionDetails
from backend.app.models.lead import Lead
from backend.app.services.lead_status import LeadStatus
from backend.app.services.leads import team_scope_clause

UNNAMED_COURSE = "(Unnamed)"
CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


def get_revenue_analytics(
    db: Session,
    *,
    team_lead_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Dict:
    """Totals and per-course rows cover every converted lead in scope; the
    over-time series honours ``date_from``/``date_to`` on the details' creation day."""
    query = (
        db.query(ConversionDetails)
        .join(Lead, Lead.id == ConversionDetails.lead_id)
        .filter(Lead.status == LeadStatus.CONVERTED.value)
    )
    if team_lead_id is not None:
        query = query.filter(team_scope_clause(team_lead_id))
    rows = query.all()

    total_revenue = sum((_money(r.amount_paid) for r in rows), Decimal("0.00"))
    total_due = sum((_money(r.due_amount) for r in rows), Decimal("0.00"))
    total_units = len(rows)
    avg_revenue = (total_revenue / total_units).quantize(CENTS) if total_units else Decimal("0.00")

    by_course: Dict[str, dict] = OrderedDict()
    for r in rows:
        name = r.course_name or UNNAMED_COURSE
        entry = by_course.setdefault(
            name, {"units": 0, "total_revenue": Decimal("0.00"), "fees": Decimal("0.00"), "total_due": Decimal("0.00")}
        )
        entry["units"] += 1
        entry["total_revenue"] += _money(r.amount_paid)
        entry["fees"] += _money(r.course_fee)
        entry["total_due"] += _money(r.due_amount)

    revenue_by_course = [
        {
            "course_name": name,
            "units": entry["units"],
            "total_revenue": entry["total_revenue"],
            "avg_fee": (entry["fees"] / entry["units"]).quantize(CENTS),
            "total_due": entry["total_due"],
        }
        for name, entry in by_course.items()
    ]
    revenue_by_course.sort(key=lambda row: row["total_revenue"], reverse=True)

    lower, upper = day_bounds(date_from, date_to)
    per_day: Dict[str, Decimal] = {}
    for r in rows:
        created_at = ensure_utc(r.created_at)
        if lower is not None and created_at < lower:
            continue
        if upper is not None and created_at >= upper:
            continue
        day = created_at.date().isoformat()
        per_day[day] = per_day.get(day, Decimal("0.00")) + _money(r.amount_paid)

    return {
        "total_revenue": total_revenue,
        "total_units": total_units,
        "avg_revenue_per_unit": avg_revenue,
        "total_due": total_due,
        "revenue_by_course": revenue_by_course,
        "revenue_over_time": [{"date": day, "revenue": per_day[day]} for day in sorted(per_day)],
        "date_from": date_from.isoformat() if date_from else None,
        "date_to": date_to.isoformat() if date_to else None,
    }
