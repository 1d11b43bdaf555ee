"""Team-lead analytics: lead distribution overview and conversion revenue."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_team_lead_or_admin
from backend.app.models.user import User
from backend.app.schemas.analytics import LeadAnalyticsOverview, RevenueAnalytics
from backend.app.services.lead_analytics import build_lead_overview
from backend.app.services.leads import list_leads_for_user
from backend.app.services.revenue_analytics import get_revenue_analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/leads", response_model=LeadAnalyticsOverview)
async def lead_overview(
    team_lead_id: Optional[int] = None,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_team_lead_or_admin),
):
    leads = list_leads_for_user(
        db,
        current_user,
        include_inactive=True,
        team_lead_id=team_lead_id if current_user.role == "admin" else None,
        date_from=date_from,
        date_to=date_to,
    )
    return build_lead_overview(leads)


@router.get("/revenue", response_model=RevenueAnalytics)
async def revenue(
    team_lead_id: Optional[int] = None,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_team_lead_or_admin),
):
    scope = current_user.id if current_user.role == "team_lead" else team_lead_id
    return get_revenue_analytics(db, team_lead_id=scope, date_from=date_from, date_to=date_to)
