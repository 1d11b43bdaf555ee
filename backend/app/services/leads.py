"""Lead persistence services: role-scoped listing, manual creation, status and assignment writes."""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload

from backend.app.core.time import day_bounds
from backend.app.models.lead import Lead
from backend.app.models.lead_source import LeadSource
from backend.app.models.user import User
from backend.app.schemas.lead import LeadCreate
from backend.app.services.lead_status import DEFAULT_PIPELINE, ENROLLED_PIPELINE, LeadStatus
from backend.app.services.status_history import log_status_change
from backend.app.services.workflow import get_updates_for_new_status

logger = logging.getLogger(__name__)

MAX_LENGTH = {"name": 255, "phone": 50, "email": 255, "college": 255, "certification": 255}


def truncate(value: Optional[str], max_length: int) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text[:max_length]


def _lead_query(db: Session):
    return db.query(Lead).options(joinedload(Lead.assigned_boe), joinedload(Lead.conversion_details))


def get_lead(db: Session, lead_id: int) -> Optional[Lead]:
    return _lead_query(db).filter(Lead.id == lead_id).first()


def team_scope_clause(team_lead_id: int):
    """Leads from the team lead's sources, or held by BOEs reporting to them."""
    own_sources = select(LeadSource.id).where(LeadSource.team_lead_id == team_lead_id)
    own_boes = select(User.id).where(User.reports_to_id == team_lead_id)
    return or_(Lead.source_id.in_(own_sources), Lead.assigned_boe_id.in_(own_boes))


def lead_in_team(db: Session, lead: Lead, team_lead_id: int) -> bool:
    if lead.source_id is None and lead.assigned_boe_id is None:
        return True
    return db.query(Lead.id).filter(Lead.id == lead.id, team_scope_clause(team_lead_id)).first() is not None


def list_leads_for_user(
    db: Session,
    user: User,
    *,
    include_inactive: bool = False,
    team_lead_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Lead]:
    """Admin: all leads (or one team). Team lead: own team. BOE: own assigned leads.

    Outside the admin view, terminal leads are hidden except Converted ones,
    unless a team lead asks for inactive leads.
    """
    query = _lead_query(db)
    visible = or_(Lead.is_active.is_(True), Lead.status == LeadStatus.CONVERTED.value)
    if user.role == "admin":
        if team_lead_id is not None:
            query = query.filter(team_scope_clause(team_lead_id))
    elif user.role == "team_lead":
        query = query.filter(team_scope_clause(user.id))
        if not include_inactive:
            query = query.filter(visible)
    elif user.role == "boe":
        query = query.filter(Lead.assigned_boe_id == user.id, visible)
    else:
        return []

    lower, upper = day_bounds(date_from, date_to)
    if lower is not None:
        query = query.filter(Lead.created_at >= lower)
    if upper is not None:
        query = query.filter(Lead.created_at < upper)
    return query.order_by(Lead.created_at.desc(), Lead.id.desc()).all()


def create_lead_by_boe(db: Session, boe: User, lead_in: LeadCreate) -> Lead:
    lead = Lead(
        source_id=None,
        name=truncate(lead_in.name, MAX_LENGTH["name"]),
        phone=truncate(lead_in.phone, MAX_LENGTH["phone"]),
        email=truncate(lead_in.email, MAX_LENGTH["email"]) or None,
        college=truncate(lead_in.college, MAX_LENGTH["college"]) or None,
        certification=truncate(lead_in.certification, MAX_LENGTH["certification"]) or None,
        status=LeadStatus.NEW.value,
        retry_count=0,
        assigned_boe_id=boe.id,
        is_active=True,
        pipeline=DEFAULT_PIPELINE,
        next_followup_at=None,
    )
    db.add(lead)
    db.commit()
    logger.info("BOE %s created lead %s", boe.id, lead.id)
    return get_lead(db, lead.id)


def apply_status_change(
    db: Session, lead: Lead, new_status: str, updated_by: int, now: Optional[datetime] = None
) -> Lead:
    """Write ``new_status`` and its side effects; the caller has already validated the transition."""
    old_status = lead.status
    for field, value in get_updates_for_new_status(lead, new_status, now).items():
        setattr(lead, field, value)
    log_status_change(db, lead.id, updated_by, old_status, new_status, commit=False)
    db.commit()
    logger.info("Lead %s status %s -> %s by user %s", lead.id, old_status, new_status, updated_by)
    return get_lead(db, lead.id)


def assignment_block_reason(lead: Optional[Lead]) -> Optional[str]:
    if lead is None:
        return "Lead not found"
    if not lead.is_active:
        return "Cannot assign inactive lead"
    if lead.pipeline == ENROLLED_PIPELINE or lead.status == LeadStatus.CONVERTED.value:
        return "Cannot assign converted lead"
    return None


def get_assignable_boe(db: Session, boe_id: Optional[int]) -> Optional[User]:
    if not boe_id:
        return None
    return db.query(User).filter(User.id == boe_id, User.role == "boe", User.is_active.is_(True)).first()


def assign_boe(db: Session, lead: Lead, boe: User, updated_by: int) -> Lead:
    """Point ``lead`` at ``boe``, overwriting any previous owner. Raises ValueError when not assignable."""
    reason = assignment_block_reason(lead)
    if reason:
        raise ValueError(reason)
    lead.assigned_boe_id = boe.id
    log_status_change(db, lead.id, updated_by, lead.status, lead.status, commit=False)
    db.commit()
    logger.info("Lead %s assigned to BOE %s by user %s", lead.id, boe.id, updated_by)
    return get_lead(db, lead.id)


def bulk_assign_boe(
    db: Session,
    lead_ids: List[int],
    boe: User,
    updated_by: int,
    *,
    team_lead_id: Optional[int] = None,
) -> dict:
    """Assign many leads to one BOE. Ineligible leads are tallied as failed; the rest still commit."""
    assigned = 0
    for lead_id in lead_ids:
        lead = get_lead(db, lead_id)
        if assignment_block_reason(lead):
            continue
        if team_lead_id is not None and not lead_in_team(db, lead, team_lead_id):
            continue
        lead.assigned_boe_id = boe.id
        log_status_change(db, lead.id, updated_by, lead.status, lead.status, commit=False)
        assigned += 1
    db.commit()
    failed = len(lead_ids) - assigned
    if failed:
        logger.warning("Bulk assign to BOE %s: %s assigned, %s failed", boe.id, assigned, failed)
    else:
        logger.info("Bulk assign to BOE %s: %s assigned", boe.id, assigned)
    return {"assigned": assigned, "failed": failed, "total": len(lead_ids)}
