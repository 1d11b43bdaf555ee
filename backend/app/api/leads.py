"""Lead management endpoints: listing, status workflow, conversion details and assignment."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user, get_team_lead_or_admin
from backend.app.models.lead import Lead
from backend.app.models.user import User
from backend.app.schemas.assignment import AssignRequest, BulkAssignRequest, BulkAssignResult
from backend.app.schemas.conversion_details import ConversionDetailsIn, ConversionDetailsRead
from backend.app.schemas.lead import LeadCreate, LeadRead, LeadStatusHistoryRead, LeadStatusUpdate
from backend.app.services import conversion_details as conversion_service
from backend.app.services import leads as lead_service
from backend.app.services.lead_status import ALL_STATUSES, LeadStatus
from backend.app.services.status_history import get_status_history
from backend.app.services.workflow import validate_transition

router = APIRouter(prefix="/leads", tags=["leads"])


def _get_lead(db: Session, lead_id: int) -> Lead:
    lead = lead_service.get_lead(db, lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


def _ensure_lead_access(db: Session, lead: Lead, user: User) -> None:
    if user.role == "boe":
        if lead.assigned_boe_id != user.id:
            raise HTTPException(status_code=403, detail="Not assigned to you")
    elif user.role == "team_lead":
        if not lead_service.lead_in_team(db, lead, user.id):
            raise HTTPException(status_code=403, detail="Lead is not in your team")
    elif user.role != "admin":
        raise HTTPException(status_code=403, detail="Forbidden")


def _ensure_can_edit_conversion(db: Session, lead: Lead, user: User) -> None:
    if user.role not in ("boe", "team_lead"):
        raise HTTPException(status_code=403, detail="BOE or Team Lead only")
    _ensure_lead_access(db, lead, user)


@router.get("", response_model=list[LeadRead])
async def list_leads(
    team_lead_id: Optional[int] = None,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
    inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lead_service.list_leads_for_user(
        db,
        current_user,
        include_inactive=inactive and current_user.role == "team_lead",
        team_lead_id=team_lead_id if current_user.role == "admin" else None,
        date_from=date_from,
        date_to=date_to,
    )


@router.post("", response_model=LeadRead, status_code=status.HTTP_201_CREATED)
async def create_lead(lead_in: LeadCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if current_user.role != "boe":
        raise HTTPException(status_code=403, detail="BOE only")
    if not lead_in.name.strip() or not lead_in.phone.strip():
        raise HTTPException(status_code=400, detail="name and phone required")
    return lead_service.create_lead_by_boe(db, current_user, lead_in)


@router.get("/statuses", response_model=list[str])
async def list_statuses(current_user: User = Depends(get_current_user)):
    return list(ALL_STATUSES)


@router.post("/bulk-assign", response_model=BulkAssignResult)
async def bulk_assign(
    body: BulkAssignRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_team_lead_or_admin),
):
    lead_ids = [lead_id for lead_id in body.lead_ids if lead_id]
    if not lead_ids or not body.boe_id:
        raise HTTPException(status_code=400, detail="lead_ids (array) and boe_id required")
    boe = lead_service.get_assignable_boe(db, body.boe_id)
    if boe is None:
        raise HTTPException(status_code=400, detail="boe_id is not an active BOE")
    return lead_service.bulk_assign_boe(
        db,
        lead_ids,
        boe,
        current_user.id,
        team_lead_id=current_user.id if current_user.role == "team_lead" else None,
    )


@router.get("/{lead_id}", response_model=LeadRead)
async def get_lead(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lead = _get_lead(db, lead_id)
    _ensure_lead_access(db, lead, current_user)
    if current_user.role == "boe" and not lead.is_active:
        raise HTTPException(status_code=403, detail="Cannot view inactive lead")
    return lead


@router.get("/{lead_id}/history", response_model=list[LeadStatusHistoryRead])
async def get_lead_history(lead_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    lead = _get_lead(db, lead_id)
    _ensure_lead_access(db, lead, current_user)
    return get_status_history(db, lead.id)


@router.put("/{lead_id}/assign", response_model=LeadRead)
async def assign_lead(
    lead_id: int,
    body: AssignRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_team_lead_or_admin),
):
    lead = _get_lead(db, lead_id)
    _ensure_lead_access(db, lead, current_user)
    if not body.boe_id:
        raise HTTPException(status_code=400, detail="boe_id required")
    boe = lead_service.get_assignable_boe(db, body.boe_id)
    if boe is None:
        raise HTTPException(status_code=400, detail="boe_id is not an active BOE")
    try:
        return lead_service.assign_boe(db, lead, boe, current_user.id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/{lead_id}/status", response_model=LeadRead)
async def update_status(
    lead_id: int,
    body: LeadStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = _get_lead(db, lead_id)
    _ensure_lead_access(db, lead, current_user)
    new_status = body.status
    if not new_status:
        raise HTTPException(status_code=400, detail="status required")
    if new_status == lead.status:
        # Idempotent: repeating the last write (e.g. a resumed conversion) is a no-op
        return lead
    check = validate_transition(
        lead,
        new_status,
        is_team_lead=current_user.role in ("team_lead", "admin"),
        has_conversion_details=lead.conversion_details is not None,
    )
    if not check.allowed:
        raise HTTPException(status_code=check.status_code, detail=check.reason or "Transition not allowed")
    return lead_service.apply_status_change(db, lead, new_status, current_user.id)


@router.post(
    "/{lead_id}/conversion-details",
    response_model=ConversionDetailsRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_conversion_details(
    lead_id: int,
    details_in: ConversionDetailsIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = _get_lead(db, lead_id)
    _ensure_can_edit_conversion(db, lead, current_user)
    if lead.status == LeadStatus.CONVERTED.value:
        raise HTTPException(status_code=400, detail="Lead is already converted")
    if not lead.is_active:
        raise HTTPException(status_code=400, detail="Lead is inactive")
    if conversion_service.get_conversion_details(db, lead.id):
        raise HTTPException(status_code=409, detail="Conversion details already exist for this lead")
    try:
        return conversion_service.create_conversion_details(db, lead, details_in)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/{lead_id}/conversion-details", response_model=Optional[ConversionDetailsRead])
async def get_conversion_details(
    lead_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = _get_lead(db, lead_id)
    _ensure_lead_access(db, lead, current_user)
    return conversion_service.get_conversion_details(db, lead.id)


@router.put("/{lead_id}/conversion-details", response_model=ConversionDetailsRead)
async def update_conversion_details(
    lead_id: int,
    details_in: ConversionDetailsIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = _get_lead(db, lead_id)
    _ensure_can_edit_conversion(db, lead, current_user)
    if lead.status != LeadStatus.CONVERTED.value:
        raise HTTPException(status_code=400, detail="Lead is not converted")
    details = conversion_service.get_conversion_details(db, lead.id)
    if not details:
        raise HTTPException(status_code=404, detail="Conversion details not found")
    try:
        return conversion_service.update_conversion_details(db, details, details_in)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
