"""User lookups used when assigning leads."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_team_lead_or_admin
from backend.app.models.user import User
from backend.app.schemas.user import BoeRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/boes", response_model=List[BoeRead])
async def list_boes(db: Session = Depends(get_db), current_user: User = Depends(get_team_lead_or_admin)):
    query = db.query(User).filter(User.role == "boe", User.is_active.is_(True))
    if current_user.role == "team_lead":
        query = query.filter(User.reports_to_id == current_user.id)
    return query.order_by(User.name.asc(), User.id.asc()).all()
