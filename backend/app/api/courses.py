"""Course catalogue per team; the choices offered when converting a lead."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.crud.crud_course import crud_course
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.lead import Lead
from backend.app.models.user import User
from backend.app.schemas.course import CourseCreate, CourseRead

router = APIRouter(prefix="/courses", tags=["courses"])


def _owning_team_lead_id(db: Session, current_user: User, for_lead_id: Optional[int]) -> Optional[int]:
    if for_lead_id:
        lead = db.query(Lead).filter(Lead.id == for_lead_id).first()
        if lead and lead.source is not None:
            return lead.source.team_lead_id
    if current_user.role == "team_lead":
        return current_user.id
    return current_user.reports_to_id


@router.get("", response_model=List[CourseRead])
async def list_courses(
    for_lead_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    team_lead_id = _owning_team_lead_id(db, current_user, for_lead_id)
    if team_lead_id is None:
        return []
    return crud_course.get_multi(db, team_lead_id=team_lead_id)


@router.post("", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
async def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.role != "team_lead":
        raise HTTPException(status_code=403, detail="Team lead only")
    if not course_in.name.strip():
        raise HTTPException(status_code=400, detail="Course name is required")
    if crud_course.get_by_name(db, name=course_in.name, team_lead_id=current_user.id):
        raise HTTPException(status_code=409, detail="Course already exists")
    return crud_course.create(db, obj_in=course_in, team_lead_id=current_user.id)
