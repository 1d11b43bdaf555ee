"""CRUD operations for team courses."""

from typing import List, Optional

from sqlalchemy.orm import Session

from backend.app.models.course import Course
from backend.app.schemas.course import CourseCreate


class CRUDCourse:
    def create(self, db: Session, *, obj_in: CourseCreate, team_lead_id: int) -> Course:
        obj = Course(team_lead_id=team_lead_id, name=obj_in.name.strip())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def get_by_name(self, db: Session, *, name: str, team_lead_id: int) -> Optional[Course]:
        return (
            db.query(Course)
            .filter(Course.team_lead_id == team_lead_id, Course.name == name.strip())
            .first()
        )

    def get_multi(self, db: Session, *, team_lead_id: int) -> List[Course]:
        return (
            db.query(Course)
            .filter(Course.team_lead_id == team_lead_id)
            .order_by(Course.name.asc())
            .all()
        )


crud_course = CRUDCourse()
