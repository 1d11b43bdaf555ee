"""Course offered by a team; the choices for a conversion's course name."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (UniqueConstraint("team_lead_id", "name", name="uq_courses_team_lead_name"),)

    id = Column(Integer, primary_key=True, index=True)
    team_lead_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    team_lead = relationship("User", back_populates="courses")
