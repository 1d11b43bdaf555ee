from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # admin | team_lead | boe
    role = Column(String(50), nullable=False, default="boe")
    reports_to_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    reports_to = relationship("User", remote_side=[id])
    lead_sources = relationship("LeadSource", back_populates="team_lead", cascade="all, delete-orphan")
    assigned_leads = relationship("Lead", back_populates="assigned_boe", foreign_keys="Lead.assigned_boe_id")
    courses = relationship("Course", back_populates="team_lead", cascade="all, delete-orphan")
