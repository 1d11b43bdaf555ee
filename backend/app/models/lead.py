"""Lead model for LeadDesk CRM."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Lead(Base):
    __tablename__ = "leads"
    __table_args__ = (UniqueConstraint("phone", "source_id", name="uq_leads_phone_source"),)

    id = Column(Integer, primary_key=True, index=True)
    source_id = Column(Integer, ForeignKey("lead_sources.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=True)
    college = Column(String(255), nullable=True)
    certification = Column(String(255), nullable=True)
    status = Column(String(50), nullable=False, default="NEW")
    retry_count = Column(Integer, nullable=False, default=0)
    assigned_boe_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    pipeline = Column(String(100), nullable=True, default="LEADS")
    next_followup_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    source = relationship("LeadSource", back_populates="leads")
    assigned_boe = relationship("User", back_populates="assigned_leads", foreign_keys=[assigned_boe_id])
    conversion_details = relationship(
        "ConversionDetails", back_populates="lead", uselist=False, cascade="all, delete-orphan"
    )
    status_history = relationship("LeadStatusHistory", back_populates="lead", cascade="all, delete-orphan")

    @property
    def assigned_boe_name(self) -> str | None:
        return self.assigned_boe.name if self.assigned_boe is not None else None

    @property
    def conversion_due_amount(self):
        return self.conversion_details.due_amount if self.conversion_details is not None else None

    @property
    def conversion_pending(self) -> bool:
        # Details committed but the status write to Converted has not landed yet
        return self.conversion_details is not None and self.status != "Converted"
