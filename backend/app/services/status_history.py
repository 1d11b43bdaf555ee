"""Status history services for logging lead transitions and assignments."""

from sqlalchemy.orm import Session

from backend.app.models.lead_status_history import LeadStatusHistory


def log_status_change(
    db: Session,
    lead_id: int,
    updated_by: int | None,
    old_status: str | None,
    new_status: str,
    *,
    commit: bool = True,
) -> LeadStatusHistory:
    entry = LeadStatusHistory(lead_id=lead_id, updated_by=updated_by, old_status=old_status, new_status=new_status)
    db.add(entry)
    if commit:
        db.commit()
        db.refresh(entry)
    return entry


def get_status_history(db: Session, lead_id: int) -> list[LeadStatusHistory]:
    return (
        db.query(LeadStatusHistory)
        .filter(LeadStatusHistory.lead_id == lead_id)
        .order_by(LeadStatusHistory.created_at.asc(), LeadStatusHistory.id.asc())
        .all()
    )
