import os

from sqlalchemy.orm import Session

from backend.app.models.lead_source import LeadSource
from backend.app.models.user import User


DEFAULT_DEV_TEAM_LEAD = ("Team Lead", "teamlead@leaddesk.test")
DEFAULT_DEV_BOES = [
    ("BOE One", "boe1@leaddesk.test"),
    ("BOE Two", "boe2@leaddesk.test"),
]


def ensure_default_dev_team(db: Session) -> None:
    """
    Create a team lead, two BOEs reporting to them and one lead source for local
    development if they do not exist.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    name, email = DEFAULT_DEV_TEAM_LEAD
    team_lead = db.query(User).filter(User.email == email).first()
    if team_lead is None:
        team_lead = User(name=name, email=email, role="team_lead", is_active=True)
        db.add(team_lead)
        db.flush()

    for boe_name, boe_email in DEFAULT_DEV_BOES:
        if db.query(User).filter(User.email == boe_email).first():
            continue
        db.add(User(name=boe_name, email=boe_email, role="boe", reports_to_id=team_lead.id, is_active=True))

    if not db.query(LeadSource).filter(LeadSource.team_lead_id == team_lead.id).first():
        db.add(LeadSource(name="Default", team_lead_id=team_lead.id))

    db.commit()
