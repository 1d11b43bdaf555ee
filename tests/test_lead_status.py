import pytest
from fastapi.testclient import TestClient

from backend.app.core.security import create_access_token
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.conversion_details import ConversionDetails
from backend.app.models.lead import Lead
from backend.app.models.lead_source import LeadSource
from backend.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def auth(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def seed_team() -> dict:
    db = SessionLocal()
    try:
        team_lead = User(name="Tara Lead", email="tl@example.com", role="team_lead")
        db.add(team_lead)
        db.flush()
        boe = User(name="Bo One", email="boe1@example.com", role="boe", reports_to_id=team_lead.id)
        other_boe = User(name="Bo Two", email="boe2@example.com", role="boe", reports_to_id=team_lead.id)
        source = LeadSource(name="Web", team_lead_id=team_lead.id)
        db.add_all([boe, other_boe, source])
        db.commit()
        return {"team_lead": team_lead.id, "boe": boe.id, "other_boe": other_boe.id, "source": source.id}
    finally:
        db.close()


def add_lead(source_id: int, boe_id: int | None, **fields) -> int:
    db = SessionLocal()
    try:
        lead = Lead(
            source_id=source_id,
            name=fields.pop("name", "Asha"),
            phone=fields.pop("phone", "9000000001"),
            assigned_boe_id=boe_id,
            **fields,
        )
        db.add(lead)
        db.commit()
        return lead.id
    finally:
        db.close()


def set_status(lead_id: int, status: str, user_id: int):
    return TestClient(app).put(f"/leads/{lead_id}/status", json={"status": status}, headers=auth(user_id))


def get_history(lead_id: int, user_id: int) -> list:
    return TestClient(app).get(f"/leads/{lead_id}/history", headers=auth(user_id)).json()


def test_statuses_are_listed_in_workflow_order():
    ids = seed_team()
    response = TestClient(app).get("/leads/statuses", headers=auth(ids["boe"]))
    assert response.status_code == 200
    assert response.json() == [
        "NEW",
        "DNR1",
        "DNR2",
        "DNR3",
        "DNR4",
        "Cut Call",
        "Call Back",
        "Not Interested",
        "Denied",
        "Converted",
    ]


def test_dnr1_sets_retry_count_and_followup():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])

    response = set_status(lead_id, "DNR1", ids["boe"])
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "DNR1"
    assert data["retry_count"] == 1
    assert data["next_followup_at"] is not None
    assert data["is_active"] is True

    history = get_history(lead_id, ids["boe"])
    assert [(row["old_status"], row["new_status"]) for row in history] == [("NEW", "DNR1")]
    assert history[0]["updated_by"] == ids["boe"]


def test_cannot_skip_from_new_to_dnr4():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])
    response = set_status(lead_id, "DNR4", ids["boe"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot skip from NEW to DNR4"


def test_dnr_stage_cannot_be_repeated_after_retry_limit():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"], status="Cut Call", retry_count=1)
    response = set_status(lead_id, "DNR1", ids["boe"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Retry limit for DNR1"


def test_dnr4_keeps_lead_active():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"], status="DNR3", retry_count=3)
    response = set_status(lead_id, "DNR4", ids["boe"])
    assert response.status_code == 200
    assert response.json()["is_active"] is True
    assert response.json()["next_followup_at"] is not None


def test_call_back_increments_retry_count():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"], status="DNR2", retry_count=2)
    response = set_status(lead_id, "Call Back", ids["boe"])
    assert response.status_code == 200
    assert response.json()["retry_count"] == 3


def test_not_interested_deactivates_and_freezes_lead():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"], status="DNR1", retry_count=1)
    response = set_status(lead_id, "Not Interested", ids["boe"])
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["next_followup_at"] is None

    again = set_status(lead_id, "Call Back", ids["boe"])
    assert again.status_code == 400
    assert again.json()["detail"] == "Cannot update inactive lead"


def test_converted_requires_conversion_details():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])
    response = set_status(lead_id, "Converted", ids["boe"])
    assert response.status_code == 409
    assert "Conversion details required" in response.json()["detail"]
    assert get_history(lead_id, ids["boe"]) == []


def test_converted_with_details_enrolls_lead():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])
    db = SessionLocal()
    try:
        db.add(ConversionDetails(lead_id=lead_id, course_name="Python", course_fee=1000, amount_paid=600, due_amount=400))
        db.commit()
    finally:
        db.close()

    response = set_status(lead_id, "Converted", ids["boe"])
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Converted"
    assert data["pipeline"] == "ENROLLED"
    assert data["is_active"] is False
    assert data["conversion_pending"] is False
    assert data["conversion_due_amount"] == "400.00"


def test_same_status_is_a_no_op():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"], status="DNR1", retry_count=1)
    response = set_status(lead_id, "DNR1", ids["boe"])
    assert response.status_code == 200
    assert response.json()["retry_count"] == 1
    assert get_history(lead_id, ids["boe"]) == []


def test_unknown_status_rejected():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])
    response = set_status(lead_id, "Maybe Later", ids["boe"])
    assert response.status_code == 400


def test_missing_status_rejected():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])
    response = TestClient(app).put(f"/leads/{lead_id}/status", json={}, headers=auth(ids["boe"]))
    assert response.status_code == 400
    assert response.json()["detail"] == "status required"


def test_boe_cannot_update_lead_assigned_to_someone_else():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["other_boe"])
    response = set_status(lead_id, "DNR1", ids["boe"])
    assert response.status_code == 403


def test_team_lead_can_update_unassigned_lead():
    ids = seed_team()
    lead_id = add_lead(ids["source"], None)
    response = set_status(lead_id, "Call Back", ids["team_lead"])
    assert response.status_code == 200
    assert response.json()["status"] == "Call Back"


def test_status_update_requires_auth():
    ids = seed_team()
    lead_id = add_lead(ids["source"], ids["boe"])
    response = TestClient(app).put(f"/leads/{lead_id}/status", json={"status": "DNR1"})
    assert response.status_code == 401


def test_status_update_missing_lead_returns_404():
    ids = seed_team()
    response = set_status(9999, "DNR1", ids["boe"])
    assert response.status_code == 404
