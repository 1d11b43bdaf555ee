import pytest
from fastapi.testclient import TestClient

from backend.app.core.security import create_access_token
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
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


def seed() -> dict:
    db = SessionLocal()
    try:
        team_lead = User(name="Tara Lead", email="tl@example.com", role="team_lead")
        other_lead = User(name="Omar Lead", email="tl2@example.com", role="team_lead")
        db.add_all([team_lead, other_lead])
        db.flush()
        boe = User(name="Bo One", email="boe1@example.com", role="boe", reports_to_id=team_lead.id)
        other_source = LeadSource(name="Fair", team_lead_id=other_lead.id)
        db.add_all([boe, other_source])
        db.flush()
        foreign_lead = Lead(source_id=other_source.id, name="Asha", phone="1", assigned_boe_id=boe.id)
        db.add(foreign_lead)
        db.commit()
        return {"team_lead": team_lead.id, "other_lead": other_lead.id, "boe": boe.id, "foreign_lead": foreign_lead.id}
    finally:
        db.close()


def add_course(user_id: int, name: str):
    return TestClient(app).post("/courses", json={"name": name}, headers=auth(user_id))


def test_team_lead_manages_own_courses():
    ids = seed()
    assert add_course(ids["team_lead"], "Python").status_code == 201
    assert add_course(ids["team_lead"], "Data Science").status_code == 201

    response = TestClient(app).get("/courses", headers=auth(ids["team_lead"]))
    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["Data Science", "Python"]


def test_duplicate_course_conflicts():
    ids = seed()
    add_course(ids["team_lead"], "Python")
    assert add_course(ids["team_lead"], " Python ").status_code == 409
    assert add_course(ids["other_lead"], "Python").status_code == 201


def test_blank_course_rejected():
    ids = seed()
    assert add_course(ids["team_lead"], "   ").status_code == 400


def test_boe_cannot_add_courses():
    ids = seed()
    assert add_course(ids["boe"], "Python").status_code == 403


def test_boe_sees_team_lead_courses():
    ids = seed()
    add_course(ids["team_lead"], "Python")
    add_course(ids["other_lead"], "Java")
    response = TestClient(app).get("/courses", headers=auth(ids["boe"]))
    assert [row["name"] for row in response.json()] == ["Python"]


def test_courses_for_lead_follow_lead_source():
    ids = seed()
    add_course(ids["team_lead"], "Python")
    add_course(ids["other_lead"], "Java")
    response = TestClient(app).get(
        "/courses", params={"for_lead_id": ids["foreign_lead"]}, headers=auth(ids["boe"])
    )
    assert [row["name"] for row in response.json()] == ["Java"]
