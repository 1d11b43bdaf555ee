from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.app.core.errors import PendingConversionError, RemoteError, TransitionBlocked, ValidationError
from backend.app.core.security import create_access_token
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.lead import Lead
from backend.app.models.lead_source import LeadSource
from backend.app.models.user import User
from backend.app.services.leads_api_client import LeadsApiClient
from backend.app.services.status_transition_guard import StatusTransitionGuard


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


class FlakyClient(TestClient):
    """TestClient that fails selected requests at the transport level."""

    def __init__(self, app, fail_on=None):
        super().__init__(app)
        self.fail_on = set(fail_on or ())
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, str(url)))
        if (method, str(url)) in self.fail_on:
            raise httpx.ConnectError("connection refused")
        return super().request(method, url, **kwargs)


class NoNetwork:
    def request(self, method, url, **kwargs):
        raise AssertionError(f"unexpected request {method} {url}")


def seed() -> dict:
    db = SessionLocal()
    try:
        team_lead = User(name="Tara Lead", email="tl@example.com", role="team_lead")
        db.add(team_lead)
        db.flush()
        boe = User(name="Bo One", email="boe1@example.com", role="boe", reports_to_id=team_lead.id)
        source = LeadSource(name="Web", team_lead_id=team_lead.id)
        db.add_all([boe, source])
        db.flush()
        lead = Lead(source_id=source.id, name="Asha", phone="9000000001", assigned_boe_id=boe.id)
        db.add(lead)
        db.commit()
        return {"boe": boe.id, "lead": lead.id}
    finally:
        db.close()


def make_guard(ids, fail_on=None):
    http = FlakyClient(app, fail_on)
    client = LeadsApiClient(http=http, token=create_access_token(ids["boe"]))
    return StatusTransitionGuard(client), client, http


DETAILS = {"course_name": "Python", "course_fee": "1000", "amount_paid": "600"}


def test_same_status_makes_no_request():
    ids = seed()
    _, client, _ = make_guard(ids)
    lead = client.get_lead(ids["lead"])
    guard = StatusTransitionGuard(LeadsApiClient(http=NoNetwork(), token="unused"))
    assert guard.change_status(lead, "NEW") is lead


def test_plain_transition_goes_through():
    ids = seed()
    guard, client, _ = make_guard(ids)
    updated = guard.change_status(client.get_lead(ids["lead"]), "DNR1")
    assert updated.status == "DNR1"
    assert updated.retry_count == 1


def test_unknown_target_is_blocked_before_any_write():
    ids = seed()
    guard, client, http = make_guard(ids)
    lead = client.get_lead(ids["lead"])
    with pytest.raises(TransitionBlocked):
        guard.change_status(lead, "Warm")
    assert all(method == "GET" for method, _ in http.calls)


def test_converted_without_details_is_blocked():
    ids = seed()
    guard, client, http = make_guard(ids)
    lead = client.get_lead(ids["lead"])
    with pytest.raises(TransitionBlocked) as excinfo:
        guard.change_status(lead, "Converted")
    assert excinfo.value.target == "Converted"
    assert all(method == "GET" for method, _ in http.calls)


def test_invalid_details_never_reach_the_network():
    ids = seed()
    guard, client, http = make_guard(ids)
    lead = client.get_lead(ids["lead"])
    with pytest.raises(ValidationError) as excinfo:
        guard.change_status(lead, "Converted", {"course_fee": "100", "amount_paid": "150"})
    assert excinfo.value.kind == ValidationError.PAID_EXCEEDS_FEE
    assert all(method == "GET" for method, _ in http.calls)
    assert client.get_conversion_details(ids["lead"]) is None


def test_course_is_required_when_courses_exist():
    ids = seed()
    guard, client, _ = make_guard(ids)
    lead = client.get_lead(ids["lead"])
    with pytest.raises(ValidationError) as excinfo:
        guard.change_status(lead, "Converted", {"course_fee": "100"}, known_course_count=2)
    assert excinfo.value.kind == ValidationError.COURSE_REQUIRED


def test_conversion_writes_details_then_status():
    ids = seed()
    guard, client, http = make_guard(ids)
    converted = guard.change_status(client.get_lead(ids["lead"]), "Converted", DETAILS)
    assert converted.status == "Converted"
    assert converted.is_active is False
    assert converted.pipeline == "ENROLLED"
    assert converted.conversion_due_amount == Decimal("400.00")
    writes = [call for call in http.calls if call[0] != "GET"]
    lead_id = ids["lead"]
    assert writes == [("POST", f"/leads/{lead_id}/conversion-details"), ("PUT", f"/leads/{lead_id}/status")]


def test_details_failure_leaves_lead_untouched():
    ids = seed()
    lead_id = ids["lead"]
    guard, client, _ = make_guard(ids, fail_on={("POST", f"/leads/{lead_id}/conversion-details")})
    with pytest.raises(RemoteError) as excinfo:
        guard.change_status(client.get_lead(lead_id), "Converted", DETAILS)
    assert not isinstance(excinfo.value, PendingConversionError)
    assert excinfo.value.status_code is None
    lead = client.get_lead(lead_id)
    assert lead.status == "NEW"
    assert lead.conversion_pending is False


def test_status_failure_after_details_is_resumable():
    ids = seed()
    lead_id = ids["lead"]
    status_write = ("PUT", f"/leads/{lead_id}/status")
    guard, client, http = make_guard(ids, fail_on={status_write})

    with pytest.raises(PendingConversionError) as excinfo:
        guard.change_status(client.get_lead(lead_id), "Converted", DETAILS)
    assert excinfo.value.lead_id == lead_id
    assert excinfo.value.details.due_amount == Decimal("400.00")
    assert "Retry the status update only" in str(excinfo.value)

    pending = client.get_lead(lead_id)
    assert pending.status == "NEW"
    assert pending.conversion_pending is True

    http.fail_on.clear()
    http.calls.clear()
    resumed = guard.change_status(pending, "Converted", DETAILS)
    assert resumed.status == "Converted"
    assert ("POST", f"/leads/{lead_id}/conversion-details") not in http.calls

    history = http.get(f"/leads/{lead_id}/history", headers=client._headers()).json()
    assert [(row["old_status"], row["new_status"]) for row in history] == [("NEW", "Converted")]


def test_resume_conversion_issues_only_the_status_write():
    ids = seed()
    lead_id = ids["lead"]
    guard, client, http = make_guard(ids, fail_on={("PUT", f"/leads/{lead_id}/status")})
    with pytest.raises(PendingConversionError):
        guard.change_status(client.get_lead(lead_id), "Converted", DETAILS)

    http.fail_on.clear()
    http.calls.clear()
    resumed = guard.resume_conversion(lead_id)
    assert resumed.status == "Converted"
    assert [call for call in http.calls if call[0] != "GET"] == [("PUT", f"/leads/{lead_id}/status")]

    # A second resume repeats the same write and stays a no-op
    assert guard.resume_conversion(lead_id).status == "Converted"


def test_resume_without_details_is_blocked():
    ids = seed()
    guard, _, _ = make_guard(ids)
    with pytest.raises(TransitionBlocked):
        guard.resume_conversion(ids["lead"])


def test_amend_payment_keeps_stored_terms():
    ids = seed()
    guard, client, _ = make_guard(ids)
    guard.change_status(client.get_lead(ids["lead"]), "Converted", DETAILS)

    amended = guard.amend_payment(ids["lead"], amount_paid="900")
    assert amended.course_name == "Python"
    assert amended.course_fee == Decimal("1000.00")
    assert amended.amount_paid == Decimal("900.00")
    assert amended.due_amount == Decimal("100.00")

    with pytest.raises(ValidationError):
        guard.amend_payment(ids["lead"], amount_paid="1200")


@pytest.mark.parametrize("status", ["Denied", "Not Interested", "Converted"])
def test_terminal_lead_is_blocked_without_a_request(status):
    ids = seed()
    _, client, _ = make_guard(ids)
    lead = client.get_lead(ids["lead"]).model_copy(update={"status": status, "is_active": False})
    guard = StatusTransitionGuard(LeadsApiClient(http=NoNetwork(), token="unused"))
    with pytest.raises(TransitionBlocked) as excinfo:
        guard.change_status(lead, "NEW")
    assert excinfo.value.reason == "Lead is in a terminal status"


def test_retry_with_stale_lead_resumes_instead_of_resubmitting():
    ids = seed()
    lead_id = ids["lead"]
    guard, client, http = make_guard(ids, fail_on={("PUT", f"/leads/{lead_id}/status")})
    stale = client.get_lead(lead_id)
    with pytest.raises(PendingConversionError):
        guard.change_status(stale, "Converted", DETAILS)

    http.fail_on.clear()
    assert stale.conversion_pending is False
    resumed = guard.change_status(stale, "Converted", DETAILS)
    assert resumed.status == "Converted"
    assert client.get_conversion_details(lead_id).amount_paid == Decimal("600.00")
