"""HTTP client for the leads API, used by the client-side workflows.

Every non-2xx response and every transport failure is surfaced as a
``RemoteError`` carrying the backend's ``detail`` text; nothing is retried.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from backend.app.core.errors import RemoteError
from backend.app.core.settings import get_settings
from backend.app.schemas.assignment import BulkAssignResult
from backend.app.schemas.conversion_details import ConversionDetailsPayload, ConversionDetailsRead
from backend.app.schemas.course import CourseRead
from backend.app.schemas.lead import LeadRead

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    detail = body.get("detail") if isinstance(body, dict) else None
    if detail is None:
        return response.text
    return detail if isinstance(detail, str) else str(detail)


class LeadsApiClient:
    """Thin typed wrapper over the leads endpoints.

    ``http`` may be any ``httpx.Client`` (including FastAPI's ``TestClient``);
    when omitted, one is created against ``settings.api_base_url``.
    """

    def __init__(self, http: Optional[httpx.Client] = None, token: Optional[str] = None):
        self.http = http or httpx.Client(base_url=get_settings().api_base_url, timeout=30.0)
        self.token = token

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        try:
            response = self.http.request(method, path, json=json, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise RemoteError(None, str(exc) or exc.__class__.__name__) from exc
        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error("%s %s -> HTTP %s: %s", method, path, response.status_code, detail)
            raise RemoteError(response.status_code, detail)
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _payload(model: BaseModel) -> dict:
        return model.model_dump(mode="json", exclude_none=True)

    def get_statuses(self) -> List[str]:
        return list(self._request("GET", "/leads/statuses"))

    def list_leads(
        self,
        *,
        team_lead_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        inactive: bool = False,
    ) -> List[LeadRead]:
        params: Dict[str, Any] = {}
        if team_lead_id is not None:
            params["team_lead_id"] = team_lead_id
        if date_from is not None:
            params["from"] = date_from.isoformat()
        if date_to is not None:
            params["to"] = date_to.isoformat()
        if inactive:
            params["inactive"] = "1"
        return [LeadRead.model_validate(row) for row in self._request("GET", "/leads", params=params)]

    def get_lead(self, lead_id: int) -> LeadRead:
        return LeadRead.model_validate(self._request("GET", f"/leads/{lead_id}"))

    def update_status(self, lead_id: int, status: str) -> LeadRead:
        return LeadRead.model_validate(self._request("PUT", f"/leads/{lead_id}/status", json={"status": status}))

    def create_conversion_details(self, lead_id: int, details: ConversionDetailsPayload) -> ConversionDetailsRead:
        body = self._request("POST", f"/leads/{lead_id}/conversion-details", json=self._payload(details))
        return ConversionDetailsRead.model_validate(body)

    def update_conversion_details(self, lead_id: int, details: ConversionDetailsPayload) -> ConversionDetailsRead:
        body = self._request("PUT", f"/leads/{lead_id}/conversion-details", json=self._payload(details))
        return ConversionDetailsRead.model_validate(body)

    def get_conversion_details(self, lead_id: int) -> Optional[ConversionDetailsRead]:
        body = self._request("GET", f"/leads/{lead_id}/conversion-details")
        if body is None:
            return None
        return ConversionDetailsRead.model_validate(body)

    def assign(self, lead_id: int, boe_id: int) -> LeadRead:
        return LeadRead.model_validate(self._request("PUT", f"/leads/{lead_id}/assign", json={"boe_id": boe_id}))

    def bulk_assign(self, lead_ids: List[int], boe_id: int) -> BulkAssignResult:
        body = self._request("POST", "/leads/bulk-assign", json={"lead_ids": list(lead_ids), "boe_id": boe_id})
        return BulkAssignResult.model_validate(body)

    def list_courses(self, for_lead_id: Optional[int] = None) -> List[CourseRead]:
        params = {"for_lead_id": for_lead_id} if for_lead_id is not None else None
        return [CourseRead.model_validate(row) for row in self._request("GET", "/courses", params=params)]
