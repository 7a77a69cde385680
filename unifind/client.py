"""
UniFind API Client

Thin `requests` wrapper over the HTTP API, used by the Streamlit consoles.
"""
import logging
from datetime import date
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class UniFindAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, error: Optional[str], detail: str):
        super().__init__(f"{status_code} {error or 'ERROR'}: {detail}")
        self.status_code = status_code
        self.error = error
        self.detail = detail


def _drop_empty(params: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, date) else value
        for key, value in params.items()
        if value not in (None, "")
    }


class UniFindClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = self.session.request(
            method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
        )
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            detail = body.get("detail") if isinstance(body, dict) else None
            error = body.get("error") if isinstance(body, dict) else None
            logger.warning(f"{method} {path} -> {response.status_code}: {detail}")
            raise UniFindAPIError(response.status_code, error, str(detail or response.text))
        return response.json()

    # Items

    def report_lost(self, title: str, description: str, location: str, event_date: date,
                    category: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "title": title,
            "description": description,
            "location": location,
            "eventDate": event_date.isoformat(),
            "category": category,
        }
        return self._request("POST", "/items/lost", json=_drop_empty(payload))

    def register_found(self, title: str, description: str, location: str, event_date: date,
                       category: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "title": title,
            "description": description,
            "location": location,
            "eventDate": event_date.isoformat(),
            "category": category,
        }
        return self._request("POST", "/items/found", json=_drop_empty(payload))

    def list_found_items(self, category: Optional[str] = None, q: Optional[str] = None,
                         date_from: Optional[date] = None, date_to: Optional[date] = None) -> Dict[str, Any]:
        params = {"category": category, "q": q, "from": date_from, "to": date_to}
        return self._request("GET", "/items/found", params=_drop_empty(params))

    def list_items(self, status: Optional[str] = None, category: Optional[str] = None,
                   q: Optional[str] = None, date_from: Optional[date] = None,
                   date_to: Optional[date] = None) -> Dict[str, Any]:
        params = {"status": status, "category": category, "q": q, "from": date_from, "to": date_to}
        return self._request("GET", "/admin/items", params=_drop_empty(params))

    def get_item(self, item_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/items/{item_id}")

    def item_history(self, item_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/items/{item_id}/history")

    def set_item_status(self, item_id: int, new_status: str, reason: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "PATCH", f"/items/{item_id}/status",
            json=_drop_empty({"newStatus": new_status, "reason": reason}),
        )

    # Claims

    def submit_claim(self, item_id: int, proof_text: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "POST", "/claims", json=_drop_empty({"itemId": item_id, "proofText": proof_text})
        )

    def list_claims(self, status: Optional[str] = None) -> Dict[str, Any]:
        return self._request("GET", "/claims", params=_drop_empty({"status": status}))

    def approve_claim(self, claim_id: int, admin_note: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "PATCH", f"/claims/{claim_id}/approve", json=_drop_empty({"adminNote": admin_note})
        )

    def reject_claim(self, claim_id: int, admin_note: str) -> Dict[str, Any]:
        return self._request(
            "PATCH", f"/claims/{claim_id}/reject", json={"adminNote": admin_note}
        )

    # Misc

    def summary(self) -> Dict[str, Any]:
        return self._request("GET", "/admin/summary")

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")

    def health(self) -> bool:
        try:
            return self._request("GET", "/health").get("status") == "healthy"
        except (requests.exceptions.RequestException, UniFindAPIError):
            return False
