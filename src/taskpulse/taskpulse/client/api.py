from __future__ import annotations

from typing import Any, Optional

import requests

from .session import AuthSession


class ApiError(Exception):
    def __init__(self, status: int, category: str, message: str):
        super().__init__(message)
        self.status = status
        self.category = category
        self.message = message


class TaskPulseClient:
    """Thin client for the TaskPulse REST API."""

    def __init__(
        self,
        base_url: str,
        session: AuthSession,
        *,
        http: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self._base_url = base_url.rstrip("/")
        self.session = session
        self._http = http or requests.Session()
        self._timeout = timeout

    def _request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        try:
            resp = self._http.request(
                method,
                f"{self._base_url}{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ApiError(0, "network_error", f"Network error: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code >= 400 or body.get("success") is False:
            raise ApiError(
                resp.status_code,
                body.get("category", "http_error"),
                body.get("message") or f"Request failed ({resp.status_code})",
            )
        return body

    # Auth
    def register(self, *, name: str, email: str, password: str, department: Optional[str] = None) -> dict:
        body = self._request(
            "POST",
            "/api/auth/register",
            json={"name": name, "email": email, "password": password, "department": department},
        )
        self.session.save(body["data"]["token"], body["data"]["user"])
        return body["data"]["user"]

    def login(self, email: str, password: str) -> dict:
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session.save(body["data"]["token"], body["data"]["user"])
        return body["data"]["user"]

    def logout(self) -> None:
        self.session.clear()

    def refresh_user(self) -> dict:
        try:
            body = self._request("GET", "/api/auth/me")
        except ApiError as e:
            if e.status == 401:
                self.session.clear()
            raise
        user = body["data"]["user"]
        self.session.save(self.session.token or "", user)
        return user

    def send_otp(self, email: str) -> dict:
        return self._request("POST", "/api/auth/send-otp", json={"email": email})["data"]

    def verify_otp(self, email: str, otp: str) -> dict:
        return self._request("POST", "/api/auth/verify-otp", json={"email": email, "otp": otp})["data"]

    def forgot_password(self, email: str) -> str:
        return self._request("POST", "/api/auth/forgot-password", json={"email": email})["message"]

    def reset_password(self, *, email: str, token: str, new_password: str) -> str:
        body = self._request(
            "POST",
            "/api/auth/reset-password",
            json={"email": email, "token": token, "newPassword": new_password},
        )
        return body["message"]

    # Reports
    def create_report(self, **fields: Any) -> dict:
        return self._request("POST", "/api/reports", json=fields)["data"]["report"]

    def list_reports(self, **filters: Any) -> dict:
        params = {k: v for k, v in filters.items() if v is not None}
        return self._request("GET", "/api/reports", params=params)

    def today_report(self) -> Optional[dict]:
        return self._request("GET", "/api/reports/today")["data"]["report"]

    def get_report(self, report_id: int) -> dict:
        return self._request("GET", f"/api/reports/{int(report_id)}")["data"]["report"]

    def update_report(self, report_id: int, **changes: Any) -> dict:
        return self._request("PUT", f"/api/reports/{int(report_id)}", json=changes)["data"]["report"]

    def delete_report(self, report_id: int, *, force: bool = False) -> None:
        suffix = "/force" if force else ""
        self._request("DELETE", f"/api/reports/{int(report_id)}{suffix}")

    def report_stats(self, *, start_date: Optional[str] = None, end_date: Optional[str] = None) -> dict:
        params = {k: v for k, v in {"startDate": start_date, "endDate": end_date}.items() if v}
        return self._request("GET", "/api/reports/stats", params=params)["data"]
