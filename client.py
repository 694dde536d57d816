"""Python client for the company registration API.

Mirrors the browser service layer: every request carries the stored bearer
token, login calls store the token they receive, and a 401 from any endpoint
drops the token and fires ``on_unauthorized`` (where a UI would send the user
back to its login screen) before raising ``APIError``.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)


class APIError(Exception):
    def __init__(self, status_code: int, message: str, payload: Optional[dict] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}


class CompanyPortalClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3001/api",
        token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        prefix: str = "",
    ) -> None:
        # An injected client (e.g. FastAPI's TestClient) brings its own base URL; pass prefix="/api"
        self._http = http_client or httpx.Client(base_url=base_url, timeout=30)
        self._prefix = prefix
        self.token = token
        self.on_unauthorized = on_unauthorized

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CompanyPortalClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = {"Content-Type": "application/json", **kwargs.pop("headers", {})}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        resp = self._http.request(method, f"{self._prefix}{path}", headers=headers, **kwargs)

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code == 401:
            logger.info("Unauthorized response, clearing token", path=path)
            self.token = None
            if self.on_unauthorized is not None:
                self.on_unauthorized()

        if resp.is_error:
            message = body.get("message") if isinstance(body, dict) else None
            raise APIError(resp.status_code, message or resp.reason_phrase, body)
        return body.get("data") if isinstance(body, dict) else body

    def _store_token(self, data: Any) -> Any:
        if isinstance(data, dict) and data.get("token"):
            self.token = data["token"]
        return data

    # --- auth ---
    def register(self, **user) -> dict:
        return self._request("POST", "/auth/register", json=user)

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._store_token(data)

    def firebase_login(self, id_token: str, user_data: Optional[dict] = None) -> dict:
        body = {"idToken": id_token}
        if user_data is not None:
            body["userData"] = user_data
        return self._store_token(self._request("POST", "/auth/firebase-login", json=body))

    def verify_email(self, token: str) -> None:
        return self._request("GET", "/auth/verify-email", params={"token": token})

    def verify_mobile(self, user_id: int, otp: str) -> dict:
        data = self._request("POST", "/auth/verify-mobile", json={"user_id": user_id, "otp": otp})
        return self._store_token(data)

    def logout(self) -> None:
        # Tokens are stateless; forgetting it is the whole logout
        self.token = None

    # --- users ---
    def get_profile(self) -> dict:
        return self._request("GET", "/users/profile")

    def update_profile(self, **fields) -> dict:
        return self._request("PUT", "/users/profile", json=fields)

    def change_password(self, current_password: str, new_password: str) -> None:
        return self._request(
            "PUT",
            "/users/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )

    # --- companies ---
    def register_company(self, **company) -> dict:
        return self._request("POST", "/companies/register", json=company)

    def get_company_profile(self) -> dict:
        return self._request("GET", "/companies/profile")

    def update_company_profile(self, **fields) -> dict:
        return self._request("PUT", "/companies/profile", json=fields)

    def upload_logo(self, image: str) -> dict:
        return self._request("POST", "/companies/upload-logo", json={"image": image})

    def upload_banner(self, image: str) -> dict:
        return self._request("POST", "/companies/upload-banner", json={"image": image})

    # --- jobs ---
    def create_job(self, **job) -> dict:
        return self._request("POST", "/jobs", json=job)

    def get_jobs(self) -> list:
        return self._request("GET", "/jobs")

    def get_job(self, job_id: int) -> dict:
        return self._request("GET", f"/jobs/{job_id}")

    def update_job(self, job_id: int, **fields) -> dict:
        return self._request("PUT", f"/jobs/{job_id}", json=fields)

    def delete_job(self, job_id: int) -> None:
        return self._request("DELETE", f"/jobs/{job_id}")

    def update_job_status(self, job_id: int, status: str) -> dict:
        return self._request("PUT", f"/jobs/{job_id}/status", json={"status": status})

    def apply_to_job(self, job_id: int) -> dict:
        return self._request("POST", f"/jobs/{job_id}/apply")
