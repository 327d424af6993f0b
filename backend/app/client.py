"""
Userdesk API Client
Thin requests-based client for the Userdesk REST API.

Every authenticated call takes the bearer token as an argument and sends it on
that request only; the shared session never carries an Authorization header.
"""

from typing import Any, Dict, Optional

import requests


class UserdeskAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, errors: Optional[list] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


class UserdeskClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        resp = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )
        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.ok:
            message = body.get("message") if isinstance(body, dict) else None
            errors = body.get("errors") if isinstance(body, dict) else None
            raise UserdeskAPIError(resp.status_code, message or resp.reason, errors)
        return body

    # Public

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/api/users", json={"name": name, "email": email, "password": password})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Returns ``{token, user}``. Keep the token and pass it to later calls."""
        return self._request("POST", "/api/users/login", json={"email": email, "password": password})

    # Authenticated

    def me(self, token: str) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/me", token=token)

    def create_user(self, token: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/users", token=token, json=fields)

    def list_users(
        self,
        token: str,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        role: Optional[str] = None,
        active: Optional[bool] = None,
        sort: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        if role:
            params["role"] = role
        if active is not None:
            params["active"] = "true" if active else "false"
        if sort:
            params["sort"] = sort
        return self._request("GET", "/api/users", token=token, params=params)

    def get_user(self, token: str, user_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/users/{user_id}", token=token)

    def update_user(self, token: str, user_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/api/users/{user_id}", token=token, json=fields)

    def toggle_active(self, token: str, user: Dict[str, Any]) -> Dict[str, Any]:
        return self.update_user(token, user["id"], {"isActive": not user["isActive"]})

    def delete_user(self, token: str, user_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/users/{user_id}", token=token)
