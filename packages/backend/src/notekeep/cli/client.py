"""Async HTTP client for the Notekeep API.

Learn: The client never stores a credential. Every call that needs one
takes the access token as an argument and sends it as its own
Authorization header, so one client can serve several accounts at once
(tests, multi-session tools) without one user's token leaking into
another user's request.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

DEFAULT_API_URL = "http://localhost:8000/api/v1"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class NotekeepClient:
    """Thin wrapper over httpx.AsyncClient. Use as an async context manager."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "NotekeepClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self, method: str, path: str, token: Optional[str] = None, **kwargs
    ) -> Any:
        headers = _auth(token) if token is not None else None
        r = await self._http.request(method, path, headers=headers, **kwargs)
        if r.is_error:
            try:
                body = r.json()
            except ValueError:
                body = r.text
            detail = body.get("detail", body) if isinstance(body, dict) else body
            raise ApiError(r.status_code, detail)
        return r.json() if r.content else None

    # ─── Accounts ───────────────────────────────────────

    async def register(self, email: str, name: str, password: str) -> dict:
        return await self._request(
            "POST",
            "/auth/register",
            json={"email": email, "name": name, "password": password},
        )

    async def login(self, email: str, password: str) -> dict:
        """Returns {access_token, token_type, expires_at, user}."""
        return await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )

    async def validate_token(self, token: str) -> dict:
        return await self._request(
            "POST", "/auth/validate-token", json={"token": token}
        )

    async def me(self, token: str) -> dict:
        return await self._request("GET", "/auth/me", token=token)

    # ─── Notes ──────────────────────────────────────────

    async def list_notes(self, token: str) -> list[dict]:
        return await self._request("GET", "/notes", token=token)

    async def get_note(self, token: str, note_id: str) -> dict:
        return await self._request("GET", f"/notes/{note_id}", token=token)

    async def create_note(
        self,
        token: str,
        title: str,
        content: str,
        category: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> dict:
        body: dict = {"title": title, "content": content}
        if category is not None:
            body["category"] = category
        if tags is not None:
            body["tags"] = tags
        return await self._request("POST", "/notes", token=token, json=body)

    async def update_note(self, token: str, note_id: str, **changes) -> dict:
        """Send only the given fields; everything else on the note is kept."""
        return await self._request(
            "PATCH", f"/notes/{note_id}", token=token, json=changes
        )

    async def delete_note(self, token: str, note_id: str) -> dict:
        return await self._request("DELETE", f"/notes/{note_id}", token=token)

    async def add_tag(self, token: str, note_id: str, tag: str) -> dict:
        """Append `tag` unless the note already has it."""
        tag = tag.strip()
        note = await self.get_note(token, note_id)
        if not tag or tag in note["tags"]:
            return note
        return await self.update_note(token, note_id, tags=[*note["tags"], tag])
