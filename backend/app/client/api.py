"""
HTTP client for the Whisper Box API.

Every endpoint answers with the {success, message, ...} envelope; non-2xx
answers are raised as ApiError carrying the status and the server's message,
so callers can show it verbatim.
"""
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, body: Optional[dict] = None):
        self.status_code = status_code
        self.message = message
        self.body = body or {}
        super().__init__(f"{status_code}: {message}")


@dataclass
class CheckResult:
    username: str
    available: Optional[bool]  # None when the name is malformed
    message: str


class FeedbackClient:
    """
    Thin async wrapper over httpx.AsyncClient.

    Pass an existing client (e.g. bound to an ASGITransport in tests) or a
    base_url. sign_in() keeps the session token for later owner-only calls.
    """

    def __init__(self, http: Optional[httpx.AsyncClient] = None, base_url: str = "http://localhost:8000"):
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=30)
        self.token: Optional[str] = None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "FeedbackClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # ---------- plumbing ----------
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _call(self, method: str, path: str, **kwargs: Any) -> dict:
        resp = await self._http.request(method, path, headers=self._headers(), **kwargs)
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.is_error:
            raise ApiError(resp.status_code, body.get("message") or resp.reason_phrase, body)
        return body

    # ---------- account ----------
    async def sign_up(self, username: str, email: str, password: str) -> str:
        body = await self._call("POST", "/api/sign-up",
                                json={"username": username, "email": email, "password": password})
        return body["message"]

    async def verify_code(self, username: str, code: str) -> str:
        body = await self._call("POST", "/api/verify-code", json={"username": username, "code": code})
        return body["message"]

    async def check_username(self, username: str) -> CheckResult:
        """Never raises for "taken" or "malformed"; both come back as a CheckResult."""
        try:
            body = await self._call("GET", "/api/check-username-unique", params={"username": username})
        except ApiError as e:
            if e.status_code != 400:
                raise
            return CheckResult(username, e.body.get("available"), e.message)
        return CheckResult(username, body.get("available", True), body["message"])

    async def sign_in(self, identifier: str, password: str) -> dict:
        body = await self._call("POST", "/api/sign-in", json={"identifier": identifier, "password": password})
        self.token = body["accessToken"]
        return body["user"]

    async def sign_out(self) -> None:
        await self._call("POST", "/api/sign-out")
        self.token = None

    async def me(self) -> dict:
        return (await self._call("GET", "/api/me"))["user"]

    async def delete_account(self) -> None:
        await self._call("DELETE", "/api/account")
        self.token = None

    # ---------- dashboard ----------
    async def get_accepting(self) -> bool:
        return (await self._call("GET", "/api/accept-messages"))["isAcceptingMessages"]

    async def set_accepting(self, value: bool) -> bool:
        body = await self._call("POST", "/api/accept-messages", json={"acceptMessages": value})
        return body["isAcceptingMessages"]

    async def get_messages(self, category: Optional[str] = None) -> List[dict]:
        params = {"category": category} if category else None
        return (await self._call("GET", "/api/get-messages", params=params))["messages"]

    async def delete_message(self, message_id: str) -> str:
        return (await self._call("DELETE", f"/api/delete-message/{message_id}"))["message"]

    # ---------- public ----------
    async def profile(self, username: str) -> dict:
        return await self._call("GET", f"/api/u/{username}")

    async def send_message(self, username: str, content: str, category: Optional[str] = None) -> str:
        payload = {"username": username, "content": content}
        if category:
            payload["category"] = category
        return (await self._call("POST", "/api/send-message", json=payload))["message"]

    async def stream_suggestions(self, prompt: Optional[str] = None) -> AsyncIterator[str]:
        """
        Yield suggestion text as it arrives. Breaking out of the loop (or
        cancelling the consuming task) closes the HTTP stream.
        """
        json_body = {"prompt": prompt} if prompt else None
        async with self._http.stream("POST", "/api/suggest-messages", json=json_body) as resp:
            if resp.is_error:
                await resp.aread()
                try:
                    message = resp.json().get("message", resp.reason_phrase)
                except ValueError:
                    message = resp.reason_phrase
                raise ApiError(resp.status_code, message)
            async for chunk in resp.aiter_text():
                if chunk:
                    yield chunk
