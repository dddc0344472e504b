import os
import uuid

TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("OPENAI_API_KEY", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core import db as db_module
from app.core.security import hash_password
from app.main import app
from app.models.user import User
from app.services import mailer as mailer_module

db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if db_module.is_connected():
        await db_module.close_db()
    await db_module.init_db(generate_schemas=True)


@pytest_asyncio.fixture
async def db():
    """Fresh database for tests that call services directly."""
    await _init_test_db()
    yield
    await db_module.close_db()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """
    Replace the Resend call with an in-memory outbox.
    Each entry is {"email", "username", "code"}; set `outbox.fail = True`
    to simulate a delivery failure.
    """

    class Outbox(list):
        fail = False

        def code_for(self, username: str) -> str:
            return [m for m in self if m["username"] == username][-1]["code"]

    box = Outbox()

    async def fake_send(email: str, username: str, code: str):
        if box.fail:
            return mailer_module.MailResult(False, "Failed to send verification mail")
        box.append({"email": email, "username": username, "code": code})
        return mailer_module.MailResult(True, "Verification mail sent successfully")

    monkeypatch.setattr(mailer_module, "send_verification_email", fake_send)
    return box


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create verified (active) users directly via ORM.
    """

    async def _create_user(
        username: str | None = None,
        password: str = "UserPass!23",
        accepting: bool = True,
    ) -> tuple[User, str]:
        username = username or f"user_{uuid.uuid4().hex[:6]}"
        user = await User.create(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            is_verified=True,
            active_username=username,
            is_accepting_messages=accepting,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the sign-in endpoint.
    """

    async def _get_headers(identifier: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/sign-in",
            json={"identifier": identifier, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
