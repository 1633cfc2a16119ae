import os
import uuid
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from codemarket.config import settings as default_settings
from codemarket.core import db as db_module
from codemarket.core.security import create_access_token, hash_password
from codemarket.main import create_app
from codemarket.models.user import User


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def app(db, tmp_path):
    """
    Application built for one test: temporary upload directory and
    verification that runs as soon as a project is queued.
    """
    test_settings = default_settings.model_copy(update={
        "upload_dir": str(tmp_path / "uploads"),
        "verification_delay_sec": 0,
        "verification_retry_backoff_sec": 0,
    })
    application = create_app(test_settings)
    (tmp_path / "uploads").mkdir()
    await application.state.verification_queue.start()
    yield application
    await application.state.verification_queue.stop()


@pytest_asyncio.fixture
async def client(app):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def storage(app):
    return app.state.storage


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(role: str = "buyer", password: str = "UserPass!23") -> User:
        suffix = uuid.uuid4().hex[:6]
        return await User.create(
            username=f"user_{suffix}",
            email=f"{suffix}@example.com",
            password_hash=hash_password(password),
            full_name=f"User {suffix}",
            role=role,
        )

    return _create_user


@pytest.fixture
def auth_headers():
    """
    Build an Authorization header for a user without going through /login.
    """

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest_asyncio.fixture
async def create_project(storage, app):
    """
    Factory fixture to list a project directly through the storage layer,
    with its code archive written to the upload directory.
    """
    upload_dir = app.state.settings.upload_dir

    async def _create_project(seller: User, **overrides):
        filename = f"{uuid.uuid4().hex}.zip"
        with open(os.path.join(upload_dir, filename), "wb") as fh:
            fh.write(b"PK\x03\x04 fake archive")
        data = {
            "title": "Todo App",
            "description": "A small todo list application",
            "price": Decimal("19.99"),
            "category": "web",
            "technologies": ["React", "Node.js"],
            "seller_id": seller.id,
            "code_file_url": f"/uploads/{filename}",
        }
        data.update(overrides)
        return await storage.create_project(data)

    return _create_project


@pytest_asyncio.fixture
async def buy(client, auth_headers):
    """
    Run the payment intent + confirmation flow and return the confirm response.
    """

    async def _buy(user: User, project_id: int):
        headers = auth_headers(user)
        intent = await client.post("/api/create-payment-intent", json={"projectId": project_id}, headers=headers)
        assert intent.status_code == 200, intent.text
        return await client.post(
            "/api/confirm-purchase",
            json={"paymentIntentId": intent.json()["paymentIntentId"], "projectId": project_id},
            headers=headers,
        )

    return _buy
