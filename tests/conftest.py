import os

os.environ["SECRET_KEY"] = "test-secret"
os.environ["MONGO_DB_NAME"] = "social_app_test"
# mongomock has no sessions
os.environ["MONGO_TRANSACTIONS"] = "false"

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from social_app.config import get_settings, reset_settings_cache

reset_settings_cache()

from social_app.main import create_app, ensure_indexes  # noqa: E402
from social_app.utils import security  # noqa: E402
from social_app.utils.websocket_manager import Connection  # noqa: E402


class RecordingWebSocket:
    """Stands in for a starlette WebSocket; keeps every frame sent."""

    def __init__(self, fail: bool = False) -> None:
        self.sent = []
        self.fail = fail

    async def send_json(self, data) -> None:
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent")
        self.sent.append(data)


@pytest.fixture(scope="session", autouse=True)
def fast_password_hashing():
    security.pwd_context.update(pbkdf2_sha256__rounds=1000)
    yield


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mongo_client():
    return AsyncMongoMockClient()


@pytest.fixture
async def db(mongo_client):
    database = mongo_client[get_settings().mongo_db_name]
    await ensure_indexes(database)
    return database


@pytest.fixture
def sync_db(mongo_client):
    """Database handle for synchronous tests; await queries with asyncio.run."""
    return mongo_client[get_settings().mongo_db_name]


@pytest.fixture
def make_connection():
    def factory(fail: bool = False):
        websocket = RecordingWebSocket(fail=fail)
        return Connection(websocket), websocket

    return factory


@pytest.fixture
def app(mongo_client):
    return create_app(mongo_client=mongo_client)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user, log them in and return id, token and auth headers."""

    def factory(username: str) -> dict:
        email = f"{username}@example.com"
        password = "Secret123"
        response = client.post("/auth/register", json={"username": username, "email": email, "password": password})
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]
        token = client.post("/auth/login", json={"email": email, "password": password}).json()["access_token"]
        return {"id": user_id, "username": username, "token": token, "headers": {"Authorization": f"Bearer {token}"}}

    return factory
