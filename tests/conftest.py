import fnmatch

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.config import Settings
from app.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET_KEY="test-secret",
        BCRYPT_ROUNDS=4,
        REDIS_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


def register(client, email="alice@example.com", name="Alice", password="secret123"):
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def auth_headers(client):
    token = register(client)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(client):
    token = register(client, email="bob@example.com", name="Bob")["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    def _register(email, name="Someone", password="secret123"):
        return register(client, email=email, name=name, password=password)
    return _register


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering the calls RedisCache makes."""

    def __init__(self):
        self.store = {}
        self.expiries = {}
        self.hits = 0

    async def get(self, key):
        if key in self.store:
            self.hits += 1
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiries[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.expiries.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self):
        self.closed = True


class BrokenRedis(FakeRedis):
    """Every command fails the way a dropped connection does."""

    async def get(self, key):
        raise RedisConnectionError("redis unavailable")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("redis unavailable")

    async def scan_iter(self, match="*"):
        raise RedisConnectionError("redis unavailable")
        yield


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def broken_redis():
    return BrokenRedis()
