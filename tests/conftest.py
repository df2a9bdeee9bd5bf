import pytest
from fastapi.testclient import TestClient

from telemed.api.deps import get_backend_transport
from telemed.core.redis_client import get_redis
from telemed.main import app

from .backend_stub import HostedBackendStub


class InMemoryRedis:
    """The handful of Redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])


@pytest.fixture
def backend():
    stub = HostedBackendStub()
    yield stub
    stub.close()


@pytest.fixture
def redis_store():
    return InMemoryRedis()


@pytest.fixture
def client(backend, redis_store):
    app.dependency_overrides[get_backend_transport] = lambda: backend.transport
    app.dependency_overrides[get_redis] = lambda: redis_store
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def patient(backend):
    return backend.add_user("patient@example.com", first_name="Jane", last_name="Doe", role="patient")


@pytest.fixture
def doctor(backend):
    return backend.add_user(
        "doctor@example.com",
        first_name="Gregory",
        last_name="House",
        role="doctor",
        license_number="MD-1001",
        specialization="general_practice",
    )

