import pytest
from fastapi.testclient import TestClient

from vipgate.application.services.entitlement_service import EntitlementPolicy, EntitlementService
from vipgate.core.app_factory import create_application
from vipgate.core.config import Settings
from vipgate.core.security import PasswordHasher
from vipgate.infrastructure.persistence.memory import InMemoryKeyValueStore
from vipgate.infrastructure.repositories.account_repository import AccountRepository

START = 1_700_000_000
DAY = 86400
ADMIN_SECRET = "admin-s3cret"
DEVICE_KEY = "device-k3y"

_ENV_KEYS = (
    "ADMIN_SECRET",
    "DEVICE_SHARED_KEY",
    "ACTIVATION_POLICY",
    "DEFAULT_TRIAL_DAYS",
    "DEVICE_BINDING",
    "ENFORCE_SINGLE_DEVICE",
    "STORE_BACKEND",
    "DATABASE_PATH",
    "LIST_PAGE_SIZE",
    "PASSWORD_HASH_ROUNDS",
    "CORS_ALLOW_ORIGINS",
)


class FakeClock:
    def __init__(self, start: int = START) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int = 0, days: int = 0) -> None:
        self.now += seconds + days * DAY


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(store):
    return AccountRepository(store, page_size=2)


@pytest.fixture
def make_service(repository, clock):
    def factory(**policy):
        return EntitlementService(
            repository,
            policy=EntitlementPolicy(**policy),
            password_hasher=PasswordHasher(rounds=4),
            clock=clock,
        )

    return factory


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def make_client(clean_env, store, clock):
    clients = []

    def factory(**env):
        values = {
            "ADMIN_SECRET": ADMIN_SECRET,
            "DEVICE_SHARED_KEY": DEVICE_KEY,
            "STORE_BACKEND": "memory",
            "PASSWORD_HASH_ROUNDS": "4",
        }
        values.update(env)
        for key, value in values.items():
            clean_env.setenv(key, value)
        app = create_application(Settings(), store=store, clock=clock)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client(DEVICE_BINDING="true")


@pytest.fixture
def admin_headers():
    return {"X-Admin-Secret": ADMIN_SECRET}
