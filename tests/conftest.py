import pytest
from fastapi.testclient import TestClient

from catalog_site import schemas
from catalog_site.core.config import Settings
from catalog_site.core.security import configure_password_hashing
from catalog_site.db.memory import MemoryStorage
from catalog_site.db.session import build_sql_storage
from catalog_site.main import create_app

SECRET_KEY = "test-secret-key-that-is-definitely-long-enough"

# Keep bcrypt fast for the whole suite.
configure_password_hashing(4)

USERS = [
    # (username, password, role); ids follow insertion order
    ("root", "root-password", "super_admin"),
    ("guarded", "guarded-password", "super_admin"),
    ("editor", "editor-password", "manager"),
]


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": SECRET_KEY,
        "environment": "production",
        "storage_backend": "memory",
        "seed_default_content": False,
        "password_hash_rounds": 4,
        "protected_user_id": 2,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def add_users(store):
    for username, password, role in USERS:
        store.create_user(schemas.UserCreate(username=username, password=password, role=role))
    return store


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "sql"])
def any_storage(request):
    if request.param == "memory":
        return MemoryStorage()
    return build_sql_storage("sqlite://")


@pytest.fixture()
def settings():
    return make_settings()


@pytest.fixture()
def storage():
    return add_users(MemoryStorage())


@pytest.fixture()
def app(settings, storage):
    return create_app(settings=settings, storage=storage)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_client():
    """Build a client around a custom storage and/or settings overrides."""

    def _make(storage=None, raise_server_exceptions=True, **overrides) -> TestClient:
        store = storage if storage is not None else add_users(MemoryStorage())
        app = create_app(settings=make_settings(**overrides), storage=store)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture()
def login(client):
    def _login(username: str, password: str):
        return client.post("/api/login", json={"username": username, "password": password})

    return _login


@pytest.fixture()
def super_admin_client(client, login):
    assert login("root", "root-password").status_code == 200
    return client


@pytest.fixture()
def manager_client(client, login):
    assert login("editor", "editor-password").status_code == 200
    return client
