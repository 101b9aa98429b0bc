import os

import pytest
from fastapi.testclient import TestClient

# In-memory SQLite so app import and the API tests need no running Postgres
os.environ.setdefault("DATABASE_URL", "sqlite://")

from apps.api.main import create_app  # noqa: E402
from apps.core.db import Base, SessionLocal, engine  # noqa: E402
from apps.core.feature_flags import reset_feature_flags  # noqa: E402
from apps.market import models  # noqa: E402,F401
from apps.market.caching import create_market_caches  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def _fresh_flags():
    reset_feature_flags()
    yield
    reset_feature_flags()


@pytest.fixture
def db_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(db_tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def caches(clock):
    return create_market_caches(clock=clock)


@pytest.fixture
def client(db_tables, caches):
    # no context manager: lifespan (init_db and sweeper tasks) stays off in tests
    return TestClient(create_app(caches=caches))


def register_shop(client, mobile="9000000001", shop_name="Sharma Kirana", latitude=26.85, longitude=80.95, **extra):
    payload = {
        "name": "Ramesh",
        "mobile": mobile,
        "password": "secret",
        "shop_name": shop_name,
        "category": "Grocery",
        "village": "Rampur",
        "city": "Lucknow",
        "latitude": latitude,
        "longitude": longitude,
    }
    payload.update(extra)
    resp = client.post("/api/register/shopkeeper", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def register_user(client, mobile="8000000001", name="Sita"):
    resp = client.post("/api/register/user", json={"name": name, "mobile": mobile, "password": "secret"})
    assert resp.status_code == 200, resp.text
    return resp.json()


def add_product(client, shop_id, name, price=20.0, **extra):
    payload = {"shop_id": shop_id, "name": name, "price": price}
    payload.update(extra)
    resp = client.post("/api/products", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()
