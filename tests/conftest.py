"""Shared fixtures: an in-memory database per test and an HTTP client bound to it."""
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from mhyasi.core.database import (create_db_engine, get_db, init_db,
                                  make_session_factory)
from mhyasi.core.security import create_access_token, hash_password
from mhyasi.main import app
from mhyasi.models import Product, User

NOW = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000
PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def factory(
        username: str,
        role: str = "user",
        unlocked_until: Optional[int] = None,
    ) -> User:
        user = User(
            username=username,
            password_hash=hash_password(PASSWORD),
            role=role,
            shop_name=f"{username} shop",
            unlocked_until=unlocked_until,
        )
        db.add(user)
        db.commit()
        return user

    return factory


@pytest.fixture
def make_product(db):
    def factory(user: User, name: str = "Rice", qty: int = 10, price: float = 2.5):
        product = Product(user_id=user.id, name=name, qty=qty, price=price)
        db.add(product)
        db.commit()
        return product

    return factory


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="admin")


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}
