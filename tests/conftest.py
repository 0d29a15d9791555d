# tests/conftest.py
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import os
import uuid
from typing import Generator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("ASYNC_DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from supplier_api.main import app
from supplier_api.db.session import Base
from supplier_api.core.security import get_password_hash
from supplier_api.models.supplier import Supplier
from supplier_api.models.user import User, UserClaim
from supplier_api.services.identity_service import normalize_email

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
USER_PASSWORD = "User@1234"

sync_engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


# ---------- Fixtures ----------
@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create the SQLite tables once per test session."""
    Base.metadata.create_all(bind=sync_engine)
    yield
    Base.metadata.drop_all(bind=sync_engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with sync_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest_asyncio.fixture(scope="function")
async def client():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _make_user(session: Session, *claims: str) -> User:
    email = f"user-{uuid.uuid4()}@example.com"
    user = User(
        email=email,
        normalized_email=normalize_email(email),
        hashed_password=get_password_hash(USER_PASSWORD),
        email_confirmed=True,
    )
    session.add(user)
    session.flush()
    for claim_type in claims:
        session.add(UserClaim(user_id=user.id, claim_type=claim_type, claim_value="true"))
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(scope="function")
def normal_user(db_session: Session) -> User:
    """User without any claim."""
    return _make_user(db_session)


@pytest.fixture(scope="function")
def admin_user(db_session: Session) -> User:
    """User holding the supplier-delete claim."""
    return _make_user(db_session, "DeleteSupplier")


async def _login(client: httpx.AsyncClient, email: str) -> str:
    resp = await client.post("/login", json={"email": email, "password": USER_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


@pytest_asyncio.fixture(scope="function")
async def user_token(client: httpx.AsyncClient, normal_user: User) -> str:
    return await _login(client, normal_user.email)


@pytest_asyncio.fixture(scope="function")
async def admin_token(client: httpx.AsyncClient, admin_user: User) -> str:
    return await _login(client, admin_user.email)


@pytest.fixture(scope="function")
def supplier(db_session: Session) -> Supplier:
    row = Supplier(name="Existing Supplier", document="11222333000181", active=True)
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row
