# tests/test_initial_data.py
import pytest
from sqlalchemy import func, select

from supplier_api.core.config import settings
from supplier_api.initial_data import create_initial_admin_user
from supplier_api.models.user import User

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin@1234"


@pytest.fixture
def admin_env(monkeypatch):
    monkeypatch.setattr(settings, "INITIAL_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setattr(settings, "INITIAL_ADMIN_PASSWORD", ADMIN_PASSWORD)


def _user_count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(User)).scalar_one()


@pytest.mark.asyncio
async def test_skipped_when_not_configured(monkeypatch, db_session):
    monkeypatch.setattr(settings, "INITIAL_ADMIN_EMAIL", None)
    monkeypatch.setattr(settings, "INITIAL_ADMIN_PASSWORD", None)
    assert await create_initial_admin_user() is None
    assert _user_count(db_session) == 0


@pytest.mark.asyncio
async def test_initial_admin_can_delete_suppliers(admin_env, client, supplier):
    admin = await create_initial_admin_user()
    assert admin is not None
    assert [(c.claim_type, c.claim_value) for c in admin.claims] == [(settings.SUPPLIER_DELETE_CLAIM, "true")]

    login = await client.post("/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]

    resp = await client.delete(f"/supplier/{supplier.id}", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 204


@pytest.mark.asyncio
async def test_initial_admin_is_created_once(admin_env, db_session):
    first = await create_initial_admin_user()
    second = await create_initial_admin_user()
    assert first.id == second.id
    assert _user_count(db_session) == 1


@pytest.mark.asyncio
async def test_weak_password_is_logged_not_raised(monkeypatch, db_session, caplog):
    monkeypatch.setattr(settings, "INITIAL_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setattr(settings, "INITIAL_ADMIN_PASSWORD", "adminpass")

    with caplog.at_level("ERROR", logger="supplier_api.initial_data"):
        assert await create_initial_admin_user() is None

    assert _user_count(db_session) == 0
    record = next(r for r in caplog.records if r.name == "supplier_api.initial_data")
    assert "PasswordRequiresDigit" in record.reasons
    assert "PasswordRequiresUpper" in record.reasons
