# tests/conftest.py
# Test setup: temporary SQLite DB, seeded reference data, and dependency
# override for sessions.

import sys
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine, select

# Ensure repo root on sys.path so "import famfin" works without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import famfin.models as _models  # noqa: F401,E402  # registers tables on SQLModel.metadata
from famfin.db import create_db_and_tables, enable_sqlite_foreign_keys, get_session  # noqa: E402
from famfin.main import app as fastapi_app  # noqa: E402
from famfin.models import BankAccount, Category, TransactionType, User  # noqa: E402
from famfin.seed import seed_categories, seed_roles  # noqa: E402
from famfin.schemas import BankAccountCreate  # noqa: E402
from famfin.services.accounts import create_bank_account  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture()
def tmp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test_famfin.db"


@pytest.fixture()
def test_engine(tmp_db_path: Path):
    # File-based SQLite so multiple connections share the same DB
    url = f"sqlite:///{tmp_db_path}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    create_db_and_tables(engine)
    with Session(engine) as s:
        seed_roles(s)
        seed_categories(s)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(test_engine):
    with Session(test_engine) as s:
        yield s


@pytest.fixture()
def make_client(test_engine):
    """Factory for TestClients sharing one DB; each keeps its own session cookie."""

    def _get_test_session():
        with Session(test_engine) as s:
            yield s

    fastapi_app.dependency_overrides[get_session] = _get_test_session
    clients = []

    def _make():
        c = TestClient(fastapi_app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client):
    return make_client()


# ---------- API helpers ----------


def signup(client, name="Ana Silva", email="ana@home.net", password=PASSWORD):
    """Create an account; the client is signed in afterwards."""
    r = client.post(
        "/auth/signup", json={"name": name, "email": email, "password": password}
    )
    assert r.status_code == 201, r.text
    return r.json()


def expense_category_id(client, name="Groceries"):
    r = client.get("/categories", params={"type": "EXPENSE"})
    assert r.status_code == 200, r.text
    return next(c["id"] for c in r.json() if c["name"] == name)


def new_account(client, name="Checking", initial="1000", **extra):
    body = {"name": name, "institution": "First Bank", "initialBalance": initial}
    body.update(extra)
    r = client.post("/bank-accounts", json=body)
    assert r.status_code == 201, r.text
    return r.json()


# ---------- Service helpers ----------


def make_user(session: Session, name="Ana", email="ana@home.net") -> User:
    # services never check the hash, so skip bcrypt here
    user = User(name=name, email=email, hashed_password="x")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_account(session: Session, user: User, initial="1000") -> BankAccount:
    return create_bank_account(
        session,
        user.id,
        BankAccountCreate(
            name="Checking", institution="First Bank", initial_balance=Decimal(initial)
        ),
    )


def default_category(session: Session, type=TransactionType.EXPENSE) -> Category:
    return session.exec(
        select(Category).where(Category.is_default.is_(True), Category.type == type)
    ).first()
