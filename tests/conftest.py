import os
import tempfile
from decimal import Decimal

# configure before any bank_management import reads the environment
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="bank_management_logs_"))
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from bank_management.core.id_generator import SequentialIdGenerator, get_id_generator
from bank_management.core.security import get_current_admin
from bank_management.database import create_db_and_tables, get_session
from bank_management.main import app
from bank_management.models.enums import AccountType
from bank_management.schemas.account import AccountCreate
from bank_management.services import accounts as account_service

TEST_ACTOR = "tester"


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def ids():
    return SequentialIdGenerator()


@pytest.fixture
def make_account(session, ids):
    """Factory creating accounts through the service layer."""
    counter = {"n": 0}

    def _make(owner_name="Alice Smith", balance="0", account_type=AccountType.savings, email=None, **extra):
        counter["n"] += 1
        data = AccountCreate(
            owner_name=owner_name,
            email=email or f"user{counter['n']}@example.com",
            account_type=account_type,
            initial_balance=Decimal(balance),
            **extra,
        )
        return account_service.create_account(session, data, ids, actor=TEST_ACTOR)

    return _make


@pytest.fixture
def client(session, ids):
    """API client wired to the test session, with authentication bypassed."""
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_id_generator] = lambda: ids
    app.dependency_overrides[get_current_admin] = lambda: TEST_ACTOR

    yield TestClient(app)

    app.dependency_overrides.clear()
