"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch
the real one. Tables are created before each test and
dropped after it, so every test starts from an empty ledger.
"""

import os

# Must be set before finance_ledger.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from finance_ledger.context import LedgerContext
from finance_ledger.main import app
from finance_ledger.models.base import Base, get_db
from finance_ledger.models.enums import AccountType
from finance_ledger.schemas.account import AccountCreate
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.unit_of_work import UnitOfWork


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

COMPANY_ID = 1
OTHER_COMPANY_ID = 2
USER_ID = 7


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def other_session():
    """A second, independent session on the same database."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def ctx():
    return LedgerContext(company_id=COMPANY_ID, user_id=USER_ID)


@pytest.fixture
def other_ctx():
    return LedgerContext(company_id=OTHER_COMPANY_ID, user_id=USER_ID)


@pytest.fixture
def uow(db_session):
    return UnitOfWork(db_session)


@pytest.fixture
def ledger(uow):
    return LedgerService(uow)


@pytest.fixture
def make_account(db_session, ctx):
    """
    Factory for committed accounts.

    Usage: make_account("1000", AccountType.ASSET, name="Cash")
    """
    def _make(code, account_type=AccountType.ASSET, name=None, context=None):
        account = AccountService(db_session).create_account(
            context or ctx,
            AccountCreate(code=code, name=name or code, account_type=account_type),
        )
        db_session.commit()
        return account
    return _make


@pytest.fixture
def client(db_session):
    """
    Provide a test client bound to the test session.

    get_db is overridden so the app uses the test database
    instead of the configured one.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    """Tenant headers every ledger endpoint requires."""
    return {"X-Company-ID": str(COMPANY_ID), "X-User-ID": str(USER_ID)}
