"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import date
from decimal import Decimal
import uuid

from app.database import Base, get_db
from app.main import app
from app.models.account import Account, AccountType
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.recurring import RecurringTransaction, Frequency, RecurringStatus
from app.seed import seed_categories
from app.services.detection_types import TransactionRecord


USER_ID = "user-123"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_account(db_session):
    """Create a checking account owned by USER_ID."""
    account = Account(
        id=str(uuid.uuid4()),
        user_id=USER_ID,
        name="Test Checking",
        account_type=AccountType.depository,
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def categories(db_session):
    """Seed system categories and return a label -> id mapping."""
    seed_categories(db_session)
    return {c.label: c.id for c in db_session.query(Category).all()}


@pytest.fixture
def add_transaction(db_session, sample_account):
    """Factory adding a posted outflow to the sample account."""
    def _add(merchant_name, txn_date, amount, category_id=None, **kwargs):
        txn = Transaction(
            id=str(uuid.uuid4()),
            date=txn_date,
            amount=Decimal(str(amount)),
            merchant_name=merchant_name,
            description=kwargs.pop("description", (merchant_name or "").upper()),
            account_id=kwargs.pop("account_id", sample_account.id),
            category_id=category_id,
            icon_url=kwargs.pop("icon_url", None),
            pending=kwargs.pop("pending", False),
        )
        db_session.add(txn)
        db_session.commit()
        return txn
    return _add


@pytest.fixture
def make_record():
    """Factory for in-memory TransactionRecords."""
    def _make(txn_date, amount, merchant_name="Netflix", category_id=None, **kwargs):
        return TransactionRecord(
            id=kwargs.pop("id", str(uuid.uuid4())),
            amount=Decimal(str(amount)),
            date=txn_date,
            merchant_name=merchant_name,
            description=kwargs.pop("description", (merchant_name or "").upper()),
            account_id=kwargs.pop("account_id", "acc-1"),
            category_id=category_id,
            icon_url=kwargs.pop("icon_url", None),
        )
    return _make


@pytest.fixture
def sample_recurring(db_session):
    """Create a stored Netflix recurring transaction."""
    record = RecurringTransaction(
        id=str(uuid.uuid4()),
        user_id=USER_ID,
        merchant_name="Netflix",
        description="NETFLIX.COM",
        amount=Decimal("15.99"),
        frequency=Frequency.monthly.value,
        status=RecurringStatus.active.value,
        last_date=date(2024, 1, 15),
        next_date=date(2024, 2, 15),
        confidence=Decimal("0.95"),
    )
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record
