"""
Pytest fixtures for testing
"""
import pytest
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from bankcore.api.deps import get_db
from bankcore.application.account_cache import AccountCache, get_account_cache
from bankcore.application.events import AccountEventBus
from bankcore.application.transaction_history import TransactionHistory, get_transaction_history
from bankcore.domain.account import Account
from bankcore.domain.user import User
from bankcore.infrastructure.db.session import Base
from bankcore.infrastructure.db import models  # noqa: F401  (registers tables on Base.metadata)
from bankcore.infrastructure.db.models import AccountRecord, UserRecord
from bankcore.main import app


@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine for tests

    StaticPool + check_same_thread=False: одно соединение на все потоки,
    чтобы TestClient (threadpool) видел те же таблицы.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def event_bus():
    """Fresh event bus (no listeners)"""
    return AccountEventBus()


@pytest.fixture
def account_cache():
    return AccountCache()


@pytest.fixture
def history():
    return TransactionHistory()


@pytest.fixture
def seed_user(db_session):
    """Insert a user row directly; returns a factory"""
    def _seed(user_id: int, name: str = "Test User", email: str = "user@bank.local") -> User:
        db_session.add(UserRecord(id=user_id, name=name, type="BASIC", email=email, active=True))
        db_session.commit()
        return User(id=user_id, name=name, type="BASIC", number=None, email=email, active=True)
    return _seed


@pytest.fixture
def seed_account(db_session):
    """Insert an account row directly (no owner check); returns a factory"""
    def _seed(account_id: int, owner_id: int, balance: str) -> Account:
        db_session.add(AccountRecord(id=account_id, owner_id=owner_id, balance=Decimal(balance)))
        db_session.commit()
        return Account(id=account_id, owner_id=owner_id, balance=Decimal(balance))
    return _seed


@pytest.fixture
def client(db_engine):
    """
    Test client для FastAPI на SQLite-движке теста

    Кэш и история - свежие на каждый тест (lru_cache сбрасывается).
    """
    SessionLocal = sessionmaker(bind=db_engine)

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    get_account_cache.cache_clear()
    get_transaction_history.cache_clear()
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
