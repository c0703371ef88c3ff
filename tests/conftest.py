"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from finwell_gateway.api.main import create_app
from finwell_gateway.api.dependencies import get_capabilities, get_session_cache
from finwell_gateway.infrastructure.capabilities import Capabilities
from finwell_gateway.infrastructure.database.models import Base
from finwell_gateway.infrastructure.database.session import build_engine, get_db
from finwell_gateway.domain.models import Account, Goal, Snapshot, Transaction
from finwell_gateway.services.session_cache import SessionCache


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Wednesday, outside the Monday refresh window
NOW = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_cache() -> SessionCache:
    return SessionCache()


@pytest.fixture
def client(db: Session, session_cache: SessionCache) -> TestClient:
    """Create FastAPI test client with test database, persistence on, remote generation off"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_capabilities] = lambda: Capabilities(persistence=True, remote_generation=False)
    app.dependency_overrides[get_session_cache] = lambda: session_cache
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return NOW


class FakeSource:
    """In-memory snapshot source; a collection set to an exception raises it"""

    def __init__(self, accounts=None, goals=None, transactions=None):
        self.accounts = accounts or []
        self.goals = goals or []
        self.transactions = transactions or []
        self.calls = 0

    async def _give(self, value):
        if isinstance(value, Exception):
            raise value
        return list(value)

    async def get_accounts(self, user_id: str) -> List[Account]:
        self.calls += 1
        return await self._give(self.accounts)

    async def get_goals(self, user_id: str) -> List[Goal]:
        return await self._give(self.goals)

    async def get_transactions(self, user_id: str) -> List[Transaction]:
        return await self._give(self.transactions)


@pytest.fixture
def fake_source() -> Callable[..., FakeSource]:
    return FakeSource


@pytest.fixture
def make_snapshot(now: datetime) -> Callable[..., Snapshot]:
    """Factory for snapshots taken at the fixed test clock"""

    def _make(
        accounts: Optional[List[Account]] = None,
        goals: Optional[List[Goal]] = None,
        transactions: Optional[List[Transaction]] = None,
        user_id: str = "user_test",
    ) -> Snapshot:
        return Snapshot(
            user_id=user_id,
            accounts=accounts or [],
            goals=goals or [],
            transactions=transactions or [],
            taken_at=now,
        )

    return _make


@pytest.fixture
def healthy_accounts() -> List[Account]:
    return [
        Account(id="acc_chk", type="depository", subtype="checking", balance=4000.0, institution_name="First Bank"),
        Account(id="acc_sav", type="depository", subtype="savings", balance=20000.0, institution_name="First Bank"),
        Account(id="acc_inv", type="investment", subtype="brokerage", balance=15000.0, institution_name="Broker"),
        Account(id="acc_cc", type="credit", subtype="credit card", balance=-900.0, institution_name="First Bank"),
    ]


@pytest.fixture
def healthy_goals() -> List[Goal]:
    return [
        Goal(id="goal_ef", name="Emergency Fund", target_amount=15000, saved_amount=12000, category="emergency"),
        Goal(id="goal_trip", name="Vacation", target_amount=4000, saved_amount=2000, deadline=date(2027, 6, 1)),
    ]


@pytest.fixture
def sample_transactions(now: datetime) -> List[Transaction]:
    """Three months of salary, rent, groceries and streaming"""
    base_date = now.date() - timedelta(days=90)
    transactions = []

    for month in range(3):
        day = base_date + timedelta(days=month * 30)
        transactions += [
            Transaction(id=f"sal_{month}", account_id="acc_chk", amount=-6000.0, date=day,
                        category=["Income", "Payroll"], name="Employer Payroll"),
            Transaction(id=f"rent_{month}", account_id="acc_chk", amount=1800.0, date=day,
                        category=["Rent"], name="Landlord"),
            Transaction(id=f"groc_{month}", account_id="acc_chk", amount=600.0, date=day + timedelta(days=3),
                        category=["Food and Drink", "Groceries"], name="Supermarket"),
            Transaction(id=f"stream_{month}", account_id="acc_cc", amount=15.99, date=day + timedelta(days=5),
                        category=["Service", "Subscription"], name="Netflix"),
        ]

    return transactions
