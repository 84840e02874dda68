"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from smartspend_gateway.api.main import create_app
from smartspend_gateway.infrastructure.database.models import Base
from smartspend_gateway.infrastructure.database.session import get_db
from smartspend_gateway.domain.models import Debt, HabitPattern, Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Saturday evening
NOW = datetime(2024, 6, 15, 20, 0)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def weekly_coffee(now: datetime) -> list[Transaction]:
    """Saturday morning latte for the last 8 weeks (oldest falls outside the 56-day window)"""
    return [
        Transaction(
            id=f"coffee_{week}",
            amount=500,
            category="Food",
            date=(now - timedelta(weeks=week)).replace(hour=9),
            description="Starbucks Latte",
            type="expense",
        )
        for week in range(1, 9)
    ]


@pytest.fixture
def sample_debts() -> list[Debt]:
    """Credit card plus small personal loan"""
    return [
        Debt(id="card", balance=200000, annual_rate=18, minimum_payment=5000, debt_category="Credit Card"),
        Debt(id="loan", balance=50000, annual_rate=3, minimum_payment=2000, debt_category="Loan"),
    ]


def make_pattern(**overrides) -> HabitPattern:
    """Weekly Saturday latte habit; override any field"""
    fields = dict(
        habit_id="uuij7b",
        category="Food",
        merchant_key="starbucks latte",
        amount_bucket=None,
        amount_median=500,
        amount_mad=0,
        interval_type="weekly",
        interval_days_median=7,
        dow_prob=[0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.875],
        time_window_start_min=None,
        time_window_end_min=None,
        active=True,
        updated_at=NOW,
    )
    fields.update(overrides)
    return HabitPattern(**fields)


@pytest.fixture
def pattern_factory():
    return make_pattern
