"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from household_forecast.api.main import create_app
from household_forecast.infrastructure.database.models import Base
from household_forecast.infrastructure.database.session import get_db
from household_forecast.domain.models import Transaction
from tests.helpers import make_transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def sample_transactions() -> list[Transaction]:
    """March 2025 snapshot plus three months of variable-spend history"""
    return [
        # History: Dec 600, Jan 300, Feb 0 months -> two months with data
        make_transaction("h1", date(2024, 12, 5), "400", expense_type="variable"),
        make_transaction("h2", date(2024, 12, 20), "200", expense_type="variable"),
        make_transaction("h3", date(2025, 1, 15), "300", expense_type="variable"),
        # Current month
        make_transaction("salary", date(2025, 3, 1), "3000", kind="INCOME"),
        make_transaction("groceries", date(2025, 3, 4), "100", expense_type="variable"),
        make_transaction("rent", date(2025, 3, 1), "1200", status="planned", expense_type="fixed",
                         due_date=date(2025, 3, 15), description="Rent"),
        make_transaction("gym", date(2025, 3, 1), "60", status="planned", expense_type="fixed",
                         due_date=date(2025, 3, 20), description="Gym"),
        make_transaction("bonus", date(2025, 3, 25), "500", kind="INCOME", status="planned"),
    ]
