"""
Pytest configuration and fixtures.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.models import Base, get_db


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    """API client bound to the test database."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def taxpayer(client):
    """A primary taxpayer."""
    response = client.post("/taxpayers/", json={"name": "Asha", "pan": "ABCDE1234F"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def estimate(client, taxpayer):
    """FY 2024-25 estimate with 1,00,000 net liability."""
    response = client.post("/advance-tax/", json={
        "taxpayer_id": taxpayer["id"],
        "financial_year": "2024-25",
        "total_estimated_income": 1500000,
        "gross_tax_liability": 160000,
        "total_tds_deducted": 60000,
        "net_tax_liability": 100000,
    })
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def sample_challan():
    """Challan details without amount or date."""
    return {
        "challan_serial_number": "00123",
        "bsr_code": "0510002",
        "bank_name": "State Bank of India",
    }
