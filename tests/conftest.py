import os

import pytest

# Point the application at throwaway settings before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_SAMPLE_PRODUCTS"] = "false"

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shopledger.main import app
from shopledger.database import Base, build_engine, get_db


# Create test database (SQLite in-memory for testing)
engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    # Create tables
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def create_product(client):
    """Create a product through the API and return its data."""
    def _create(name="Widget", price=10.00):
        response = client.post("/api/products", json={"name": name, "price": price})
        assert response.status_code == 201
        return response.json()["data"]
    return _create


@pytest.fixture
def create_order(client):
    """Create an order through the API and return its data."""
    def _create(product_id, quantity=1):
        response = client.post(
            "/api/orders",
            json={"product_id": product_id, "quantity": quantity}
        )
        assert response.status_code == 201
        return response.json()["data"]
    return _create
