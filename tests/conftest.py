import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_guarantee.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from app.database import get_db
from app.dependencies import get_notifier
from app.models.base import Base
from app.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from app.models.user import User
from app.models.landlord import Landlord
from app.models.property import Property
from app.models.tenant import Tenant
from app.models.policy import Policy
from app.models.claim import Claim
# Import FastAPI app AFTER model imports
from app.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingNotifier:
    """Collects notifications instead of sending them"""

    def __init__(self):
        self.sent = []

    def send(self, recipient, template_kind, payload):
        self.sent.append((recipient, template_kind, payload))


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(db_session, notifier):
    """FastAPI test client with test database and recording notifier"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = "test-user-123", expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}

    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Authorization headers for authenticated requests"""
    return {"Authorization": f"Bearer {create_test_token()}"}


@pytest.fixture
def user_a_headers():
    """Authorization headers for user A"""
    return {"Authorization": f"Bearer {create_test_token(user_id='user-a')}"}


@pytest.fixture
def user_b_headers():
    """Authorization headers for user B"""
    return {"Authorization": f"Bearer {create_test_token(user_id='user-b')}"}


# Helpers building the landlord -> property -> tenant -> policy -> claim chain


def create_landlord(client, headers, **overrides) -> dict:
    data = {"name": "Sami Ben Ali", "email": "sami@example.com", "phone": "+216 20 000 000"}
    data.update(overrides)
    response = client.post("/api/landlords", headers=headers, json=data)
    assert response.status_code == 201, response.text
    return response.json()


def create_property(client, headers, landlord_id: int, **overrides) -> dict:
    data = {
        "landlord_id": landlord_id,
        "name": "Lac 2 Residence",
        "address": "12 Rue du Lac",
        "city": "Tunis",
        "rent_amount": 1000,
        "property_type": "apartment",
        "max_tenants": 3,
    }
    data.update(overrides)
    response = client.post("/api/properties", headers=headers, json=data)
    assert response.status_code == 201, response.text
    return response.json()


def create_tenant(client, headers, property_id: int, **overrides) -> dict:
    data = {
        "property_id": property_id,
        "name": "Amira Trabelsi",
        "email": "amira@example.com",
        "rent_amount": 1000,
        "payment_status": "paid",
        "lease_start": "2024-01-01",
        "lease_end": "2024-12-31",
    }
    data.update(overrides)
    response = client.post("/api/tenants", headers=headers, json=data)
    assert response.status_code == 201, response.text
    return response.json()


def create_policy(client, headers, landlord_id: int, property_id: int, tenant_id: int, **overrides) -> dict:
    data = {
        "landlord_id": landlord_id,
        "property_id": property_id,
        "tenant_id": tenant_id,
        "coverage_months": 12,
        "risk_score": 40,
        "decision": "accept",
        "start_date": "2024-01-31",
    }
    data.update(overrides)
    response = client.post("/api/policies", headers=headers, json=data)
    assert response.status_code == 201, response.text
    return response.json()


def create_claim(client, headers, policy_id: int, **overrides) -> dict:
    data = {
        "policy_id": policy_id,
        "amount_requested": 2000,
        "months_of_unpaid_rent": 2,
        "evidence_links": ["https://files.example.com/claims/lease.pdf"],
        "notes": "Tenant stopped paying in March",
    }
    data.update(overrides)
    response = client.post("/api/claims", headers=headers, json=data)
    assert response.status_code == 201, response.text
    return response.json()


def insured_chain(client, headers) -> dict:
    """Landlord, property, tenant and an active policy owned by one user"""
    landlord = create_landlord(client, headers)
    property_ = create_property(client, headers, landlord["id"])
    tenant = create_tenant(client, headers, property_["id"])
    policy = create_policy(client, headers, landlord["id"], property_["id"], tenant["id"])
    return {"landlord": landlord, "property": property_, "tenant": tenant, "policy": policy}
