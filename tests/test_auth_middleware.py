from datetime import datetime, timedelta, UTC
from jose import jwt
from app.config import settings
from tests.conftest import create_test_token


def test_health_endpoint_no_auth(client):
    """Health endpoint should not require authentication"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint_no_auth(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


def test_valid_token_accepted(client, auth_headers):
    """Valid JWT token should be accepted and the owning user auto-created"""
    response = client.get("/api/landlords", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["landlords"] == []


def test_missing_token_rejected(client):
    response = client.get("/api/policies")
    assert response.status_code == 401


def test_expired_token_rejected(client):
    headers = {"Authorization": f"Bearer {create_test_token(expired=True)}"}

    response = client.get("/api/claims", headers=headers)
    assert response.status_code == 401
    assert "expired" in response.json()["detail"].lower()


def test_invalid_signature_rejected(client):
    payload = {"sub": "test-user", "exp": datetime.now(UTC) + timedelta(minutes=15)}
    token = jwt.encode(payload, "wrong-secret-key", algorithm="HS256")

    response = client.get("/api/landlords", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_malformed_token_rejected(client):
    response = client.get("/api/landlords", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_missing_sub_claim_rejected(client):
    payload = {"exp": datetime.now(UTC) + timedelta(minutes=15), "iat": datetime.now(UTC)}
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")

    response = client.get("/api/landlords", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "user identifier" in response.json()["detail"].lower()


def test_missing_exp_claim_rejected(client):
    payload = {"sub": "test-user", "iat": datetime.now(UTC)}
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")

    response = client.get("/api/landlords", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "expiration" in response.json()["detail"].lower()


def test_same_subject_reuses_user(client, auth_headers, db_session):
    """Repeated requests with one subject map to a single owning user"""
    client.get("/api/landlords", headers=auth_headers)
    client.get("/api/landlords", headers=auth_headers)

    from app.models.user import User

    assert db_session.query(User).filter(User.auth_user_id == "test-user-123").count() == 1
