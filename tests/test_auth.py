"""Bearer token verification"""

from datetime import timedelta

from jose import jwt

from raid_ledger.security_utils import create_jwt_token, verify_jwt_token

from .conftest import auth_headers


def test_token_round_trip():
    payload = verify_jwt_token(create_jwt_token({"sub": "42"}))
    assert payload["sub"] == "42"


def test_expired_token_is_rejected():
    assert verify_jwt_token(create_jwt_token({"sub": "42"}, expires_delta=timedelta(seconds=-5))) is None


def test_missing_token(client):
    assert client.get("/users/me").status_code == 401


def test_malformed_token(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_signed_with_another_key(client, alice):
    token = jwt.encode({"sub": str(alice.id)}, "some-other-key", algorithm="HS256")
    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_non_numeric_subject(client):
    token = create_jwt_token({"sub": "not-a-number"})
    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_unknown_user(client):
    token = create_jwt_token({"sub": "12345"})
    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_valid_token(client, alice):
    response = client.get("/users/me", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["id"] == alice.id


def test_security_headers_present(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
