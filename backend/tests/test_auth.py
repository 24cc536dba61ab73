from conftest import PASSWORD

from kanha.core.config import settings
from kanha.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from kanha.db.init_db import ensure_default_user
from kanha.models import User


def test_login_returns_token_and_user(client, user):
    response = client.post(
        "/api/v1/users/login",
        json={"email": "Owner@KanhaMedical.in", "password": PASSWORD},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == user.id
    assert body["user"]["shop_name"] == "Kanha Medical Agencies"
    assert "password_hash" not in body["user"]
    assert decode_access_token(body["access_token"]) == str(user.id)


def test_login_wrong_password_and_unknown_email_look_the_same(client, user):
    wrong = client.post("/api/v1/users/login", json={"email": user.email, "password": "nope"})
    unknown = client.post("/api/v1/users/login", json={"email": "ghost@kanhamedical.in", "password": PASSWORD})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"error": "Invalid credentials"}


def test_login_requires_valid_email(client):
    response = client.post("/api/v1/users/login", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"
    assert any(problem.startswith("email:") for problem in response.json()["validationErrors"])


def test_protected_route_requires_token(client, user):
    response = client.get(f"/api/v1/users/{user.id}")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_garbage_token_is_rejected(client, user):
    response = client.get(f"/api/v1/users/{user.id}", headers={"Authorization": "Bearer abc.def.ghi"})
    assert response.status_code == 401


def test_expired_token_is_rejected(client, user):
    token = create_access_token(subject=str(user.id), expires_minutes=-1)
    response = client.get(f"/api/v1/users/{user.id}", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_get_own_user(client, user, auth_headers):
    response = client.get(f"/api/v1/users/{user.id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == user.email
    assert "password_hash" not in response.json()


def test_other_users_record_is_forbidden(client, other_user, auth_headers):
    response = client.get(f"/api/v1/users/{other_user.id}", headers=auth_headers)
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied"}


def test_default_user_created_once(db):
    ensure_default_user(db)
    ensure_default_user(db)
    users = db.query(User).all()
    assert len(users) == 1
    assert users[0].email == settings.DEFAULT_USER_EMAIL.lower()
    assert users[0].password_hash.startswith("$2")


def test_default_user_not_created_when_accounts_exist(db, user):
    ensure_default_user(db)
    assert db.query(User).count() == 1


def test_password_hash_round_trip():
    hashed = get_password_hash("s3cret")
    assert verify_password("s3cret", hashed)
    assert not verify_password("S3cret", hashed)
    assert not verify_password("s3cret", "plaintext-from-an-old-db")
