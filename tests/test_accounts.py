from datetime import timedelta

import pytest

from taskflow.errors import InvalidArgument, Unauthenticated
from taskflow.services.accounts import authenticate, check_password, hash_password, issue_token, register, user_for_token


def test_password_hashing():
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert check_password("correct horse", hashed)
    assert not check_password("wrong horse", hashed)


def test_register_and_authenticate(db):
    user = register(db, " Ada@Example.com ", "secret")

    assert user.email == "ada@example.com"
    assert authenticate(db, "ADA@example.com", "secret").id == user.id
    with pytest.raises(Unauthenticated):
        authenticate(db, "ada@example.com", "nope")
    with pytest.raises(Unauthenticated):
        authenticate(db, "nobody@example.com", "secret")
    with pytest.raises(InvalidArgument):
        register(db, "ada@example.com", "again")


def test_token_resolves_to_user(db, user):
    assert user_for_token(db, issue_token(user)).id == user.id
    assert user_for_token(db, issue_token(user, timedelta(seconds=-1))) is None
    assert user_for_token(db, "not-a-jwt") is None


def test_signup_twice_is_rejected(client):
    body = {"email": "eve@example.com", "password": "pw"}
    assert client.post("/api/auth/signup", json=body).status_code == 201

    response = client.post("/api/auth/signup", json=body)

    assert response.status_code == 400
    assert response.json() == {"message": "Email already registered"}


def test_cookie_token_identifies_caller(client):
    client.post("/api/auth/signup", json={"email": "cat@example.com", "password": "pw"})

    # TestClient keeps the cookie set at sign-up
    assert client.get("/api/auth/me").json()["email"] == "cat@example.com"
    client.post("/api/auth/signout")
    assert client.get("/api/auth/me").status_code == 401
