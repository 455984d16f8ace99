"""Auth Routes - login, session token, logout and password change.

Invariants:
    - Unknown email and wrong password both give the same 401
    - A token works as Bearer header or as the session cookie
    - Protected routes reject missing and forged tokens
    - Password hashing runs on a worker thread, and unknown emails still hash once
"""

import threading
from uuid import uuid4

import pytest

from alphacore.api.dependencies import get_tokens
import alphacore.infrastructure.security as security


async def test_login_returns_token_and_sets_cookie(client, member, password):
    res = await client.post("/api/v1/auth/login", json={
        "email": member.email, "password": password,
    })
    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == member.email
    assert "hashed_password" not in body["user"]
    assert "alphacore_session" in res.cookies


async def test_login_email_is_case_insensitive(client, member, password):
    res = await client.post("/api/v1/auth/login", json={
        "email": member.email.upper(), "password": password,
    })
    assert res.status_code == 200


async def test_login_wrong_password_and_unknown_email_look_the_same(client, member, password):
    wrong = await client.post("/api/v1/auth/login", json={
        "email": member.email, "password": "yanlis-parola",
    })
    unknown = await client.post("/api/v1/auth/login", json={
        "email": "kimse@alphacore.com.tr", "password": password,
    })
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["error"]["message"] == unknown.json()["error"]["message"]


async def test_me_with_bearer_token(client, member, member_headers):
    res = await client.get("/api/v1/auth/me", headers=member_headers)
    assert res.status_code == 200
    assert res.json()["id"] == str(member.id)


async def test_me_with_session_cookie(client, member, password):
    await client.post("/api/v1/auth/login", json={
        "email": member.email, "password": password,
    })
    res = await client.get("/api/v1/auth/me")
    assert res.status_code == 200
    assert res.json()["email"] == member.email


async def test_me_without_token_is_401(client):
    res = await client.get("/api/v1/auth/me")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"


async def test_forged_token_is_401(client):
    res = await client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"},
    )
    assert res.status_code == 401


async def test_token_for_missing_user_is_401(client):
    token = get_tokens().issue(uuid4())
    res = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 401


async def test_logout(client):
    res = await client.post("/api/v1/auth/logout")
    assert res.status_code == 200
    assert res.json() == {"success": True}


async def test_password_change(client, member, member_headers, password):
    res = await client.post("/api/v1/auth/password", headers=member_headers, json={
        "current_password": password,
        "new_password": "yeniparola",
        "confirm_password": "yeniparola",
    })
    assert res.status_code == 200

    login = await client.post("/api/v1/auth/login", json={
        "email": member.email, "password": "yeniparola",
    })
    assert login.status_code == 200


async def test_password_change_requires_current_password(client, member_headers):
    res = await client.post("/api/v1/auth/password", headers=member_headers, json={
        "current_password": "yanlis",
        "new_password": "yeniparola",
        "confirm_password": "yeniparola",
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_PASSWORD"


async def test_password_change_confirmation_mismatch(client, member_headers, password):
    res = await client.post("/api/v1/auth/password", headers=member_headers, json={
        "current_password": password,
        "new_password": "yeniparola",
        "confirm_password": "baskaparola",
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.fixture
def hash_threads(monkeypatch, member):
    """Thread ids of every PBKDF2 run once `member` exists."""
    security._dummy_hash()
    seen: list[int] = []
    original = security._pbkdf2

    def recording(password, salt, iterations):
        seen.append(threading.get_ident())
        return original(password, salt, iterations)

    monkeypatch.setattr(security, "_pbkdf2", recording)
    return seen


async def test_login_hashes_off_the_event_loop(client, member, password, hash_threads):
    res = await client.post("/api/v1/auth/login", json={
        "email": member.email, "password": password,
    })
    assert res.status_code == 200
    assert len(hash_threads) == 1
    assert threading.get_ident() not in hash_threads


async def test_password_change_hashes_off_the_event_loop(
    client, member_headers, password, hash_threads,
):
    res = await client.post("/api/v1/auth/password", headers=member_headers, json={
        "current_password": password,
        "new_password": "yeniparola",
        "confirm_password": "yeniparola",
    })
    assert res.status_code == 200
    assert len(hash_threads) == 2
    assert threading.get_ident() not in hash_threads


async def test_unknown_email_still_pays_for_one_hash(client, hash_threads):
    res = await client.post("/api/v1/auth/login", json={
        "email": "kimse@alphacore.com.tr", "password": "parola123",
    })
    assert res.status_code == 401
    assert len(hash_threads) == 1


async def test_401_names_the_bearer_scheme(client, member_headers):
    res = await client.get("/api/v1/auth/me")
    assert res.headers["www-authenticate"] == "Bearer"

    forbidden = await client.post("/api/v1/labels", headers=member_headers, json={
        "name": "Acil", "color": "#ef4444",
    })
    assert forbidden.status_code == 403
    assert "www-authenticate" not in forbidden.headers
