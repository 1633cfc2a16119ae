import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def register_user(client, username: str, email: str, password: str, role: str = "buyer"):
    return await client.post(
        "/api/register",
        json={
            "username": username,
            "email": email,
            "password": password,
            "fullName": "Test User",
            "role": role,
        },
    )


async def login_user(client, username: str, password: str):
    return await client.post(
        "/api/login",
        json={"username": username, "password": password},
    )


async def test_register_and_login_flow(client):
    username = f"user_{uuid.uuid4().hex[:6]}"
    email = f"{username}@example.com"
    password = "StrongPass!23"

    resp = await register_user(client, username, email, password, role="seller")
    body = resp.json()
    assert resp.status_code == 201
    assert body["username"] == username
    assert body["fullName"] == "Test User"
    assert body["role"] == "seller"
    assert "password" not in body and "passwordHash" not in body
    assert "accessToken" in resp.cookies

    # Duplicate username should fail
    dup_resp = await register_user(client, username, f"other_{email}", password)
    assert dup_resp.status_code == 400
    assert dup_resp.json()["detail"] == "Username already exists"

    # Duplicate email should fail
    dup_email = await register_user(client, f"{username}_2", email, password)
    assert dup_email.status_code == 400
    assert dup_email.json()["detail"] == "Email already registered"

    # Successful login
    login_resp = await login_user(client, username, password)
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["user"]["username"] == username
    assert "accessToken" in login_body
    assert "accessToken" in login_resp.cookies

    # Invalid password
    bad_login = await login_user(client, username, "wrong")
    assert bad_login.status_code == 401


async def test_register_validates_role_and_email(client):
    bad_role = await client.post(
        "/api/register",
        json={"username": "x1", "email": "x1@example.com", "password": "pw", "fullName": "X", "role": "admin"},
    )
    assert bad_role.status_code == 400
    assert "role" in bad_role.json()["detail"]

    bad_email = await client.post(
        "/api/register",
        json={"username": "x2", "email": "not-an-email", "password": "pw", "fullName": "X"},
    )
    assert bad_email.status_code == 400
    assert "email" in bad_email.json()["detail"]


async def test_current_user_with_bearer_token_and_cookie(client):
    username = f"user_{uuid.uuid4().hex[:6]}"
    password = "UserInit#123"
    await register_user(client, username, f"{username}@example.com", password)

    login_resp = await login_user(client, username, password)
    token = login_resp.json()["accessToken"]

    me_resp = await client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
    assert me_resp.status_code == 200
    assert me_resp.json()["username"] == username

    # Cookie set by login is accepted as well
    cookie_resp = await client.get("/api/user")
    assert cookie_resp.status_code == 200

    logout_resp = await client.post("/api/logout")
    assert logout_resp.status_code == 200
    assert logout_resp.json()["ok"] is True


async def test_auth_requires_token(client):
    unauth_me = await client.get("/api/user")
    assert unauth_me.status_code == 401
    assert unauth_me.json()["detail"] == "AUTH_REQUIRED"

    bad_token = await client.get("/api/user", headers={"Authorization": "Bearer not.a.token"})
    assert bad_token.status_code == 401
    assert bad_token.json()["detail"] == "AUTH_INVALID_TOKEN"

    for method, path in [
        ("post", "/api/create-payment-intent"),
        ("post", "/api/confirm-purchase"),
        ("get", "/api/purchases"),
        ("get", "/api/purchases/1"),
        ("post", "/api/reviews"),
        ("post", "/api/messages"),
        ("get", "/api/messages/1"),
        ("post", "/api/reports"),
        ("get", "/api/dashboard/seller"),
        ("get", "/api/dashboard/buyer"),
    ]:
        resp = await getattr(client, method)(path)
        assert resp.status_code == 401, path


async def test_token_for_deleted_user_is_rejected(client, create_user, auth_headers):
    user = await create_user()
    headers = auth_headers(user)
    await user.delete()

    resp = await client.get("/api/user", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "AUTH_USER_NOT_FOUND"
