"""Integration tests for registration, login and /me."""

import pytest
from services.storefront_service.models import AffiliateReferral, User
from sqlalchemy import select
from tests.conftest import auth_headers, make_user
from tests.factories import DEFAULT_PASSWORD, AffiliateFactory


def _register_payload(**overrides):
    payload = {
        "username": "thandi",
        "email": "Thandi@Example.com",
        "password": "secret123",
        "profile": {"first_name": "Thandi", "last_name": "Nkosi"},
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_returns_token_and_user(client):
    response = await client.post("/api/auth/register", json=_register_payload())

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["token"]
    user = data["user"]
    assert user["email"] == "thandi@example.com"
    assert user["profile"]["first_name"] == "Thandi"
    assert user["subscription"]["plan"] == "free"
    assert user["affiliate"]["is_affiliate"] is False
    assert "password" not in user
    assert "password_hash" not in user


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_duplicate_email_or_username(client, db_session):
    existing = await make_user(db_session, username="taken", email="taken@test.com")

    by_email = await client.post(
        "/api/auth/register",
        json=_register_payload(username="fresh", email=existing.email),
    )
    by_username = await client.post(
        "/api/auth/register",
        json=_register_payload(username="taken", email="fresh@test.com"),
    )

    for response in (by_email, by_username):
        assert response.status_code == 400
        assert (
            response.json()["message"]
            == "User already exists with this email or username"
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_validation_errors(client):
    response = await client.post(
        "/api/auth/register",
        json={"username": "ab", "email": "not-an-email", "password": "123"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Validation failed"
    fields = {error["field"] for error in data["errors"]}
    assert {"username", "email", "password"} <= fields


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_with_referral_code_records_referral(client, db_session):
    affiliate = AffiliateFactory.create()
    db_session.add(affiliate)
    await db_session.commit()

    response = await client.post(
        "/api/auth/register",
        json=_register_payload(referral_code=affiliate.referral_code),
    )

    assert response.status_code == 201, response.text
    assert response.json()["user"]["affiliate"]["referred_by"] == str(affiliate.id)
    result = await db_session.execute(
        select(AffiliateReferral).where(AffiliateReferral.referrer_id == affiliate.id)
    )
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_with_unknown_referral_code_still_succeeds(client):
    response = await client.post(
        "/api/auth/register", json=_register_payload(referral_code="nobody123")
    )

    assert response.status_code == 201
    assert response.json()["user"]["affiliate"]["referred_by"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_success_updates_last_login(client, db_session):
    user = await make_user(db_session)

    response = await client.post(
        "/api/auth/login",
        json={"email": user.email.upper(), "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["token"]
    assert data["user"]["last_login"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_rejects_bad_credentials(client, db_session):
    user = await make_user(db_session)

    wrong_password = await client.post(
        "/api/auth/login", json={"email": user.email, "password": "nope-nope"}
    )
    unknown_email = await client.post(
        "/api/auth/login",
        json={"email": "ghost@test.com", "password": DEFAULT_PASSWORD},
    )

    for response in (wrong_password, unknown_email):
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_requires_token(client):
    missing = await client.get("/api/auth/me")
    garbage = await client.get(
        "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert missing.status_code == 401
    assert missing.json()["message"] == "No token, authorization denied"
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Token is not valid"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_returns_current_user(client, db_session):
    user = await make_user(db_session)

    response = await client.get("/api/auth/me", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(user.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_token_for_deleted_user_is_rejected(client, db_session):
    user = await make_user(db_session)
    headers = auth_headers(user)
    await db_session.delete(await db_session.get(User, user.id))
    await db_session.commit()

    response = await client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401
