"""Integration tests for /api/users."""

from decimal import Decimal

import pytest
from services.storefront_service.models import Store, User
from sqlalchemy import select
from tests.conftest import auth_headers, make_store, make_user
from tests.factories import DEFAULT_PASSWORD


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_profile_lists_owned_stores(client, db_session):
    user = await make_user(db_session)
    store = await make_store(db_session, user)
    await make_store(db_session, await make_user(db_session))

    response = await client.get("/api/users/profile", headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == str(user.id)
    assert [s["id"] for s in data["stores"]] == [str(store.id)]
    assert data["stores"][0]["template"] == "modern"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_profile_merges_fields(client, db_session):
    user = await make_user(
        db_session,
        profile={
            "first_name": "Test",
            "bio": "Old bio",
            "social": {"twitter": "@old", "instagram": "@insta"},
        },
    )

    response = await client.put(
        "/api/users/profile",
        headers=auth_headers(user),
        json={
            "profile": {"bio": "New bio", "social": {"twitter": "@new"}},
            "settings": {"privacy": {"profile_visibility": "private"}},
        },
    )

    assert response.status_code == 200, response.text
    profile = response.json()["user"]["profile"]
    assert profile["first_name"] == "Test"
    assert profile["bio"] == "New bio"
    assert profile["social"] == {"twitter": "@new", "instagram": "@insta"}
    settings = response.json()["user"]["settings"]
    assert settings["privacy"]["profile_visibility"] == "private"
    assert settings["notifications"]["email"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_metrics(client, db_session):
    user = await make_user(db_session)
    await make_store(
        db_session, user, analytics_orders=3, analytics_revenue=Decimal("300.00")
    )
    await make_store(
        db_session, user, analytics_orders=1, analytics_revenue=Decimal("50.50")
    )

    response = await client.get("/api/users/dashboard", headers=auth_headers(user))

    assert response.status_code == 200
    metrics = response.json()["metrics"]
    assert metrics["total_stores"] == 2
    assert metrics["total_products"] == 0
    assert metrics["total_orders"] == 4
    assert Decimal(str(metrics["total_revenue"])) == Decimal("350.50")
    assert metrics["referral_count"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_affiliate_summary_enables_program(client, db_session):
    user = await make_user(db_session, username="sipho")

    response = await client.get("/api/users/affiliate", headers=auth_headers(user))

    assert response.status_code == 200
    affiliate = response.json()["affiliate"]
    assert affiliate["referral_code"].startswith("sipho")
    assert affiliate["referral_link"].endswith(
        f"/register?ref={affiliate['referral_code']}"
    )
    await db_session.refresh(user)
    assert user.is_affiliate is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_subscription_sets_period(client, db_session):
    user = await make_user(db_session)

    response = await client.put(
        "/api/users/subscription",
        headers=auth_headers(user),
        json={"plan": "creator"},
    )

    assert response.status_code == 200
    subscription = response.json()["subscription"]
    assert subscription["plan"] == "creator"
    assert subscription["start_date"] is not None
    assert subscription["end_date"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_subscription_rejects_unknown_plan(client, db_session):
    user = await make_user(db_session)

    response = await client.put(
        "/api/users/subscription",
        headers=auth_headers(user),
        json={"plan": "platinum"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_account_requires_password(client, db_session):
    user = await make_user(db_session)

    response = await client.request(
        "DELETE",
        "/api/users/account",
        headers=auth_headers(user),
        json={"password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Password is incorrect"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_account_removes_user_and_stores(client, db_session):
    user = await make_user(db_session)
    store = await make_store(db_session, user)
    user_id, store_id = user.id, store.id

    response = await client.request(
        "DELETE",
        "/api/users/account",
        headers=auth_headers(user),
        json={"password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200, response.text
    assert response.json()["message"] == "Account deleted successfully"
    db_session.expunge_all()
    assert (
        await db_session.execute(select(User).where(User.id == user_id))
    ).scalar_one_or_none() is None
    assert (
        await db_session.execute(select(Store).where(Store.id == store_id))
    ).scalar_one_or_none() is None
