"""Integration tests for /api/products."""

import uuid
from decimal import Decimal

import pytest
from services.storefront_service.models import Product, ProductCategory
from tests.conftest import (
    auth_headers,
    make_order,
    make_product,
    make_store,
    make_user,
)


def _product_payload(store_id, **overrides):
    payload = {
        "name": "Ubuntu Tee",
        "description": "Soft cotton tee with a local print",
        "category": "tshirt",
        "type": "physical",
        "price": {"amount": "249.99", "currency": "ZAR"},
        "store_id": str(store_id),
        "tshirt_details": {"sizes": ["S", "M"], "print_type": "dtg"},
        "tags": ["tee", "local"],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)

    response = await client.post(
        "/api/products", headers=auth_headers(owner), json=_product_payload(store.id)
    )

    assert response.status_code == 201, response.text
    product = response.json()["product"]
    assert product["creator_id"] == str(owner.id)
    assert product["category"] == "tshirt"
    assert Decimal(str(product["price"]["amount"])) == Decimal("249.99")
    assert product["tshirt_details"]["print_type"] == "dtg"
    assert product["is_active"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_in_foreign_store_is_forbidden(client, db_session):
    owner = await make_user(db_session)
    stranger = await make_user(db_session)
    store = await make_store(db_session, owner)

    forbidden = await client.post(
        "/api/products",
        headers=auth_headers(stranger),
        json=_product_payload(store.id),
    )
    missing = await client.post(
        "/api/products",
        headers=auth_headers(owner),
        json=_product_payload(uuid.uuid4()),
    )

    assert forbidden.status_code == 403
    assert (
        forbidden.json()["message"] == "Not authorized to add products to this store"
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product_rejects_negative_price_and_bad_category(
    client, db_session
):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)

    negative = await client.post(
        "/api/products",
        headers=auth_headers(owner),
        json=_product_payload(store.id, price={"amount": "-1"}),
    )
    bad_category = await client.post(
        "/api/products",
        headers=auth_headers(owner),
        json=_product_payload(store.id, category="spaceship"),
    )

    assert negative.status_code == 400
    assert bad_category.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_products_filters_and_sorting(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    cheap = await make_product(db_session, store, name="Cheap", price_amount=10)
    pricey = await make_product(db_session, store, name="Pricey", price_amount=500)
    await make_product(
        db_session, store, name="Ebook", category=ProductCategory.EBOOK
    )
    await make_product(db_session, store, name="Hidden", is_active=False)

    by_price = await client.get(
        "/api/products",
        params={"category": "physical", "sort_by": "price", "sort_order": "asc"},
    )
    searched = await client.get("/api/products", params={"search": "pric"})

    assert by_price.status_code == 200
    names = [p["name"] for p in by_price.json()["products"]]
    assert names[0] == cheap.name
    assert names[-1] == pricey.name
    assert "Hidden" not in names
    assert "Ebook" not in names
    assert [p["name"] for p in searched.json()["products"]] == ["Pricey"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_categories_meta(client):
    response = await client.get("/api/products/meta/categories")

    assert response.status_code == 200
    values = [c["value"] for c in response.json()["categories"]]
    assert values == [c.value for c in ProductCategory]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_product_counts_view(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)

    response = await client.get(f"/api/products/{product.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["store"]["slug"] == store.slug
    assert data["product"]["views"] == 1
    await db_session.refresh(product)
    assert product.views == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_and_my_products(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    mine = await make_product(db_session, store)
    await make_product(db_session, store, is_active=False)

    store_list = await client.get(f"/api/products/store/{store.id}")
    my_list = await client.get(
        "/api/products/user/my-products", headers=auth_headers(owner)
    )

    assert [p["id"] for p in store_list.json()["products"]] == [str(mine.id)]
    assert my_list.json()["total"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_by_owner_and_creator(client, db_session):
    owner = await make_user(db_session)
    creator = await make_user(db_session)
    stranger = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store, creator=creator)

    by_creator = await client.put(
        f"/api/products/{product.id}",
        headers=auth_headers(creator),
        json={"name": "Renamed", "price": {"amount": "99.00"}},
    )
    by_owner = await client.put(
        f"/api/products/{product.id}",
        headers=auth_headers(owner),
        json={"is_featured": True},
    )
    by_stranger = await client.put(
        f"/api/products/{product.id}",
        headers=auth_headers(stranger),
        json={"name": "Hijacked"},
    )

    assert by_creator.status_code == 200, by_creator.text
    assert by_creator.json()["product"]["name"] == "Renamed"
    assert Decimal(str(by_creator.json()["product"]["price"]["amount"])) == Decimal(
        "99.00"
    )
    assert by_owner.status_code == 200
    assert by_owner.json()["product"]["is_featured"] is True
    assert by_stranger.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_ignores_null_for_required_fields(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)
    original_name = product.name

    response = await client.put(
        f"/api/products/{product.id}",
        headers=auth_headers(owner),
        json={"name": None, "description": None, "is_active": None, "tags": None},
    )

    assert response.status_code == 200, response.text
    updated = response.json()["product"]
    assert updated["name"] == original_name
    assert updated["is_active"] is True
    await db_session.refresh(product)
    assert product.description
    assert product.tags == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_product_keeps_order_snapshots(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)
    order = await make_order(db_session, store, product)
    product_id = product.id

    response = await client.delete(
        f"/api/products/{product_id}", headers=auth_headers(owner)
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Product deleted successfully"
    assert await db_session.get(Product, product_id) is None
    await db_session.refresh(order, attribute_names=["items"])
    assert order.items[0].product_id is None
    assert order.items[0].name == "Widget"
