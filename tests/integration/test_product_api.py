"""Integration tests for Product API endpoints.

Covers:
- Public catalog reads via /api/v1/products/ with search filters.
- Seller-only writes: create, update, restock, soft delete.
- Domain exception mapping (400, 404).
- Authentication enforcement on writes (401 without credentials).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/v1/products/"
MISSING = "00000000-0000-0000-0000-000000000000"


@pytest.fixture()
def sample_product(make_product, user):
    return make_product(title="Widget Alpha", price="19.99", quantity=100, seller=user)


# ===========================================================================
# Authentication
# ===========================================================================


class TestProductAPIAuth:
    def test_reads_are_public(self, api_client, sample_product):
        assert api_client.get(URL).status_code == 200
        assert api_client.get(f"{URL}{sample_product.id}/").status_code == 200

    def test_unauthenticated_write_returns_401(self, api_client):
        response = api_client.post(URL, {"title": "X", "price": "1.00"}, format="json")
        assert response.status_code == 401


# ===========================================================================
# LIST / RETRIEVE
# ===========================================================================


class TestProductList:
    def test_list_empty(self, api_client):
        response = api_client.get(URL)
        assert response.status_code == 200
        assert response.data == []

    def test_list_returns_products(self, api_client, sample_product):
        response = api_client.get(URL)
        assert len(response.data) == 1
        assert response.data[0]["title"] == "Widget Alpha"
        assert response.data[0]["price"] == "19.99"

    def test_search_filters(self, api_client, make_product):
        make_product(title="Smart TV", price="300.00")
        make_product(title="TV Stand", price="80.00")
        make_product(title="Radio", price="40.00", published=False)

        response = api_client.get(URL, {"title": "tv", "max_price": "100"})
        assert [p["title"] for p in response.data] == ["TV Stand"]

        response = api_client.get(URL, {"published": "false"})
        assert [p["title"] for p in response.data] == ["Radio"]

    def test_invalid_filter_returns_400(self, api_client):
        response = api_client.get(URL, {"min_price": "cheap"})
        assert response.status_code == 400

    def test_retrieve_success(self, api_client, sample_product):
        response = api_client.get(f"{URL}{sample_product.id}/")
        assert response.data["id"] == str(sample_product.id)
        assert response.data["quantity"] == 100

    def test_retrieve_not_found(self, api_client):
        assert api_client.get(f"{URL}{MISSING}/").status_code == 404


# ===========================================================================
# CREATE
# ===========================================================================


class TestProductCreate:
    def test_create_success(self, auth_client, user):
        payload = {"title": "New Product", "price": "29.99", "quantity": 50, "published": True}

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 201
        assert response.data["title"] == "New Product"
        assert response.data["seller_id"] == user.pk
        assert Product.objects.get(id=response.data["id"]).quantity == 50

    def test_create_missing_fields_returns_400(self, auth_client):
        response = auth_client.post(URL, {"title": "Incomplete"}, format="json")
        assert response.status_code == 400

    @pytest.mark.parametrize("price", ["-5.00", "0"])
    def test_create_invalid_price_returns_400(self, auth_client, price):
        response = auth_client.post(URL, {"title": "Bad", "price": price}, format="json")
        assert response.status_code == 400


# ===========================================================================
# UPDATE
# ===========================================================================


class TestProductUpdate:
    def test_patch_success(self, auth_client, sample_product):
        response = auth_client.patch(
            f"{URL}{sample_product.id}/", {"title": "Widget Updated"}, format="json"
        )
        assert response.status_code == 200
        assert response.data["title"] == "Widget Updated"
        assert response.data["price"] == "19.99"

    def test_put_restock(self, auth_client, sample_product):
        response = auth_client.put(
            f"{URL}{sample_product.id}/", {"quantity": 250, "price": "25.00"}, format="json"
        )
        assert response.status_code == 200
        sample_product.refresh_from_db()
        assert sample_product.quantity == 250
        assert sample_product.price == Decimal("25.00")

    def test_update_not_found(self, auth_client):
        response = auth_client.patch(f"{URL}{MISSING}/", {"title": "Ghost"}, format="json")
        assert response.status_code == 404

    def test_update_by_other_seller_404(self, api_client, make_user, sample_product):
        api_client.force_authenticate(user=make_user())
        response = api_client.patch(
            f"{URL}{sample_product.id}/", {"title": "Mine now"}, format="json"
        )
        assert response.status_code == 404

    def test_negative_quantity_returns_400(self, auth_client, sample_product):
        response = auth_client.patch(
            f"{URL}{sample_product.id}/", {"quantity": -1}, format="json"
        )
        assert response.status_code == 400


# ===========================================================================
# DESTROY
# ===========================================================================


class TestProductDestroy:
    def test_destroy_success(self, auth_client, sample_product):
        response = auth_client.delete(f"{URL}{sample_product.id}/")
        assert response.status_code == 204
        sample_product.refresh_from_db()
        assert sample_product.deleted_at is not None
        assert auth_client.get(f"{URL}{sample_product.id}/").status_code == 404

    def test_destroy_not_found(self, auth_client):
        assert auth_client.delete(f"{URL}{MISSING}/").status_code == 404
