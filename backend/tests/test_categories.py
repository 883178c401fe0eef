# Overview: Pytest coverage for category CRUD, list contract and delete guards.

import math

import pytest


class TestCategoryRoundTrip:
    def test_create_get_update_delete(self, client, manager_headers):
        resp = client.post(
            "/api/categories",
            json={"name": "  Tools  ", "description": "Hand tools"},
            headers=manager_headers,
        )
        assert resp.status_code == 201
        created = resp.get_json()
        assert created["name"] == "Tools"
        category_id = created["id"]

        resp = client.get(f"/api/categories/{category_id}")
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "Tools"
        assert resp.get_json()["description"] == "Hand tools"
        assert resp.get_json()["productCount"] == 0

        resp = client.put(
            f"/api/categories/{category_id}",
            json={"name": "Power Tools"},
            headers=manager_headers,
        )
        assert resp.status_code == 200

        resp = client.get(f"/api/categories/{category_id}")
        assert resp.get_json()["name"] == "Power Tools"
        assert resp.get_json()["description"] is None

        resp = client.delete(f"/api/categories/{category_id}", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["deletedCategory"] == {"id": category_id, "name": "Power Tools"}

        assert client.get(f"/api/categories/{category_id}").status_code == 404
        listing = client.get("/api/categories").get_json()
        assert listing["categories"] == []


class TestCategoryValidation:
    def test_name_required(self, client, manager_headers):
        resp = client.post("/api/categories", json={"description": "x"}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Missing required field: name"

    def test_duplicate_name(self, client, manager_headers, make_category):
        make_category("Tools")
        resp = client.post("/api/categories", json={"name": "Tools"}, headers=manager_headers)
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Category name already exists"

    def test_rename_onto_existing_name(self, client, manager_headers, make_category):
        make_category("Tools")
        other = make_category("Garden")
        resp = client.put(f"/api/categories/{other.id}", json={"name": "Tools"}, headers=manager_headers)
        assert resp.status_code == 409

    def test_update_missing(self, client, manager_headers):
        resp = client.put("/api/categories/4242", json={"name": "X"}, headers=manager_headers)
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Category not found"

    def test_update_missing_with_empty_body_is_404(self, client, manager_headers):
        resp = client.put("/api/categories/4242", json={}, headers=manager_headers)
        assert resp.status_code == 404

    def test_name_too_long(self, client, manager_headers):
        resp = client.post("/api/categories", json={"name": "C" * 101}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "name exceeds max length 100"

    def test_non_numeric_id_is_json_404(self, client, db_session):
        resp = client.get("/api/categories/abc")
        assert resp.status_code == 404
        assert "message" in resp.get_json()


class TestCategoryAuthorization:
    def test_anonymous_write_is_401(self, client, db_session):
        assert client.post("/api/categories", json={"name": "X"}).status_code == 401

    def test_user_write_is_403(self, client, user_headers):
        resp = client.post("/api/categories", json={"name": "X"}, headers=user_headers)
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Insufficient permissions. Required: MANAGER"

    def test_reads_are_public(self, client, make_category):
        category = make_category("Tools")
        assert client.get("/api/categories").status_code == 200
        assert client.get(f"/api/categories/{category.id}").status_code == 200


class TestCategoryDelete:
    def test_delete_with_products_is_409(self, client, manager_headers, make_category, make_product):
        category = make_category("Tools")
        make_product(sku="T-1", category_id=category.id)
        make_product(sku="T-2", category_id=category.id)

        resp = client.delete(f"/api/categories/{category.id}", headers=manager_headers)
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["productCount"] == 2
        assert "2 associated products" in body["message"]

        assert client.get(f"/api/categories/{category.id}").status_code == 200

    def test_delete_missing_is_404(self, client, manager_headers):
        assert client.delete("/api/categories/999", headers=manager_headers).status_code == 404


class TestCategoryList:
    @pytest.fixture
    def five_categories(self, make_category):
        return [make_category(name) for name in ("Alpha", "Bravo", "Charlie", "Delta", "Echo")]

    def test_pagination_math(self, client, five_categories):
        body = client.get("/api/categories?limit=2").get_json()
        pagination = body["pagination"]
        assert pagination["totalCount"] == 5
        assert pagination["totalPages"] == math.ceil(5 / 2)
        assert pagination["currentPage"] == 1
        assert pagination["hasNextPage"] is True
        assert pagination["hasPrevPage"] is False
        assert [c["name"] for c in body["categories"]] == ["Alpha", "Bravo"]

        last = client.get("/api/categories?limit=2&page=3").get_json()
        assert [c["name"] for c in last["categories"]] == ["Echo"]
        assert last["pagination"]["hasNextPage"] is False
        assert last["pagination"]["hasPrevPage"] is True

    def test_empty_list_has_zero_pages(self, client, db_session):
        pagination = client.get("/api/categories").get_json()["pagination"]
        assert pagination["totalCount"] == 0
        assert pagination["totalPages"] == 0
        assert pagination["hasNextPage"] is False

    def test_limit_is_clamped(self, client, five_categories):
        assert client.get("/api/categories?limit=500").get_json()["pagination"]["limit"] == 100
        assert client.get("/api/categories?limit=0").get_json()["pagination"]["limit"] == 1

    def test_unknown_sort_falls_back(self, client, five_categories):
        body = client.get("/api/categories?sortBy=password&sortOrder=desc").get_json()
        assert body["sorting"] == {"sortBy": "name", "sortOrder": "desc"}
        assert body["categories"][0]["name"] == "Echo"

    def test_search_is_case_insensitive(self, client, five_categories):
        body = client.get("/api/categories?search=CHAR").get_json()
        assert [c["name"] for c in body["categories"]] == ["Charlie"]
        assert body["filters"]["search"] == "CHAR"

    def test_include_product_count(self, client, make_category, make_product):
        category = make_category("Tools")
        make_product(sku="T-1", category_id=category.id)

        plain = client.get("/api/categories").get_json()["categories"][0]
        assert "productCount" not in plain

        counted = client.get("/api/categories?includeProductCount=true").get_json()["categories"][0]
        assert counted["productCount"] == 1

    def test_detail_previews_newest_products(self, client, make_category, make_product):
        category = make_category("Tools")
        for i in range(12):
            make_product(sku=f"T-{i:02d}", name=f"Tool {i}", category_id=category.id)

        body = client.get(f"/api/categories/{category.id}").get_json()
        assert body["productCount"] == 12
        assert len(body["products"]) == 10
        assert body["products"][0]["sku"] == "T-11"

    def test_search_wildcards_match_literally(self, client, make_category):
        make_category("Laptops")
        make_category("Phones")
        make_category("50% off")
        make_category("cable_ties")

        body = client.get("/api/categories?search=%25").get_json()
        assert [c["name"] for c in body["categories"]] == ["50% off"]

        body = client.get("/api/categories?search=_").get_json()
        assert [c["name"] for c in body["categories"]] == ["cable_ties"]
        assert body["pagination"]["totalCount"] == 1
