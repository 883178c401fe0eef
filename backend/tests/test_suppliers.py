# Overview: Pytest coverage for supplier CRUD, partial updates and delete guards.


class TestSupplierCreate:
    def test_create(self, client, manager_headers):
        resp = client.post(
            "/api/suppliers",
            json={
                "name": " Acme Supply ",
                "contactPerson": "Jane Roe",
                "email": "orders@acme.example",
                "phone": "+1-555-0100",
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["name"] == "Acme Supply"
        assert body["contactPerson"] == "Jane Roe"
        assert body["address"] is None
        assert body["productCount"] == 0

    def test_blank_name_rejected(self, client, manager_headers):
        resp = client.post("/api/suppliers", json={"name": "   "}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.get_json()["fields"] == ["name"]

    def test_invalid_email_rejected(self, client, manager_headers):
        resp = client.post(
            "/api/suppliers", json={"name": "Acme", "email": "acme at example"}, headers=manager_headers
        )
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid email format"

    def test_duplicate_name(self, client, manager_headers, make_supplier):
        make_supplier("Acme")
        resp = client.post("/api/suppliers", json={"name": "Acme"}, headers=manager_headers)
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Supplier with this name already exists"

    def test_user_cannot_create(self, client, user_headers):
        assert client.post("/api/suppliers", json={"name": "Acme"}, headers=user_headers).status_code == 403


class TestSupplierUpdate:
    def test_partial_update_keeps_other_fields(self, client, manager_headers, make_supplier):
        supplier = make_supplier("Acme", contact_person="Jane Roe", email="a@acme.example")

        resp = client.put(
            f"/api/suppliers/{supplier.id}", json={"phone": "555-0199"}, headers=manager_headers
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["phone"] == "555-0199"
        assert body["name"] == "Acme"
        assert body["contactPerson"] == "Jane Roe"
        assert body["email"] == "a@acme.example"

    def test_no_fields(self, client, manager_headers, make_supplier):
        supplier = make_supplier("Acme")
        resp = client.put(f"/api/suppliers/{supplier.id}", json={}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"].startswith("No fields to update")

    def test_empty_name(self, client, manager_headers, make_supplier):
        supplier = make_supplier("Acme")
        resp = client.put(f"/api/suppliers/{supplier.id}", json={"name": " "}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Name cannot be empty"

    def test_invalid_email_leaves_row_unchanged(self, client, manager_headers, make_supplier):
        supplier = make_supplier("Acme")
        resp = client.put(
            f"/api/suppliers/{supplier.id}",
            json={"name": "Renamed", "email": "broken"},
            headers=manager_headers,
        )
        assert resp.status_code == 400
        assert client.get(f"/api/suppliers/{supplier.id}").get_json()["name"] == "Acme"

    def test_rename_conflict(self, client, manager_headers, make_supplier):
        make_supplier("Acme")
        other = make_supplier("Globex")
        resp = client.put(f"/api/suppliers/{other.id}", json={"name": "Acme"}, headers=manager_headers)
        assert resp.status_code == 409

    def test_missing(self, client, manager_headers):
        resp = client.put("/api/suppliers/999", json={"phone": "1"}, headers=manager_headers)
        assert resp.status_code == 404


class TestSupplierReadAndDelete:
    def test_detail_lists_products_by_name(self, client, make_supplier, make_product):
        supplier = make_supplier("Acme")
        make_product(sku="B", name="Bolt", supplier_id=supplier.id)
        make_product(sku="A", name="Anchor", supplier_id=supplier.id)

        body = client.get(f"/api/suppliers/{supplier.id}").get_json()
        assert body["productCount"] == 2
        assert [p["name"] for p in body["products"]] == ["Anchor", "Bolt"]

    def test_list_search_matches_contact(self, client, make_supplier):
        make_supplier("Acme", contact_person="Jane Roe")
        make_supplier("Globex", contact_person="Hank Scorpio")

        body = client.get("/api/suppliers?search=scorpio").get_json()
        assert [s["name"] for s in body["suppliers"]] == ["Globex"]

    def test_delete_blocked_by_products(self, client, manager_headers, make_supplier, make_product):
        supplier = make_supplier("Acme")
        make_product(sku="A-1", supplier_id=supplier.id)

        resp = client.delete(f"/api/suppliers/{supplier.id}", headers=manager_headers)
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["message"] == "Cannot delete supplier with existing products"
        assert body["productCount"] == 1

    def test_delete(self, client, manager_headers, make_supplier):
        supplier = make_supplier("Acme")
        resp = client.delete(f"/api/suppliers/{supplier.id}", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Supplier deleted successfully"

        assert client.get(f"/api/suppliers/{supplier.id}").status_code == 404
        assert client.get("/api/suppliers").get_json()["pagination"]["totalCount"] == 0
