import pytest

NEW_PRODUCT = {
    "sku": "RAM-32G",
    "name_en": "DDR5 32GB Kit",
    "name_jp": "DDR5 32GBキット",
    "price": 14800,
    "inventory_quantity": 20,
    "specifications": {"speed": "6000MT/s", "modules": 2},
}


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role="admin", first_name="Admin", last_name="User")


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


# -------- Auth --------


def test_admin_login(client, admin):
    resp = client.post("/api/admin/login", json={"email": "admin@example.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["role"] == "admin"


def test_admin_login_rejects_customers(client, make_user):
    make_user()
    resp = client.post("/api/admin/login", json={"email": "taro@example.com", "password": "secret123"})
    assert resp.status_code == 403


def test_admin_routes_are_role_gated(client, make_user, auth_headers):
    customer = make_user()
    assert client.get("/api/admin/products").status_code == 401
    resp = client.get("/api/admin/products", headers=auth_headers(customer))
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "error": "Insufficient permissions"}

    manager = make_user(email="manager@example.com", role="manager")
    assert client.get("/api/admin/products", headers=auth_headers(manager)).status_code == 200


# -------- Products --------


def test_create_product(client, catalog, admin_headers):
    resp = client.post(
        "/api/admin/products",
        json={**NEW_PRODUCT, "category_id": catalog.cpu_category_id},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["sku"] == "RAM-32G"
    assert data["specifications"] == {"speed": "6000MT/s", "modules": 2}
    assert data["total_orders"] == 0

    # Visible on the storefront
    detail = client.get(f"/api/products/{data['id']}").json()["data"]
    assert detail["specifications"]["modules"] == 2


def test_create_product_rejects_duplicate_sku(client, catalog, admin_headers):
    resp = client.post(
        "/api/admin/products",
        json={**NEW_PRODUCT, "sku": "CPU-7600", "category_id": catalog.cpu_category_id},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "SKU already exists"


def test_create_product_rejects_unknown_fields_and_category(client, catalog, admin_headers):
    resp = client.post(
        "/api/admin/products",
        json={**NEW_PRODUCT, "category_id": catalog.cpu_category_id, "is_admin": True},
        headers=admin_headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/admin/products",
        json={**NEW_PRODUCT, "category_id": 9999},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Category not found"


def test_admin_list_includes_drafts(client, catalog, admin_headers):
    resp = client.get("/api/admin/products", headers=admin_headers)
    body = resp.json()
    assert body["pagination"]["total"] == 4
    assert "CPU-DRAFT" in [p["sku"] for p in body["data"]]

    resp = client.get("/api/admin/products", params={"search": "RTX"}, headers=admin_headers)
    assert [p["sku"] for p in resp.json()["data"]] == ["GPU-4060"]


def test_update_product_partial(client, catalog, admin_headers):
    resp = client.put(
        f"/api/admin/products/{catalog.cpu_id}",
        json={"price": 4800, "status": "archived"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["price"] == 4800
    assert data["status"] == "archived"
    assert data["name_en"] == "Ryzen 5 7600"
    assert data["specifications"] == {"cores": 6, "socket": "AM5"}

    assert client.get(f"/api/products/{catalog.cpu_id}").status_code == 404


def test_update_product_rejects_unknown_field(client, catalog, admin_headers):
    resp = client.put(
        f"/api/admin/products/{catalog.cpu_id}",
        json={"created_at": "2020-01-01T00:00:00"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_update_product_sku_conflict(client, catalog, admin_headers):
    resp = client.put(
        f"/api/admin/products/{catalog.cpu_id}",
        json={"sku": "GPU-4060"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_delete_product(client, catalog, admin_headers):
    resp = client.delete(f"/api/admin/products/{catalog.gpu_id}", headers=admin_headers)
    assert resp.status_code == 200
    assert client.get(f"/api/admin/products/{catalog.gpu_id}", headers=admin_headers).status_code == 404


def test_delete_product_drops_cart_lines_and_reviews(client, catalog, admin_headers, fill_cart, add_review):
    created = client.post(
        "/api/admin/products",
        json={**NEW_PRODUCT, "category_id": catalog.cpu_category_id},
        headers=admin_headers,
    ).json()["data"]
    token = fill_cart(created["id"], 1)
    add_review(created["id"], rating=4)

    resp = client.delete(f"/api/admin/products/{created['id']}", headers=admin_headers)
    assert resp.status_code == 200

    replacement = client.post(
        "/api/admin/products",
        json={
            **NEW_PRODUCT,
            "sku": "PSU-1000W",
            "name_en": "1000W PSU",
            "name_jp": "1000W 電源",
            "price": 25000,
            "category_id": catalog.cpu_category_id,
        },
        headers=admin_headers,
    ).json()["data"]

    cart = client.get("/api/cart", headers={"X-Session-Token": token}).json()["data"]
    assert cart["items"] == []
    assert cart["total"] == 0

    reviews = client.get(f"/api/products/{replacement['id']}/reviews").json()
    assert reviews["data"] == []


def test_delete_ordered_product_is_blocked(client, catalog, admin_headers, fill_cart, checkout):
    token = fill_cart(catalog.cpu_id, 2)
    checkout(token)

    resp = client.delete(f"/api/admin/products/{catalog.cpu_id}", headers=admin_headers)
    assert resp.status_code == 400

    data = client.get(f"/api/admin/products/{catalog.cpu_id}", headers=admin_headers).json()["data"]
    assert data["total_orders"] == 1
    assert data["total_sold"] == 2


# -------- Orders --------


def test_admin_order_listing_and_filters(client, catalog, admin_headers, make_user, auth_headers, fill_cart, checkout):
    hanako = make_user(email="hanako@example.com", first_name="Hanako", last_name="Sato")
    token = fill_cart(catalog.cpu_id, 1, headers=auth_headers(hanako))
    checkout(token, headers=auth_headers(hanako))
    guest_token = fill_cart(catalog.gpu_id, 1)
    guest_order = checkout(guest_token).json()["data"]

    resp = client.get("/api/admin/orders", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["pagination"]["total"] == 2

    resp = client.get("/api/admin/orders", params={"search": "Hanako"}, headers=admin_headers)
    [row] = resp.json()["data"]
    assert row["customer_first_name"] == "Hanako"

    client.put(
        f"/api/admin/orders/{guest_order['id']}/status",
        json={"status": "confirmed"},
        headers=admin_headers,
    )
    resp = client.get("/api/admin/orders", params={"status": "confirmed"}, headers=admin_headers)
    assert [o["id"] for o in resp.json()["data"]] == [guest_order["id"]]

    detail = client.get(f"/api/admin/orders/{guest_order['id']}", headers=admin_headers).json()["data"]
    assert detail["items"][0]["sku"] == "GPU-4060"


def test_admin_cancel_is_terminal(client, catalog, admin_headers, fill_cart, checkout):
    order_id = checkout(fill_cart(catalog.cpu_id, 1)).json()["data"]["id"]

    resp = client.put(
        f"/api/admin/orders/{order_id}/status",
        json={"status": "cancelled"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "cancelled"

    detail = client.get(f"/api/admin/orders/{order_id}", headers=admin_headers).json()["data"]
    assert detail["cancelled_at"] is not None

    resp = client.put(
        f"/api/admin/orders/{order_id}/status",
        json={"status": "pending"},
        headers=admin_headers,
    )
    assert resp.status_code == 400

    # Progression cannot leave cancelled either
    resp = client.put(f"/api/orders/{order_id}/status", headers=admin_headers)
    assert resp.status_code == 400


def test_admin_status_rejects_unknown_value(client, catalog, admin_headers, fill_cart, checkout):
    order_id = checkout(fill_cart(catalog.cpu_id, 1)).json()["data"]["id"]
    resp = client.put(
        f"/api/admin/orders/{order_id}/status",
        json={"status": "lost"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_admin_order_not_found(client, admin_headers):
    assert client.get("/api/admin/orders/9999", headers=admin_headers).status_code == 404


# -------- Users --------


def test_admin_user_listing_with_stats(client, catalog, admin_headers, make_user, auth_headers, fill_cart, checkout):
    taro = make_user()
    headers = auth_headers(taro)
    checkout(fill_cart(catalog.cpu_id, 1, headers=headers), headers=headers)

    resp = client.get("/api/admin/users", params={"role": "customer"}, headers=admin_headers)
    [row] = resp.json()["data"]
    assert row["email"] == "taro@example.com"
    assert row["order_count"] == 1
    assert row["total_spent"] == 5000 + 500 + 800
    assert row["last_order_date"] is not None
    assert "password_hash" not in row

    resp = client.get("/api/admin/users", params={"search": "admin"}, headers=admin_headers)
    assert [u["email"] for u in resp.json()["data"]] == ["admin@example.com"]

    detail = client.get(f"/api/admin/users/{taro.id}", headers=admin_headers).json()["data"]
    assert len(detail["recent_orders"]) == 1
    assert detail["recent_orders"][0]["item_count"] == 1


def test_admin_deactivates_user(client, admin_headers, make_user):
    taro = make_user()
    resp = client.put(
        f"/api/admin/users/{taro.id}/status",
        json={"is_active": False},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["is_active"] is False

    resp = client.post("/api/auth/login", json={"email": "taro@example.com", "password": "secret123"})
    assert resp.status_code == 401


def test_admin_cannot_deactivate_self(client, admin, admin_headers):
    resp = client.put(
        f"/api/admin/users/{admin.id}/status",
        json={"is_active": False},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_admin_user_not_found(client, admin_headers):
    assert client.get("/api/admin/users/9999", headers=admin_headers).status_code == 404
