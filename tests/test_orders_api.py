import re

from sqlmodel import select

from app.models.cart import CartItem
from app.models.product import Product


def test_guest_checkout_creates_order_and_empties_cart(client, session, catalog, fill_cart, checkout):
    token = fill_cart(catalog.gpu_id, 2)

    resp = checkout(token)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    order = body["data"]

    assert re.fullmatch(r"PC\d{8}", order["order_number"])
    assert order["user_id"] is None
    assert order["status"] == "pending"
    assert order["payment_method"] == "cod"
    assert order["payment_status"] == "cod_pending"
    assert order["shipping_status"] == "pending"
    assert order["currency"] == "JPY"
    assert order["subtotal"] == 12000
    assert order["tax_amount"] == 1200
    assert order["shipping_amount"] == 0
    assert order["discount_amount"] == 0
    assert order["total_amount"] == 13200
    assert order["item_count"] == 1

    [line] = order["items"]
    assert line["sku"] == "GPU-4060"
    assert line["name"] == "GeForce RTX 4060"
    assert line["quantity"] == 2
    assert line["price"] == 6000
    assert line["total"] == 12000

    assert order["shipping_address"]["city"] == "Shibuya-ku"
    # Billing defaults to shipping
    assert order["billing_address"] == order["shipping_address"]

    cart = client.get("/api/cart", headers={"X-Session-Token": token}).json()["data"]
    assert cart["items"] == []
    assert session.exec(select(CartItem)).all() == []


def test_credit_card_payment_is_completed(client, catalog, fill_cart, checkout):
    token = fill_cart(catalog.cpu_id, 1)
    order = checkout(token, payment_method="credit_card").json()["data"]
    assert order["payment_status"] == "completed"
    assert order["status"] == "pending"
    assert order["total_amount"] == 5000 + 500 + 800


def test_session_token_in_body(client, catalog, fill_cart):
    token = fill_cart(catalog.cpu_id, 1)
    resp = client.post(
        "/api/orders",
        json={
            "session_token": token,
            "email": "guest@example.com",
            "shipping": {
                "first_name": "Hanako",
                "last_name": "Sato",
                "address1": "4-5-6 Umeda",
                "city": "Osaka",
                "country": "JP",
                "zip": "530-0001",
            },
            "payment_method": "cod",
            "notes": "  Leave at door  ",
        },
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["notes"] == "Leave at door"


def test_variant_line_snapshot(client, catalog, fill_cart, checkout):
    token = fill_cart(catalog.gpu_id, 1, variant_id=catalog.variant_id)
    [line] = checkout(token).json()["data"]["items"]
    assert line["sku"] == "GPU-4060-8G"
    assert line["name"] == "GeForce RTX 4060 - 8GB"
    assert line["price"] == 6500
    assert line["product_variant_id"] == catalog.variant_id


def test_empty_cart_checkout_is_rejected(client, catalog, checkout):
    resp = checkout("f" * 64)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cart is empty"


def test_checkout_validates_address_and_payment(client, catalog, fill_cart):
    token = fill_cart(catalog.cpu_id, 1)
    headers = {"X-Session-Token": token}

    resp = client.post(
        "/api/orders",
        json={"email": "taro@example.com", "shipping": {"first_name": "Taro"}, "payment_method": "cod"},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/orders",
        json={
            "email": "not-an-email",
            "shipping": {
                "first_name": "Taro",
                "last_name": "Yamada",
                "address1": "1-2-3",
                "city": "Tokyo",
                "country": "JP",
                "zip": "100-0001",
            },
            "payment_method": "bitcoin",
        },
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    # Cart is untouched by failed attempts
    assert client.get("/api/cart", headers=headers).json()["data"]["item_count"] == 1


def test_order_snapshot_is_stable_after_product_edit(client, session, catalog, fill_cart, checkout, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    token = fill_cart(catalog.cpu_id, 1, headers=headers)
    order_id = checkout(token, headers=headers).json()["data"]["id"]

    product = session.get(Product, catalog.cpu_id)
    product.name_en = "Ryzen 5 7600 (renamed)"
    product.price = 99999
    product.sku = "CPU-CHANGED"
    session.add(product)
    session.commit()

    order = client.get(f"/api/orders/{order_id}", headers=headers).json()["data"]
    [line] = order["items"]
    assert line["name"] == "Ryzen 5 7600"
    assert line["sku"] == "CPU-7600"
    assert line["price"] == 5000
    assert order["subtotal"] == 5000


def test_authenticated_order_history(client, catalog, fill_cart, checkout, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    for _ in range(3):
        token = fill_cart(catalog.cpu_id, 1, headers=headers)
        resp = checkout(token, headers=headers)
        assert resp.json()["data"]["user_id"] == user.id

    resp = client.get("/api/orders", params={"page": 1, "limit": 2}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["data"]) == 2
    assert body["data"][0]["item_count"] == 1
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }


def test_order_history_requires_auth(client):
    assert client.get("/api/orders").status_code == 401
    resp = client.get("/api/orders", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Authentication required"}


def test_cannot_read_other_users_order(client, catalog, fill_cart, checkout, make_user, auth_headers):
    owner = make_user()
    other = make_user(email="other@example.com")
    token = fill_cart(catalog.cpu_id, 1, headers=auth_headers(owner))
    order_id = checkout(token, headers=auth_headers(owner)).json()["data"]["id"]

    assert client.get(f"/api/orders/{order_id}", headers=auth_headers(owner)).status_code == 200
    assert client.get(f"/api/orders/{order_id}", headers=auth_headers(other)).status_code == 404


def test_status_progression_steps_once_per_call(client, catalog, fill_cart, checkout, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    token = fill_cart(catalog.cpu_id, 1, headers=headers)
    order_id = checkout(token, headers=headers).json()["data"]["id"]

    seen = []
    for _ in range(4):
        resp = client.put(f"/api/orders/{order_id}/status", headers=headers)
        assert resp.status_code == 200
        seen.append(resp.json()["data"]["status"])
    assert seen == ["confirmed", "processing", "shipped", "delivered"]

    detail = client.get(f"/api/orders/{order_id}", headers=headers).json()["data"]
    assert detail["shipping_status"] == "delivered"
    assert detail["shipped_at"] is not None
    assert detail["delivered_at"] is not None

    resp = client.put(f"/api/orders/{order_id}/status", headers=headers)
    assert resp.status_code == 400


def test_progression_rejects_skipping_steps(client, catalog, fill_cart, checkout, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    token = fill_cart(catalog.cpu_id, 1, headers=headers)
    order_id = checkout(token, headers=headers).json()["data"]["id"]

    resp = client.put(f"/api/orders/{order_id}/status", json={"status": "shipped"}, headers=headers)
    assert resp.status_code == 400

    resp = client.put(f"/api/orders/{order_id}/status", json={"status": "confirmed"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "confirmed"


def test_progression_requires_owner(client, catalog, fill_cart, checkout, make_user, auth_headers):
    owner = make_user()
    other = make_user(email="other@example.com")
    token = fill_cart(catalog.cpu_id, 1, headers=auth_headers(owner))
    order_id = checkout(token, headers=auth_headers(owner)).json()["data"]["id"]

    assert client.put(f"/api/orders/{order_id}/status").status_code == 401
    assert client.put(f"/api/orders/{order_id}/status", headers=auth_headers(other)).status_code == 404

    admin = make_user(email="admin@example.com", role="admin")
    resp = client.put(f"/api/orders/{order_id}/status", headers=auth_headers(admin))
    assert resp.status_code == 200
