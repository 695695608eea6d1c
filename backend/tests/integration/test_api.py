"""
HTTP-level tests: routing, role guards, error mapping and the
cart -> order flow through the FastAPI app.
"""
import pytest_asyncio

from conftest import TEST_PASSWORD, auth_headers


class TestHealth:
    async def test_root(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    async def test_health_pings_database(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    async def test_security_headers(self, client):
        response = await client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestAuth:
    async def test_register_returns_user_token(self, client, seeded):
        response = await client.post("/api/auth/register", json={
            "username": "carol",
            "email": "carol@example.com",
            "password": "long-enough-pw",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["username"] == "carol"
        assert body["user"]["role"] == "User"

        me = await client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert me.status_code == 200
        assert me.json()["email"] == "carol@example.com"

    async def test_register_duplicate_username(self, client, seeded):
        response = await client.post("/api/auth/register", json={
            "username": "alice",
            "email": "other@example.com",
            "password": "long-enough-pw",
        })
        assert response.status_code == 400
        assert response.json()["message"] == "Username already exists"

    async def test_register_validates_body(self, client, seeded):
        response = await client.post("/api/auth/register", json={
            "username": "ab",
            "email": "not-an-email",
            "password": "short",
        })
        assert response.status_code == 422

    async def test_login(self, client, seeded):
        response = await client.post("/api/auth/login", json={
            "username": "manny",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "Manager"

    async def test_login_wrong_password(self, client, seeded):
        response = await client.post("/api/auth/login", json={
            "username": "alice",
            "password": "wrong-password",
        })
        assert response.status_code == 401
        assert response.json() == {
            "error": "AUTHENTICATION_FAILED",
            "message": "Invalid username or password",
            "details": {},
        }

    async def test_me_requires_token(self, client, seeded):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_bad_token(self, client, seeded):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    async def test_token_for_deleted_user(self, client, seeded):
        response = await client.get("/api/auth/me", headers=auth_headers(999999))
        assert response.status_code == 401


class TestCatalogRoutes:
    async def test_search_is_public(self, client, seeded):
        response = await client.get("/api/products", params={"search": "widg"})
        assert response.status_code == 200
        body = response.json()
        assert body["total_count"] == 1
        assert body["products"][0]["name"] == "Widget"
        assert body["products"][0]["price"] == "10.00"
        assert body["products"][0]["category_name"] == "Books"

    async def test_inactive_products_hidden_from_search(self, client, seeded):
        response = await client.get("/api/products", params={"search": "Retired"})
        assert response.json()["total_count"] == 0

    async def test_page_size_is_bounded(self, client, seeded):
        response = await client.get("/api/products", params={"page_size": 1000})
        assert response.status_code == 422

    async def test_get_missing_product(self, client, seeded):
        response = await client.get("/api/products/999999")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "PRODUCT_NOT_FOUND"
        assert body["details"] == {"product_id": 999999}

    async def test_by_category(self, client, seeded):
        response = await client.get(f"/api/products/category/{seeded.books}")
        assert response.status_code == 200
        assert [p["name"] for p in response.json()["products"]] == ["Gadget", "Widget"]

    async def test_in_stock(self, client, seeded):
        response = await client.get(f"/api/products/{seeded.gadget}/in-stock", params={"quantity": 3})
        assert response.json() == {"product_id": seeded.gadget, "quantity": 3, "in_stock": False}

    async def test_user_cannot_create_product(self, client, headers):
        response = await client.post(
            "/api/products",
            json={"name": "Lamp", "price": "4.00", "stock_quantity": 3},
            headers=headers.alice,
        )
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"

    async def test_anonymous_cannot_create_product(self, client, seeded):
        response = await client.post("/api/products", json={"name": "Lamp", "price": "4.00"})
        assert response.status_code == 401

    async def test_manager_product_lifecycle(self, client, seeded, headers):
        created = await client.post(
            "/api/products",
            json={"name": "Lamp", "price": "4.00", "stock_quantity": 3, "category_id": seeded.books},
            headers=headers.manager,
        )
        assert created.status_code == 201
        product = created.json()
        assert product["category_name"] == "Books"

        updated = await client.put(
            f"/api/products/{product['id']}",
            json={"price": "4.50"},
            headers=headers.manager,
        )
        assert updated.status_code == 200
        assert updated.json()["price"] == "4.50"
        assert updated.json()["stock_quantity"] == 3

        deleted = await client.delete(f"/api/products/{product['id']}", headers=headers.manager)
        assert deleted.status_code == 204

        missing = await client.get(f"/api/products/{product['id']}")
        assert missing.status_code == 404

    async def test_null_fields_in_update_are_ignored(self, client, seeded, headers):
        response = await client.put(
            f"/api/products/{seeded.widget}",
            json={"name": None, "price": None, "stock_quantity": 7},
            headers=headers.manager,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Widget"
        assert body["price"] == "10.00"
        assert body["stock_quantity"] == 7

    async def test_product_with_unknown_category(self, client, headers):
        response = await client.post(
            "/api/products",
            json={"name": "Lamp", "price": "4.00", "category_id": 999999},
            headers=headers.manager,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "CATEGORY_NOT_FOUND"

    async def test_category_routes(self, client, seeded, headers):
        created = await client.post(
            "/api/categories",
            json={"name": "Fiction", "parent_id": seeded.books},
            headers=headers.manager,
        )
        assert created.status_code == 201
        assert created.json()["parent_name"] == "Books"

        listing = await client.get("/api/categories")
        assert {c["name"] for c in listing.json()} == {"Books", "Fiction"}

        cycle = await client.put(
            f"/api/categories/{seeded.books}",
            json={"parent_id": created.json()["id"]},
            headers=headers.manager,
        )
        assert cycle.status_code == 400
        assert cycle.json()["error"] == "CATEGORY_CYCLE"


class TestCartAndOrders:
    async def test_cart_requires_auth(self, client, seeded):
        response = await client.get("/api/cart")
        assert response.status_code == 401

    async def test_checkout_flow(self, client, seeded, headers):
        empty = await client.get("/api/cart", headers=headers.alice)
        assert empty.status_code == 200
        assert empty.json()["items"] == []

        await client.post("/api/cart/items", json={"product_id": seeded.widget, "quantity": 2}, headers=headers.alice)
        cart = await client.post(
            "/api/cart/items",
            json={"product_id": seeded.gadget, "quantity": 2},
            headers=headers.alice,
        )
        assert cart.status_code == 200
        assert cart.json()["total_amount"] == "25.00"
        assert cart.json()["total_items"] == 4

        placed = await client.post(
            "/api/orders",
            json={"shipping_address": "1 Main St", "billing_address": "1 Main St"},
            headers=headers.alice,
        )
        assert placed.status_code == 201
        order = placed.json()
        assert order["status"] == "Pending"
        assert order["total_amount"] == "25.00"
        assert order["user_name"] == "alice"
        assert sorted((i["product_name"], i["quantity"]) for i in order["items"]) == [("Gadget", 2), ("Widget", 2)]

        after = await client.get("/api/cart", headers=headers.alice)
        assert after.json()["items"] == []

        stock = await client.get(f"/api/products/{seeded.widget}")
        assert stock.json()["stock_quantity"] == 3

        history = await client.get("/api/orders", headers=headers.alice)
        assert [o["id"] for o in history.json()] == [order["id"]]

    async def test_over_stock_add(self, client, seeded, headers):
        response = await client.post(
            "/api/cart/items",
            json={"product_id": seeded.gadget, "quantity": 3},
            headers=headers.alice,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "INSUFFICIENT_STOCK"
        assert body["details"]["available_qty"] == 2

    async def test_add_inactive_product(self, client, seeded, headers):
        response = await client.post(
            "/api/cart/items",
            json={"product_id": seeded.retired, "quantity": 1},
            headers=headers.alice,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "PRODUCT_UNAVAILABLE"

    async def test_add_rejects_zero_quantity(self, client, seeded, headers):
        response = await client.post(
            "/api/cart/items",
            json={"product_id": seeded.widget, "quantity": 0},
            headers=headers.alice,
        )
        assert response.status_code == 422

    async def test_update_and_remove_line(self, client, seeded, headers):
        await client.post("/api/cart/items", json={"product_id": seeded.widget, "quantity": 1}, headers=headers.bob)

        updated = await client.put(f"/api/cart/items/{seeded.widget}", json={"quantity": 4}, headers=headers.bob)
        assert updated.json()["items"][0]["quantity"] == 4

        removed = await client.put(f"/api/cart/items/{seeded.widget}", json={"quantity": 0}, headers=headers.bob)
        assert removed.status_code == 200
        assert removed.json()["items"] == []

        missing = await client.put(f"/api/cart/items/{seeded.widget}", json={"quantity": 1}, headers=headers.bob)
        assert missing.status_code == 404
        assert missing.json()["error"] == "CART_ITEM_NOT_FOUND"

    async def test_clear_cart(self, client, seeded, headers):
        await client.post("/api/cart/items", json={"product_id": seeded.widget, "quantity": 1}, headers=headers.bob)

        response = await client.delete("/api/cart", headers=headers.bob)
        assert response.status_code == 204

        cart = await client.get("/api/cart", headers=headers.bob)
        assert cart.json()["items"] == []

    async def test_order_from_empty_cart(self, client, seeded, headers):
        response = await client.post(
            "/api/orders",
            json={"shipping_address": "1 Main St", "billing_address": "1 Main St"},
            headers=headers.bob,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "CART_EMPTY"

    async def test_order_requires_addresses(self, client, seeded, headers):
        response = await client.post(
            "/api/orders",
            json={"shipping_address": "", "billing_address": "x"},
            headers=headers.bob,
        )
        assert response.status_code == 422


class TestOrderAccess:
    @pytest_asyncio.fixture
    async def order_id(self, client, seeded, headers):
        await client.post("/api/cart/items", json={"product_id": seeded.widget, "quantity": 1}, headers=headers.alice)
        placed = await client.post(
            "/api/orders",
            json={"shipping_address": "1 Main St", "billing_address": "1 Main St"},
            headers=headers.alice,
        )
        return placed.json()["id"]

    async def test_owner_can_read(self, client, headers, order_id):
        response = await client.get(f"/api/orders/{order_id}", headers=headers.alice)
        assert response.status_code == 200

    async def test_other_user_cannot_read(self, client, headers, order_id):
        response = await client.get(f"/api/orders/{order_id}", headers=headers.bob)
        assert response.status_code == 403

    async def test_manager_can_read(self, client, headers, order_id):
        response = await client.get(f"/api/orders/{order_id}", headers=headers.manager)
        assert response.status_code == 200
        assert response.json()["user_name"] == "alice"

    async def test_missing_order(self, client, headers):
        response = await client.get("/api/orders/999999", headers=headers.alice)
        assert response.status_code == 404

    async def test_user_cannot_change_status(self, client, headers, order_id):
        response = await client.put(
            f"/api/orders/{order_id}/status",
            json={"status": "Processing"},
            headers=headers.alice,
        )
        assert response.status_code == 403

    async def test_manager_moves_status_forward(self, client, headers, order_id):
        response = await client.put(
            f"/api/orders/{order_id}/status",
            json={"status": "Processing"},
            headers=headers.manager,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "Processing"

        listing = await client.get("/api/orders/status/processing", headers=headers.manager)
        assert [o["id"] for o in listing.json()] == [order_id]

    async def test_illegal_transition(self, client, headers, order_id):
        response = await client.put(
            f"/api/orders/{order_id}/status",
            json={"status": "Delivered"},
            headers=headers.manager,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "INVALID_ORDER_STATUS"
        assert body["details"] == {"current_status": "Pending", "requested_status": "Delivered"}

    async def test_unknown_status_value(self, client, headers, order_id):
        response = await client.put(
            f"/api/orders/{order_id}/status",
            json={"status": "Lost"},
            headers=headers.manager,
        )
        assert response.status_code == 422

    async def test_unknown_status_filter(self, client, headers):
        response = await client.get("/api/orders/status/lost", headers=headers.manager)
        assert response.status_code == 400

    async def test_user_cannot_list_by_status(self, client, headers):
        response = await client.get("/api/orders/status/pending", headers=headers.alice)
        assert response.status_code == 403


class TestUserAdministration:
    async def test_manager_cannot_list_users(self, client, headers):
        response = await client.get("/api/users", headers=headers.manager)
        assert response.status_code == 403

    async def test_admin_lists_users(self, client, headers):
        response = await client.get("/api/users", headers=headers.admin)
        assert response.status_code == 200
        assert {u["username"] for u in response.json()} == {"alice", "bob", "manny", "root"}
        assert all("hashed_password" not in u for u in response.json())

    async def test_list_by_role(self, client, headers):
        response = await client.get("/api/users/role/manager", headers=headers.admin)
        assert [u["username"] for u in response.json()] == ["manny"]

    async def test_list_by_unknown_role(self, client, headers):
        response = await client.get("/api/users/role/wizard", headers=headers.admin)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid role specified"

    async def test_admin_creates_manager(self, client, headers):
        response = await client.post(
            "/api/users",
            json={
                "username": "dora",
                "email": "dora@example.com",
                "password": "long-enough-pw",
                "role": "Manager",
            },
            headers=headers.admin,
        )
        assert response.status_code == 201
        assert response.json()["role"] == "Manager"

        login = await client.post("/api/auth/login", json={"username": "dora", "password": "long-enough-pw"})
        assert login.status_code == 200

    async def test_admin_updates_and_deletes(self, client, seeded, headers):
        updated = await client.put(
            f"/api/users/{seeded.bob}",
            json={"first_name": "Robert", "is_active": False},
            headers=headers.admin,
        )
        assert updated.status_code == 200
        assert updated.json()["first_name"] == "Robert"
        assert updated.json()["is_active"] is False

        disabled = await client.get("/api/auth/me", headers=headers.bob)
        assert disabled.status_code == 401

        deleted = await client.delete(f"/api/users/{seeded.bob}", headers=headers.admin)
        assert deleted.status_code == 204

        missing = await client.get(f"/api/users/{seeded.bob}", headers=headers.admin)
        assert missing.status_code == 404
