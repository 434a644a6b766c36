from conftest import order_payload


def place(api, **kwargs):
    response = api.post("/orders", json=order_payload(**kwargs))
    assert response.status_code == 201, response.text
    return response.json()


def test_root(api):
    assert api.get("/").json() == {"name": "Storefront API", "status": "ok"}


class TestOrderRoutes:
    def test_create(self, api):
        order = place(api)

        assert order["status"] == "Pending"
        assert order["total"] == 1120
        assert order["shippingCharge"] == 120
        assert order["paymentMethod"] == "COD"
        assert order["cartItems"][0]["unitPrice"] == 1000
        assert order["orderId"].isdigit() and 5 <= len(order["orderId"]) <= 7
        assert order["id"]

    def test_empty_cart_is_400(self, api, db):
        response = api.post("/orders", json=order_payload(items=[]))

        assert response.status_code == 400
        assert response.json()["detail"] == "Cart is empty"
        assert db["order"].count_documents({}) == 0

    def test_invalid_status_payload_is_rejected(self, api, admin_headers):
        order = place(api)
        response = api.put(f"/orders/{order['id']}/status", json={"status": "Lost"}, headers=admin_headers)

        assert response.status_code == 422

    def test_get_by_short_id_or_system_id(self, api):
        order = place(api)

        assert api.get(f"/orders/{order['orderId']}").json()["id"] == order["id"]
        assert api.get(f"/orders/{order['id']}").json()["orderId"] == order["orderId"]

    def test_get_missing(self, api):
        assert api.get("/orders/12345").status_code == 404
        assert api.get("/orders/garbage").status_code == 404
        assert api.get("/orders/65f0c0ffee0000000000beef").status_code == 404

    def test_admin_routes_need_token(self, api):
        order = place(api)

        assert api.get("/orders").status_code == 401
        assert api.get("/orders/stats").status_code == 401
        assert api.put(f"/orders/{order['id']}/status", json={"status": "Shipped"}).status_code == 401
        assert api.delete(f"/orders/{order['id']}", headers={"Authorization": "Bearer wrong"}).status_code == 401

    def test_status_update(self, api, admin_headers):
        order = place(api)
        response = api.put(f"/orders/{order['id']}/status", json={"status": "Shipped"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "Shipped"
        assert api.get(f"/orders/{order['orderId']}").json()["status"] == "Shipped"

    def test_status_update_missing(self, api, admin_headers):
        response = api.put("/orders/65f0c0ffee0000000000beef/status", json={"status": "Shipped"},
                           headers=admin_headers)
        assert response.status_code == 404

    def test_delete(self, api, admin_headers):
        order = place(api)

        assert api.delete(f"/orders/{order['id']}", headers=admin_headers).status_code == 200
        assert api.get(f"/orders/{order['id']}").status_code == 404
        assert api.delete(f"/orders/{order['id']}", headers=admin_headers).status_code == 404

    def test_list(self, api, admin_headers):
        first = place(api)
        second = place(api)

        ids = [o["id"] for o in api.get("/orders", headers=admin_headers).json()]
        assert ids == [second["id"], first["id"]]

    def test_stats(self, api, admin_headers):
        place(api)
        cancelled = place(api, payment_method="Online", total=1000)
        api.put(f"/orders/{cancelled['id']}/status", json={"status": "Cancelled"}, headers=admin_headers)
        api.post("/admin/products", json={"name": "Lawn Kurti", "category": "Cotton", "price": 900},
                 headers=admin_headers)

        stats = api.get("/orders/stats", headers=admin_headers).json()

        assert stats == {"totalOrders": 2, "onlineTransactions": 1, "totalRevenue": 1000, "totalProducts": 1}


class TestProducts:
    def test_crud(self, api, admin_headers):
        created = api.post("/admin/products", json={
            "name": "Lawn Kurti", "category": "Cotton", "price": 900, "sizes": ["S", "M"],
        }, headers=admin_headers)
        assert created.status_code == 201
        product = created.json()
        assert len(product["productId"]) == 6

        assert api.get(f"/products/{product['id']}").json()["name"] == "Lawn Kurti"
        assert api.get(f"/products/{product['productId']}").json()["id"] == product["id"]

        updated = api.put(f"/admin/products/{product['id']}", json={
            "name": "Lawn Kurti", "category": "Cotton", "price": 850,
        }, headers=admin_headers).json()
        assert updated["price"] == 850
        assert updated["productId"] == product["productId"]

        assert api.delete(f"/admin/products/{product['id']}", headers=admin_headers).status_code == 200
        assert api.get(f"/products/{product['id']}").status_code == 404

    def test_list_by_category(self, api, admin_headers):
        for name, category in [("Kurti", "Cotton"), ("Saree", "Silk"), ("Palazzo", "Cotton")]:
            api.post("/admin/products", json={"name": name, "category": category, "price": 100},
                     headers=admin_headers)

        names = {p["name"] for p in api.get("/products", params={"category": "Cotton"}).json()}
        assert names == {"Kurti", "Palazzo"}
        assert len(api.get("/products").json()) == 3

    def test_writes_need_token(self, api):
        assert api.post("/admin/products", json={"name": "X", "category": "Y", "price": 1}).status_code == 401


class TestSettingsAndAuth:
    def test_defaults_are_seeded_without_password(self, api):
        settings = api.get("/settings").json()

        assert settings["codEnabled"] is True
        assert settings["adminEmail"] == "owner@sazo.com"
        assert "adminPassword" not in settings
        assert "adminPasswordHash" not in settings

    def test_update(self, api, admin_headers):
        response = api.put("/settings", json={
            "codEnabled": False,
            "shippingOptions": [{"id": "inside", "label": "Inside Dhaka", "charge": 70}],
        }, headers=admin_headers)

        assert response.status_code == 200
        settings = api.get("/settings").json()
        assert settings["codEnabled"] is False
        assert settings["shippingOptions"] == [{"id": "inside", "label": "Inside Dhaka", "charge": 70}]
        assert settings["onlinePaymentEnabled"] is True

    def test_update_needs_token(self, api):
        assert api.put("/settings", json={"codEnabled": False}).status_code == 401

    def test_login(self, api, admin_headers):
        response = api.post("/auth/login", json={"email": "OWNER@sazo.com", "password": "s3cret"})

        assert response.status_code == 200
        assert response.json()["token"] == admin_headers["Authorization"].split()[1]

    def test_login_rejects_bad_password(self, api):
        assert api.post("/auth/login", json={"email": "owner@sazo.com", "password": "nope"}).status_code == 401

    def test_password_change(self, api, admin_headers):
        api.put("/settings", json={"adminPassword": "n3w"}, headers=admin_headers)

        assert api.post("/auth/login", json={"email": "owner@sazo.com", "password": "s3cret"}).status_code == 401
        assert api.post("/auth/login", json={"email": "owner@sazo.com", "password": "n3w"}).status_code == 200


class TestMessages:
    def test_lifecycle(self, api, admin_headers):
        sent = api.post("/messages", json={"name": "Nila", "email": "nila@mail.com", "message": "Is this in stock?"})
        assert sent.status_code == 201
        message_id = sent.json()["id"]

        inbox = api.get("/messages", headers=admin_headers).json()
        assert [(m["id"], m["isRead"]) for m in inbox] == [(message_id, False)]

        read = api.put(f"/messages/{message_id}/read", json={"isRead": True}, headers=admin_headers)
        assert read.json()["isRead"] is True

        assert api.delete(f"/messages/{message_id}", headers=admin_headers).status_code == 200
        assert api.delete(f"/messages/{message_id}", headers=admin_headers).status_code == 404

    def test_inbox_needs_token(self, api):
        assert api.get("/messages").status_code == 401
