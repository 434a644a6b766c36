"""
Shared fixtures: an in-memory MongoDB (mongomock) wired into the FastAPI app
through dependency overrides, plus sample catalog and settings data.
"""
import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from database import ensure_indexes, get_db
from schemas import Product, Settings, ShippingOption

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def db():
    database = mongomock.MongoClient()["storefront_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def api(db, monkeypatch):
    monkeypatch.setenv("ADMIN_TOKEN", ADMIN_TOKEN)
    monkeypatch.setenv("ADMIN_EMAIL", "owner@sazo.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret")
    main.app.dependency_overrides[get_db] = lambda: db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def saree():
    return Product(
        id="65f0c0ffee0000000000a001",
        product_id="100001",
        name="Silk Saree",
        category="Silk",
        price=1000,
        sizes=["S", "M", "L"],
        images=["https://cdn.sazo.com/saree-front.jpg", "https://cdn.sazo.com/saree-back.jpg"],
    )


@pytest.fixture
def lipstick():
    return Product(
        id="65f0c0ffee0000000000a002",
        product_id="100002",
        name="Matte Lipstick",
        category="Cosmetics",
        price=450,
        sizes=["Free"],
        images=["https://cdn.sazo.com/lipstick.jpg"],
    )


@pytest.fixture
def shop_settings():
    return Settings(
        cod_enabled=True,
        online_payment_enabled=True,
        online_payment_methods=["Bkash", "Nagad"],
        shipping_options=[
            ShippingOption(id="inside", label="Inside Dhaka", charge=120),
            ShippingOption(id="outside", label="Outside Dhaka", charge=150),
        ],
    )


def order_payload(items=None, payment_method="COD", total=1120, shipping_charge=120, **customer):
    details = {
        "name": "Rina Akter",
        "email": "rina@mail.com",
        "phone": "01700000000",
        "address": "House 12, Road 5",
        "city": "Dhaka",
    }
    details.update(customer)
    if items is None:
        items = [{
            "productId": "65f0c0ffee0000000000a001",
            "displayProductId": "100001",
            "name": "Silk Saree",
            "unitPrice": 1000,
            "quantity": 1,
            "imageUrl": "https://cdn.sazo.com/saree-front.jpg",
            "size": "M",
        }]
    payment_info = {"paymentMethod": payment_method}
    if payment_method == "Online":
        payment_info["paymentDetails"] = {
            "paymentNumber": "01800000000",
            "method": "Bkash",
            "amount": total,
            "transactionId": "TX99",
        }
    return {
        "customerDetails": details,
        "cartItems": items,
        "total": total,
        "paymentInfo": payment_info,
        "shippingCharge": shipping_charge,
    }
