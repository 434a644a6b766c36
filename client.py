"""
Client side of the storefront: an httpx wrapper around the HTTP API plus the
cached settings and catalog stores the cart and checkout read from.
"""
import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from cart import JsonFileStorage
from schemas import Order, Product, Settings

logger = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("STOREFRONT_API_URL", "http://localhost:8000")


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorefrontClient:
    def __init__(self, http: Optional[httpx.Client] = None, base_url: str = DEFAULT_API_URL,
                 token: Optional[str] = None):
        self.http = http or httpx.Client(base_url=base_url)
        self.token = token

    def _request(self, method: str, path: str, fallback: str, admin: bool = False, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if admin and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(fallback) from e
        if response.is_error:
            message = fallback
            try:
                detail = response.json().get("detail")
                if isinstance(detail, str) and detail:
                    message = detail
            except (ValueError, AttributeError):
                pass
            logger.error(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(message, response.status_code)
        return response.json()

    # -----------------
    # Public
    # -----------------
    def get_settings(self) -> Settings:
        return Settings.model_validate(self._request("GET", "/settings", "Could not load settings."))

    def list_products(self, category: Optional[str] = None) -> List[Product]:
        params = {"category": category} if category else None
        data = self._request("GET", "/products", "Could not load products.", params=params)
        return [Product.model_validate(p) for p in data]

    def get_product(self, product_id: str) -> Product:
        return Product.model_validate(self._request("GET", f"/products/{product_id}", "Product not found."))

    def create_order(self, payload: Dict[str, Any]) -> Order:
        data = self._request("POST", "/orders", "Failed to place order. Please check your details.", json=payload)
        return Order.model_validate(data)

    def get_order(self, order_id: str) -> Order:
        return Order.model_validate(self._request("GET", f"/orders/{order_id}", "Order not found."))

    def send_message(self, name: str, email: str, message: str) -> None:
        self._request("POST", "/messages", "Could not send message.",
                      json={"name": name, "email": email, "message": message})

    # -----------------
    # Admin
    # -----------------
    def login(self, email: str, password: str) -> str:
        data = self._request("POST", "/auth/login", "Incorrect email or password.",
                             json={"email": email, "password": password})
        self.token = data["token"]
        return self.token

    def list_orders(self) -> List[Order]:
        data = self._request("GET", "/orders", "Could not load orders.", admin=True)
        return [Order.model_validate(o) for o in data]

    def update_order_status(self, order_id: str, status: str) -> Order:
        data = self._request("PUT", f"/orders/{order_id}/status", "Error updating order status",
                             admin=True, json={"status": status})
        return Order.model_validate(data)

    def delete_order(self, order_id: str) -> None:
        self._request("DELETE", f"/orders/{order_id}", "Could not delete order.", admin=True)

    def dashboard_stats(self) -> Dict[str, int]:
        return self._request("GET", "/orders/stats", "Could not load dashboard stats.", admin=True)


class SettingsStore:
    """Settings fetched once from the API and cached, with the persisted copy as fallback."""

    def __init__(self, client: StorefrontClient, storage: Optional[JsonFileStorage] = None):
        self.client = client
        self.storage = storage
        self._settings: Optional[Settings] = None

    def get(self) -> Settings:
        if self._settings is None:
            self.refresh()
        return self._settings

    def refresh(self) -> Settings:
        try:
            self._settings = self.client.get_settings()
        except ApiError:
            self._settings = self._cached() or Settings()
            return self._settings
        if self.storage is not None:
            self.storage.write_section("settings", self._settings.model_dump(mode="json", by_alias=True))
        return self._settings

    def _cached(self) -> Optional[Settings]:
        if self.storage is None:
            return None
        raw = self.storage.read_section("settings")
        if not isinstance(raw, dict):
            return None
        try:
            return Settings.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring invalid cached settings")
            return None


class CatalogStore:
    """Products keyed by id: seeded from a partial list, backfilled by a full fetch."""

    def __init__(self, client: StorefrontClient, storage: Optional[JsonFileStorage] = None):
        self.client = client
        self.storage = storage
        self.products: Dict[str, Product] = {}
        self.fully_loaded = False
        if storage is not None:
            self.merge(self._cached())

    def merge(self, products: List[Product]) -> None:
        for product in products:
            self.products[product.id or product.product_id] = product

    def ensure_all_loaded(self) -> None:
        if self.fully_loaded:
            return
        try:
            products = self.client.list_products()
        except ApiError:
            logger.error("Failed to load all products")
            return
        self.merge(products)
        self.fully_loaded = True
        if self.storage is not None:
            self.storage.write_section(
                "products", [p.model_dump(mode="json", by_alias=True) for p in self.products.values()])

    def find(self, product_id: str) -> Optional[Product]:
        product = self.products.get(product_id)
        if product is not None:
            return product
        for candidate in self.products.values():
            if candidate.product_id == product_id:
                return candidate
        return None

    def _cached(self) -> List[Product]:
        raw = self.storage.read_section("products", [])
        products = []
        for item in raw if isinstance(raw, list) else []:
            try:
                products.append(Product.model_validate(item))
            except ValidationError:
                logger.warning("Discarding invalid cached product")
        return products
