import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

import database
from auth import login, require_admin
from catalog import CatalogService
from database import ensure_indexes, get_db
from errors import EmptyCartError, NotFoundError
from messages import MessageService
from orders import OrderService
from schemas import (
    ContactMessage,
    ContactMessageIn,
    DashboardStats,
    LoginPayload,
    Order,
    OrderIn,
    Product,
    ProductIn,
    ReadUpdate,
    Settings,
    SettingsUpdate,
    StatusUpdate,
)
from site_settings import SettingsService

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        ensure_indexes(database.db)
    else:
        logger.warning("DATABASE_URL is not set; requests will fail with 503")
    yield


app = FastAPI(title="Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------
# Services
# -----------------

def get_order_service(db: Database = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_catalog_service(db: Database = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_settings_service(db: Database = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


def get_message_service(db: Database = Depends(get_db)) -> MessageService:
    return MessageService(db)


@app.get("/")
def root():
    return {"name": "Storefront API", "status": "ok"}

# -----------------
# Auth
# -----------------

@app.post("/auth/login")
def admin_login(payload: LoginPayload, settings: SettingsService = Depends(get_settings_service)):
    return {"token": login(settings, payload.email, payload.password)}

# -----------------
# Catalog
# -----------------

@app.get("/products", response_model=List[Product])
def list_products(category: Optional[str] = None, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.list_products(category)


@app.get("/products/{product_id}", response_model=Product)
def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    try:
        return catalog.get(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/admin/products", response_model=Product, status_code=201, dependencies=[Depends(require_admin)])
def admin_create_product(payload: ProductIn, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.create(payload)


@app.put("/admin/products/{product_id}", response_model=Product, dependencies=[Depends(require_admin)])
def admin_update_product(product_id: str, payload: ProductIn, catalog: CatalogService = Depends(get_catalog_service)):
    try:
        return catalog.update(product_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/admin/products/{product_id}", dependencies=[Depends(require_admin)])
def admin_delete_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    try:
        catalog.delete(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": True}

# -----------------
# Settings
# -----------------

@app.get("/settings", response_model=Settings)
def get_settings(settings: SettingsService = Depends(get_settings_service)):
    return settings.get()


@app.put("/settings", response_model=Settings, dependencies=[Depends(require_admin)])
def update_settings(payload: SettingsUpdate, settings: SettingsService = Depends(get_settings_service)):
    return settings.update(payload)

# -----------------
# Orders
# -----------------

@app.post("/orders", response_model=Order, status_code=201)
def create_order(payload: OrderIn, orders: OrderService = Depends(get_order_service)):
    try:
        return orders.create(
            payload.customer_details,
            payload.cart_items,
            payload.total,
            payload.payment_info,
            payload.shipping_charge,
        )
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/orders", response_model=List[Order], dependencies=[Depends(require_admin)])
def list_orders(orders: OrderService = Depends(get_order_service)):
    return orders.list_orders()


@app.get("/orders/stats", response_model=DashboardStats, dependencies=[Depends(require_admin)])
def order_stats(orders: OrderService = Depends(get_order_service),
                catalog: CatalogService = Depends(get_catalog_service)):
    return orders.stats(total_products=catalog.count())


@app.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: str, orders: OrderService = Depends(get_order_service)):
    try:
        return orders.lookup(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.put("/orders/{order_id}/status", response_model=Order, dependencies=[Depends(require_admin)])
def update_order_status(order_id: str, payload: StatusUpdate, orders: OrderService = Depends(get_order_service)):
    try:
        return orders.update_status(order_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/orders/{order_id}", dependencies=[Depends(require_admin)])
def delete_order(order_id: str, orders: OrderService = Depends(get_order_service)):
    try:
        orders.delete(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Order removed"}

# -----------------
# Contact messages
# -----------------

@app.post("/messages", status_code=201)
def send_message(payload: ContactMessageIn, messages: MessageService = Depends(get_message_service)):
    message_id = messages.create(payload)
    return {"id": message_id, "message": "Message sent successfully"}


@app.get("/messages", response_model=List[ContactMessage], dependencies=[Depends(require_admin)])
def list_messages(messages: MessageService = Depends(get_message_service)):
    return messages.list_messages()


@app.put("/messages/{message_id}/read", response_model=ContactMessage, dependencies=[Depends(require_admin)])
def mark_message_read(message_id: str, payload: ReadUpdate, messages: MessageService = Depends(get_message_service)):
    try:
        return messages.mark_read(message_id, payload.is_read)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/messages/{message_id}", dependencies=[Depends(require_admin)])
def delete_message(message_id: str, messages: MessageService = Depends(get_message_service)):
    try:
        messages.delete(message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Message removed"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
