"""
Database Schemas for the Storefront API

Each Pydantic model corresponds to a MongoDB collection (lowercased class name).
Documents are stored with the snake_case field names; the HTTP API speaks
camelCase through the alias generator on StoreModel.
"""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal

OrderStatus = Literal["Pending", "Confirmed", "Shipped", "Delivered", "Cancelled"]
PaymentMethod = Literal["COD", "Online"]

FREE_SIZE = "Free"
PAYMENT_METHOD_PLACEHOLDER = "Choose"


class StoreModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------
# Catalog
# -----------------------------
class Product(StoreModel):
    id: Optional[str] = None
    product_id: Optional[str] = Field(None, description="6-digit display id")
    name: str
    category: str
    price: int = Field(..., ge=0)
    regular_price: Optional[int] = Field(None, ge=0)
    description: str = ""
    fabric: str = ""
    colors: List[str] = []
    sizes: List[str] = []
    is_new_arrival: bool = False
    is_trending: bool = False
    on_sale: bool = False
    images: List[str] = []
    display_order: int = 1000


class ProductIn(StoreModel):
    product_id: Optional[str] = None
    name: str
    category: str
    price: int = Field(..., ge=0)
    regular_price: Optional[int] = Field(None, ge=0)
    description: str = ""
    fabric: str = ""
    colors: List[str] = []
    sizes: List[str] = []
    is_new_arrival: bool = False
    is_trending: bool = False
    on_sale: bool = False
    images: List[str] = []
    display_order: int = 1000


# -----------------------------
# Cart / Orders
# -----------------------------
class CartLine(StoreModel):
    product_id: str
    display_product_id: Optional[str] = None
    name: str = ""
    unit_price: int
    quantity: int = Field(..., ge=1)
    image_url: str = ""
    size: str


class CustomerDetails(StoreModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = ""


class PaymentDetails(StoreModel):
    payment_number: str
    method: str
    amount: int
    transaction_id: str


class PaymentInfo(StoreModel):
    payment_method: PaymentMethod
    payment_details: Optional[PaymentDetails] = None


class OrderIn(StoreModel):
    customer_details: CustomerDetails
    cart_items: List[CartLine] = []
    total: int = Field(..., ge=0)
    payment_info: PaymentInfo
    shipping_charge: int = Field(0, ge=0)


class Order(StoreModel):
    id: Optional[str] = None
    order_id: str
    name: str
    email: EmailStr
    phone: str
    address: str
    city: str = ""
    cart_items: List[CartLine]
    total: int
    shipping_charge: int = 0
    status: OrderStatus = "Pending"
    date: str
    created_at: Optional[datetime] = None
    payment_method: PaymentMethod
    payment_details: Optional[PaymentDetails] = None


class StatusUpdate(StoreModel):
    status: OrderStatus


class DashboardStats(StoreModel):
    total_orders: int
    online_transactions: int
    total_revenue: int
    total_products: int


# -----------------------------
# Settings
# -----------------------------
class ShippingOption(StoreModel):
    id: str
    label: str
    charge: int = Field(..., ge=0)


class SocialMediaLink(StoreModel):
    platform: str
    url: str


class Settings(StoreModel):
    cod_enabled: bool = True
    online_payment_enabled: bool = True
    online_payment_methods: List[str] = []
    online_payment_info: str = ""
    shipping_options: List[ShippingOption] = []
    categories: List[str] = []
    contact_address: str = ""
    contact_phone: str = ""
    contact_email: str = ""
    whatsapp_number: str = ""
    show_whats_app_button: bool = False
    show_city_field: bool = True
    social_media_links: List[SocialMediaLink] = []
    privacy_policy: str = ""
    footer_description: str = ""
    homepage_new_arrivals_count: int = 4
    homepage_trending_count: int = 4
    product_page_promo_image: str = ""
    admin_email: str = ""


class SettingsUpdate(StoreModel):
    cod_enabled: Optional[bool] = None
    online_payment_enabled: Optional[bool] = None
    online_payment_methods: Optional[List[str]] = None
    online_payment_info: Optional[str] = None
    shipping_options: Optional[List[ShippingOption]] = None
    categories: Optional[List[str]] = None
    contact_address: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    whatsapp_number: Optional[str] = None
    show_whats_app_button: Optional[bool] = None
    show_city_field: Optional[bool] = None
    social_media_links: Optional[List[SocialMediaLink]] = None
    privacy_policy: Optional[str] = None
    footer_description: Optional[str] = None
    homepage_new_arrivals_count: Optional[int] = None
    homepage_trending_count: Optional[int] = None
    product_page_promo_image: Optional[str] = None
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None


# -----------------------------
# Auth / Messages
# -----------------------------
class LoginPayload(StoreModel):
    email: str
    password: str


class ContactMessageIn(StoreModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    message: str = Field(..., min_length=1)


class ContactMessage(StoreModel):
    id: Optional[str] = None
    name: str
    email: EmailStr
    message: str
    date: str
    is_read: bool = False
    created_at: Optional[datetime] = None


class ReadUpdate(StoreModel):
    is_read: bool
