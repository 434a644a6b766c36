"""
Checkout: payable total, form validation and order submission.

Online payments collect the shipping charge as an advance outside the order
total, so it is left out of the payable amount; the charge itself is still
sent with the order for reporting.
"""
import logging
from typing import Any, Dict, Optional, Set

from pydantic import BaseModel

from cart import Cart
from client import ApiError, CatalogStore, StorefrontClient
from schemas import PAYMENT_METHOD_PLACEHOLDER, Order, Settings, ShippingOption

logger = logging.getLogger(__name__)

REQUIRED_CUSTOMER_FIELDS = ("name", "email", "phone", "address", "city")
ORDER_FAILED = "Failed to place order."


class CheckoutValidationError(Exception):
    def __init__(self, message: str, fields: Optional[Set[str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or set()


class CheckoutError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CheckoutForm(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    payment_method: Optional[str] = None
    shipping_option_id: Optional[str] = None
    payment_number: str = ""
    online_payment_method: str = PAYMENT_METHOD_PLACEHOLDER
    transaction_id: str = ""


class CheckoutSummary(BaseModel):
    subtotal: int
    shipping_charge: int
    effective_shipping: int
    total_payable: int


def select_shipping_option(settings: Settings, option_id: Optional[str]) -> Optional[ShippingOption]:
    if not settings.shipping_options:
        return None
    for option in settings.shipping_options:
        if option.id == option_id:
            return option
    return settings.shipping_options[0]


def compute_total_payable(subtotal: int, shipping_charge: int, payment_method: Optional[str]) -> int:
    effective_shipping = 0 if payment_method == "Online" else shipping_charge
    return subtotal + effective_shipping


def apply_defaults(form: CheckoutForm, settings: Settings) -> CheckoutForm:
    """Fill in the payment method and shipping option the way the checkout page preselects them."""
    updates: Dict[str, Any] = {}
    method_ok = ((form.payment_method == "COD" and settings.cod_enabled)
                 or (form.payment_method == "Online" and settings.online_payment_enabled))
    if not method_ok:
        if settings.cod_enabled:
            updates["payment_method"] = "COD"
        elif settings.online_payment_enabled:
            updates["payment_method"] = "Online"
        else:
            updates["payment_method"] = None
    if not form.shipping_option_id and settings.shipping_options:
        updates["shipping_option_id"] = settings.shipping_options[0].id
    return form.model_copy(update=updates) if updates else form


def summarize(cart: Cart, form: CheckoutForm, settings: Settings) -> CheckoutSummary:
    option = select_shipping_option(settings, form.shipping_option_id)
    shipping_charge = option.charge if option else 0
    total_payable = compute_total_payable(cart.total, shipping_charge, form.payment_method)
    return CheckoutSummary(
        subtotal=cart.total,
        shipping_charge=shipping_charge,
        effective_shipping=total_payable - cart.total,
        total_payable=total_payable,
    )


def validate_checkout(cart: Cart, form: CheckoutForm, settings: Settings) -> None:
    if cart.is_empty():
        raise CheckoutValidationError("Your cart is empty.", {"cart"})

    if not (settings.cod_enabled or settings.online_payment_enabled):
        raise CheckoutValidationError("No payment method is available right now.", {"payment_method"})
    if not settings.shipping_options:
        raise CheckoutValidationError("No shipping method is available right now.", {"shipping_option_id"})

    missing = {name for name in REQUIRED_CUSTOMER_FIELDS if not getattr(form, name).strip()}
    if not form.shipping_option_id:
        missing.add("shipping_option_id")
    if form.payment_method not in ("COD", "Online"):
        missing.add("payment_method")
    if form.payment_method == "Online" and settings.online_payment_enabled:
        if not form.payment_number.strip():
            missing.add("payment_number")
        if form.online_payment_method in ("", PAYMENT_METHOD_PLACEHOLDER):
            missing.add("online_payment_method")
        if not form.transaction_id.strip():
            missing.add("transaction_id")
    if missing:
        raise CheckoutValidationError("Please fill in all required fields.", missing)


def build_order_payload(cart: Cart, form: CheckoutForm, settings: Settings,
                        catalog: Optional[CatalogStore] = None) -> Dict[str, Any]:
    summary = summarize(cart, form, settings)

    payment_details = None
    if form.payment_method == "Online":
        payment_details = {
            "paymentNumber": form.payment_number.strip(),
            "method": form.online_payment_method,
            "amount": summary.total_payable,
            "transactionId": form.transaction_id.strip(),
        }

    cart_items = []
    for line in cart:
        item = line.model_dump(mode="json", by_alias=True)
        if not line.display_product_id:
            product = catalog.find(line.product_id) if catalog else None
            item["displayProductId"] = (product.product_id if product else None) or line.product_id
        cart_items.append(item)

    return {
        "customerDetails": {
            "name": form.name.strip(),
            "email": form.email.strip(),
            "phone": form.phone.strip(),
            "address": form.address.strip(),
            "city": form.city.strip(),
        },
        "cartItems": cart_items,
        "total": summary.total_payable,
        "paymentInfo": {"paymentMethod": form.payment_method, "paymentDetails": payment_details},
        "shippingCharge": summary.shipping_charge,
    }


def place_order(cart: Cart, form: CheckoutForm, settings: Settings, client: StorefrontClient,
                catalog: Optional[CatalogStore] = None) -> Order:
    """Validate, submit and, on success only, empty the cart."""
    form = apply_defaults(form, settings)
    validate_checkout(cart, form, settings)
    payload = build_order_payload(cart, form, settings, catalog)
    try:
        order = client.create_order(payload)
    except ApiError as e:
        logger.error(f"Order submission failed: {e.message}")
        raise CheckoutError(e.message or ORDER_FAILED) from e
    cart.clear()
    logger.info(f"Order {order.order_id} placed for {order.total}")
    return order
