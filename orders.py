"""
Order lifecycle: creation from a cart snapshot, lookup, status changes,
deletion and the dashboard aggregation.

Short order ids are drawn from an injectable generator and checked against
existing orders until an unused one comes up. The unique index on order_id
catches the window between that check and the insert.
"""
import logging
import random
import re
from typing import Any, Callable, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_documents, to_object_id, to_public, today
from errors import EmptyCartError, OrderNotFound
from schemas import CartLine, CustomerDetails, DashboardStats, Order, OrderStatus, PaymentInfo

logger = logging.getLogger(__name__)

COLLECTION = "order"
SHORT_ID_PATTERN = re.compile(r"^\d{5,7}$")

ORDER_ID_MIN = 10000
ORDER_ID_MAX = 9999999


def random_order_id() -> str:
    return str(random.randint(ORDER_ID_MIN, ORDER_ID_MAX))


def is_short_order_id(value: str) -> bool:
    return bool(SHORT_ID_PATTERN.match(value))


class OrderService:
    def __init__(self, db: Database, id_generator: Callable[[], str] = random_order_id):
        self.db = db
        self.collection = db[COLLECTION]
        self.id_generator = id_generator

    # -----------------
    # Short ids
    # -----------------
    def order_id_exists(self, order_id: str) -> bool:
        return self.collection.find_one({"order_id": order_id}) is not None

    def next_order_id(self) -> str:
        while True:
            candidate = self.id_generator()
            if not self.order_id_exists(candidate):
                return candidate
            logger.info(f"Order id {candidate} already taken, drawing another")

    # -----------------
    # Lifecycle
    # -----------------
    def create(self, customer: CustomerDetails, cart_items: List[CartLine], total: int,
               payment_info: PaymentInfo, shipping_charge: int = 0) -> Order:
        if not cart_items:
            raise EmptyCartError()

        document: Dict[str, Any] = {
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "address": customer.address,
            "city": customer.city or "",
            "cart_items": [line.model_dump() for line in cart_items],
            "total": total,
            "shipping_charge": shipping_charge,
            "status": "Pending",
            "date": today(),
            "payment_method": payment_info.payment_method,
            "payment_details": payment_info.payment_details.model_dump() if payment_info.payment_details else None,
        }

        while True:
            document["order_id"] = self.next_order_id()
            try:
                new_id = create_document(self.db, COLLECTION, document)
                break
            except DuplicateKeyError:
                logger.warning(f"Order id {document['order_id']} was taken concurrently, retrying")

        logger.info(f"Order {document['order_id']} created ({payment_info.payment_method}, total {total})")
        return self.get(new_id)

    def _find(self, key: str) -> Optional[Dict[str, Any]]:
        if is_short_order_id(key):
            return self.collection.find_one({"order_id": key})
        object_id = to_object_id(key)
        if object_id is None:
            return None
        return self.collection.find_one({"_id": object_id})

    def lookup(self, key: str) -> Order:
        doc = self._find(key)
        if not doc:
            raise OrderNotFound(key)
        return Order.model_validate(to_public(doc))

    get = lookup

    def list_orders(self) -> List[Order]:
        docs = get_documents(self.db, COLLECTION, sort=[("created_at", DESCENDING), ("_id", DESCENDING)])
        return [Order.model_validate(to_public(doc)) for doc in docs]

    def update_status(self, key: str, status: OrderStatus) -> Order:
        doc = self._find(key)
        if not doc:
            raise OrderNotFound(key)
        self.collection.update_one({"_id": doc["_id"]}, {"$set": {"status": status}})
        logger.info(f"Order {doc['order_id']} status {doc.get('status')} -> {status}")
        return self.get(str(doc["_id"]))

    def delete(self, key: str) -> None:
        doc = self._find(key)
        if not doc:
            raise OrderNotFound(key)
        self.collection.delete_one({"_id": doc["_id"]})
        logger.info(f"Order {doc['order_id']} deleted")

    # -----------------
    # Dashboard
    # -----------------
    def product_revenue(self) -> int:
        """Sum of price x quantity over every line of every order that is not Cancelled."""
        pipeline = [
            {"$match": {"status": {"$ne": "Cancelled"}}},
            {"$unwind": "$cart_items"},
            {"$group": {
                "_id": None,
                "total_revenue": {"$sum": {"$multiply": ["$cart_items.unit_price", "$cart_items.quantity"]}},
            }},
        ]
        result = list(self.collection.aggregate(pipeline))
        return int(result[0]["total_revenue"]) if result else 0

    def stats(self, total_products: int) -> DashboardStats:
        return DashboardStats(
            total_orders=self.collection.count_documents({}),
            online_transactions=self.collection.count_documents({"payment_method": "Online"}),
            total_revenue=self.product_revenue(),
            total_products=total_products,
        )
