import logging
import random
import re
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from database import create_document, now, to_object_id, to_public
from errors import ProductNotFound
from schemas import Product, ProductIn

logger = logging.getLogger(__name__)

COLLECTION = "product"
DISPLAY_ID_PATTERN = re.compile(r"^\d{6}$")


def random_product_id() -> str:
    return str(random.randint(100000, 999999))


class CatalogService:
    def __init__(self, db: Database):
        self.db = db
        self.collection = db[COLLECTION]

    def _find(self, key: str) -> Optional[Dict[str, Any]]:
        # Products are addressable by the 6-digit display id or the system id
        if DISPLAY_ID_PATTERN.match(key):
            doc = self.collection.find_one({"product_id": key})
            if doc:
                return doc
        object_id = to_object_id(key)
        if object_id is None:
            return None
        return self.collection.find_one({"_id": object_id})

    def list_products(self, category: Optional[str] = None) -> List[Product]:
        query: Dict[str, Any] = {}
        if category:
            query["category"] = category
        cursor = self.collection.find(query).sort([("display_order", ASCENDING), ("created_at", DESCENDING)])
        return [Product.model_validate(to_public(doc)) for doc in cursor]

    def get(self, key: str) -> Product:
        doc = self._find(key)
        if not doc:
            raise ProductNotFound(key)
        return Product.model_validate(to_public(doc))

    def count(self) -> int:
        return self.collection.count_documents({})

    def create(self, payload: ProductIn) -> Product:
        data = payload.model_dump()
        if not data.get("product_id"):
            candidate = random_product_id()
            while self.collection.find_one({"product_id": candidate}) is not None:
                candidate = random_product_id()
            data["product_id"] = candidate
        new_id = create_document(self.db, COLLECTION, data)
        logger.info(f"Product {data['product_id']} created: {payload.name}")
        return self.get(new_id)

    def update(self, key: str, payload: ProductIn) -> Product:
        doc = self._find(key)
        if not doc:
            raise ProductNotFound(key)
        data = payload.model_dump()
        if not data.get("product_id"):
            data["product_id"] = doc.get("product_id")
        data["updated_at"] = now()
        self.collection.update_one({"_id": doc["_id"]}, {"$set": data})
        logger.info(f"Product {data['product_id']} updated")
        return self.get(str(doc["_id"]))

    def delete(self, key: str) -> None:
        doc = self._find(key)
        if not doc:
            raise ProductNotFound(key)
        self.collection.delete_one({"_id": doc["_id"]})
        logger.info(f"Product {doc.get('product_id')} deleted")
