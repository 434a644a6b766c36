"""
Singleton site settings: payment toggles, shipping options, content strings.

The document is seeded on first read. The admin password is stored only as a
hash and never leaves this module.
"""
import logging
import os
from typing import Any, Dict, Tuple

import bcrypt
from pymongo.database import Database

from database import create_document, now
from schemas import Settings, SettingsUpdate

logger = logging.getLogger(__name__)

COLLECTION = "settings"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "cod_enabled": True,
    "online_payment_enabled": True,
    "online_payment_methods": ["Bkash", "Nagad", "UPAY"],
    "online_payment_info": "Pay the delivery charge in advance to confirm your order, then fill in the details below.",
    "shipping_options": [],
    "categories": ["Cotton", "Silk", "Party Wear", "Cosmetics"],
    "show_city_field": True,
    "homepage_new_arrivals_count": 4,
    "homepage_trending_count": 4,
}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        logger.warning("Stored admin password hash is not a bcrypt hash")
        return False


class SettingsService:
    def __init__(self, db: Database):
        self.db = db
        self.collection = db[COLLECTION]

    def _load(self) -> Dict[str, Any]:
        doc = self.collection.find_one({})
        if doc is None:
            logger.info("No settings found, seeding defaults")
            seed = dict(DEFAULT_SETTINGS)
            seed["admin_email"] = os.getenv("ADMIN_EMAIL", "admin@example.com")
            seed["admin_password_hash"] = hash_password(os.getenv("ADMIN_PASSWORD", "change-me"))
            create_document(self.db, COLLECTION, seed)
            doc = self.collection.find_one({})
        return doc

    def get(self) -> Settings:
        return Settings.model_validate(self._load())

    def update(self, payload: SettingsUpdate) -> Settings:
        doc = self._load()
        data = payload.model_dump(exclude_none=True)
        password = data.pop("admin_password", None)
        if password:
            data["admin_password_hash"] = hash_password(password)
        data["updated_at"] = now()
        self.collection.update_one({"_id": doc["_id"]}, {"$set": data})
        logger.info(f"Settings updated: {sorted(k for k in data if k != 'updated_at')}")
        return self.get()

    def admin_credentials(self) -> Tuple[str, str]:
        doc = self._load()
        return doc.get("admin_email", ""), doc.get("admin_password_hash", "")
