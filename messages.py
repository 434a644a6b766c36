import logging
from typing import List

from pymongo import DESCENDING
from pymongo.database import Database

from database import create_document, get_documents, now, to_object_id, to_public, today
from errors import MessageNotFound
from schemas import ContactMessage, ContactMessageIn

logger = logging.getLogger(__name__)

COLLECTION = "contactmessage"


class MessageService:
    def __init__(self, db: Database):
        self.db = db
        self.collection = db[COLLECTION]

    def create(self, payload: ContactMessageIn) -> str:
        message_id = create_document(self.db, COLLECTION, {
            **payload.model_dump(),
            "date": today(),
            "is_read": False,
        })
        logger.info(f"Contact message {message_id} received from {payload.email}")
        return message_id

    def list_messages(self) -> List[ContactMessage]:
        docs = get_documents(self.db, COLLECTION, sort=[("created_at", DESCENDING), ("_id", DESCENDING)])
        return [ContactMessage.model_validate(to_public(doc)) for doc in docs]

    def mark_read(self, message_id: str, is_read: bool) -> ContactMessage:
        object_id = to_object_id(message_id)
        if object_id is None:
            raise MessageNotFound(message_id)
        result = self.collection.update_one({"_id": object_id}, {"$set": {"is_read": is_read, "updated_at": now()}})
        if result.matched_count == 0:
            raise MessageNotFound(message_id)
        return ContactMessage.model_validate(to_public(self.collection.find_one({"_id": object_id})))

    def delete(self, message_id: str) -> None:
        object_id = to_object_id(message_id)
        if object_id is None:
            raise MessageNotFound(message_id)
        result = self.collection.delete_one({"_id": object_id})
        if result.deleted_count == 0:
            raise MessageNotFound(message_id)
        logger.info(f"Contact message {message_id} deleted")
