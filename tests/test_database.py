from pymongo import ASCENDING, DESCENDING

from database import create_document, get_documents
from messages import MessageService
from schemas import ContactMessageIn


class TestGetDocuments:
    def test_filter_sort_and_limit(self, db):
        for name, category in [("Saree", "Silk"), ("Kurti", "Cotton"), ("Scarf", "Silk"), ("Shawl", "Silk")]:
            create_document(db, "product", {"name": name, "category": category})

        docs = get_documents(db, "product", {"category": "Silk"}, limit=2, sort=[("name", ASCENDING)])

        assert [d["name"] for d in docs] == ["Saree", "Scarf"]

    def test_everything_when_unfiltered(self, db):
        create_document(db, "product", {"name": "Saree"})
        create_document(db, "product", {"name": "Kurti"})

        assert len(get_documents(db, "product")) == 2


def test_messages_listed_newest_first(db):
    messages = MessageService(db)
    first = messages.create(ContactMessageIn(name="Nila", email="nila@mail.com", message="Is this in stock?"))
    second = messages.create(ContactMessageIn(name="Tania", email="tania@mail.com", message="Do you ship abroad?"))

    assert [m.id for m in messages.list_messages()] == [second, first]
    assert get_documents(db, "contactmessage", sort=[("_id", DESCENDING)], limit=1)[0]["name"] == "Tania"
