"""Chat messages: independent records with a full CRUD lifecycle."""
import logging
from datetime import datetime, timezone

from pymongo import DESCENDING, ReturnDocument

from .ids import to_object_id
from .validation import validate_changes, validate_document

logger = logging.getLogger(__name__)

SAMPLE_CHATS = [
    ("User1", "User2", "Hello chai!!"),
    ("User3", "User4", "Oyy sun chal free hai toh kahi jaakar aate hai"),
    ("User2", "User6", "Ayien!! Baigan."),
    ("User4", "User7", "Berlin died in money hiest S1"),
    ("User8", "User1", "All eyes on the news tonight"),
    ("User4", "User3", "Heyy !! Give me some notes too.. "),
    ("User2", "User1", "Nahh , I'd never fell for something like that"),
]


def _chat_doc(sender: str, recipient: str, message: str, date: datetime | None = None) -> dict:
    return {
        "from": sender,
        "to": recipient,
        "message": message,
        "date": date or datetime.now(timezone.utc),
    }


def create_chat(db, sender: str, recipient: str, message: str, date: datetime | None = None):
    doc = validate_document("chats", _chat_doc(sender, recipient, message, date))
    return db["chats"].insert_one(doc).inserted_id


def list_chats(db) -> list[dict]:
    return list(db["chats"].find().sort([("date", DESCENDING), ("_id", DESCENDING)]))


def get_chat(db, chat_id):
    return db["chats"].find_one({"_id": to_object_id(chat_id)})


def update_message(db, chat_id, message: str):
    """Replace the message text and return the updated chat, or None."""
    validate_changes("chats", {"message": message})
    return db["chats"].find_one_and_update(
        {"_id": to_object_id(chat_id)},
        {"$set": {"message": message}},
        return_document=ReturnDocument.AFTER,
    )


def delete_chat(db, chat_id):
    """Delete a chat and return the deleted document, or None."""
    return db["chats"].find_one_and_delete({"_id": to_object_id(chat_id)})


def seed_chats(db) -> list:
    docs = [validate_document("chats", _chat_doc(*row)) for row in SAMPLE_CHATS]
    ids = db["chats"].insert_many(docs).inserted_ids
    logger.info("Seeded %d chat(s)", len(ids))
    return list(ids)
