"""Basic query patterns on a validated ``people`` collection.

Each helper wraps one pymongo call and documents what it hands back: some
calls return documents, some only counts, and the find-and-modify family
returns the document as it was *before* the change unless asked otherwise.
"""
from pymongo import ReturnDocument

from .ids import to_object_id
from .validation import validate_changes, validate_document

SAMPLE_PEOPLE = [
    {"name": "user1", "email": "user1@gmail.com", "age": 18},
    {"name": "user2", "email": "user2@gmail.com", "age": 18},
    {"name": "user3", "email": "user3@gmail.com", "age": 19},
    {"name": "user4", "email": "user4@gmail.com", "age": 20},
]


def insert_people(db, people: list[dict]) -> list:
    """Insert after validation. A record with unknown keys (a stray
    ``password``) or a missing field is rejected before anything is written."""
    docs = [validate_document("people", dict(p)) for p in people]
    if not docs:
        return []
    return list(db["people"].insert_many(docs).inserted_ids)


def find_one(db, name: str):
    """A single document or None."""
    return db["people"].find_one({"name": name})


def find_by_age(db, age: int) -> list[dict]:
    """Always a list, possibly empty."""
    return list(db["people"].find({"age": age}).sort("_id", 1))


def find_by_id(db, person_id):
    return db["people"].find_one({"_id": to_object_id(person_id)})


def update_one_age(db, name: str, age: int) -> int:
    """Update the first match; returns the modified count, not the document."""
    validate_changes("people", {"age": age})
    return db["people"].update_one({"name": name}, {"$set": {"age": age}}).modified_count


def update_many_age_above(db, threshold: int, age: int) -> int:
    """Set ``age`` on everyone older than ``threshold``; returns the count."""
    validate_changes("people", {"age": age})
    return db["people"].update_many({"age": {"$gt": threshold}}, {"$set": {"age": age}}).modified_count


def find_one_and_update(db, name: str, changes: dict, return_new: bool = False):
    """Old document by default, the updated one with ``return_new``."""
    validate_changes("people", changes)
    return db["people"].find_one_and_update(
        {"name": name},
        {"$set": changes},
        return_document=ReturnDocument.AFTER if return_new else ReturnDocument.BEFORE,
    )


def find_one_and_delete(db, name: str):
    """The deleted document, or None if nothing matched."""
    return db["people"].find_one_and_delete({"name": name})
