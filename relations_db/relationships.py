"""One-to-many modelling on top of pymongo.

* orders / customers: referencing. A customer stores an array of order ids.
* users / addresses: embedding. Addresses live inside the user document.
* users / posts: parent-referencing. Each post stores the id of its user.
"""
import logging

from pymongo import ASCENDING

from .errors import DanglingReferenceError
from .ids import to_object_id
from .populate import populate, populate_many
from .schema import address_schema
from .validation import validate_document, validate_fragment

logger = logging.getLogger(__name__)


# ======== Orders ========
def insert_orders(db, orders: list[dict]) -> list:
    docs = [validate_document("orders", {"item": o["item"], "price": o["price"]}) for o in orders]
    if not docs:
        return []
    result = db["orders"].insert_many(docs, ordered=True)
    logger.info("Inserted %d order(s)", len(result.inserted_ids))
    return list(result.inserted_ids)


def get_order(db, order_id):
    return db["orders"].find_one({"_id": to_object_id(order_id)})


def find_order_by_item(db, item: str):
    return db["orders"].find_one({"item": item})


def list_orders(db) -> list[dict]:
    return list(db["orders"].find().sort("_id", ASCENDING))


def delete_order(db, order_id) -> bool:
    """Delete an order. Customers referencing it keep the dangling id."""
    result = db["orders"].delete_one({"_id": to_object_id(order_id)})
    return result.deleted_count == 1


# ======== Customers ========
def _dedupe(ids: list) -> list:
    return list(dict.fromkeys(ids))


def create_customer(db, name: str, order_ids: list, check_refs: bool = False):
    """Insert a customer referencing ``order_ids``, first occurrence kept.

    With ``check_refs`` every id must name an existing order; that is a check
    at write time only, a later order deletion still leaves a dangling id.
    """
    refs = _dedupe([to_object_id(o) for o in order_ids])
    if check_refs and refs:
        found = {d["_id"] for d in db["orders"].find({"_id": {"$in": refs}}, {"_id": 1})}
        missing = [r for r in refs if r not in found]
        if missing:
            raise DanglingReferenceError("orders", missing)
    doc = validate_document("customers", {"name": name, "orders": refs})
    result = db["customers"].insert_one(doc)
    return result.inserted_id


def add_order_to_customer(db, customer_id, order_id) -> bool:
    """Append a reference unless already present. False if no such customer."""
    oid = to_object_id(order_id)
    result = db["customers"].update_one(
        {"_id": to_object_id(customer_id)},
        {"$addToSet": {"orders": oid}},
    )
    return result.matched_count == 1


def get_customer(db, customer_id, populate_orders: bool = True, keep_missing: bool = False):
    doc = db["customers"].find_one({"_id": to_object_id(customer_id)})
    if doc is None or not populate_orders:
        return doc
    return populate(db, doc, "orders", "orders", keep_missing=keep_missing)


def find_customer_by_name(db, name: str, populate_orders: bool = True):
    doc = db["customers"].find_one({"name": name})
    if doc is None or not populate_orders:
        return doc
    return populate(db, doc, "orders", "orders")


def list_customers(db, populate_orders: bool = True) -> list[dict]:
    docs = list(db["customers"].find().sort("_id", ASCENDING))
    if not populate_orders:
        return docs
    return populate_many(db, docs, "orders", "orders")


# ======== Users (embedded addresses) ========
def create_user(db, username: str, email: str | None = None, addresses: list[dict] | None = None):
    doc = {
        "username": username,
        "email": email,
        "addresses": [{"location": a["location"], "city": a["city"]} for a in addresses or []],
    }
    validate_document("users", doc)
    return db["users"].insert_one(doc).inserted_id


def get_user(db, user_id):
    return db["users"].find_one({"_id": to_object_id(user_id)})


def find_user_by_username(db, username: str):
    return db["users"].find_one({"username": username})


def add_address(db, user_id, address: dict) -> bool:
    entry = {"location": address["location"], "city": address["city"]}
    validate_fragment("users.addresses", address_schema, entry)
    result = db["users"].update_one({"_id": to_object_id(user_id)}, {"$push": {"addresses": entry}})
    return result.matched_count == 1


# ======== Posts (parent reference to user) ========
def create_posts(db, user_id, posts: list[dict]) -> list:
    uid = to_object_id(user_id)
    docs = [
        validate_document("posts", {"content": p["content"], "likes": p.get("likes", 0), "user": uid})
        for p in posts
    ]
    if not docs:
        return []
    return list(db["posts"].insert_many(docs, ordered=True).inserted_ids)


def get_post(db, post_id, populate_user: bool = True):
    doc = db["posts"].find_one({"_id": to_object_id(post_id)})
    if doc is None or not populate_user:
        return doc
    return populate(db, doc, "user", "users")


def list_posts_for_user(db, user_id) -> list[dict]:
    return list(db["posts"].find({"user": to_object_id(user_id)}).sort("_id", ASCENDING))
