"""Seed the demo collections.

Usage:
    python -m relations_db.seed            # everything
    python -m relations_db.seed --only orders customers --drop
"""
import argparse
import logging

from pymongo.errors import PyMongoError

from . import chats, people, relationships
from .connect_db import get_database
from .errors import RelationsError

SAMPLE_ORDERS = [
    {"item": "Samosa", "price": 15},
    {"item": "Coke", "price": 40},
    {"item": "Dosa", "price": 30},
]

SAMPLE_USER = {
    "username": "Sherlock holmes",
    "email": "sherlock@bakerstreet.example",
    "addresses": [{"location": "221B Baker Street", "city": "London"}],
}

SAMPLE_POSTS = [
    {"content": "The game is afoot", "likes": 533},
    {"content": "Elementary", "likes": 953443},
]


def seed_orders(db):
    return relationships.insert_orders(db, SAMPLE_ORDERS)


def seed_customers(db):
    # look the orders up by item, the way a client would
    item1 = relationships.find_order_by_item(db, "Samosa")
    item2 = relationships.find_order_by_item(db, "Dosa")
    refs = [o["_id"] for o in (item1, item2) if o is not None]
    return relationships.create_customer(db, "Anuj Gupta", refs)


def seed_users(db):
    user_id = relationships.create_user(db, **SAMPLE_USER)
    relationships.add_address(db, user_id, {"location": "Singham nagar", "city": "New York"})
    relationships.create_posts(db, user_id, SAMPLE_POSTS)
    return user_id


def seed_people(db):
    return people.insert_people(db, people.SAMPLE_PEOPLE)


STEPS = {
    "orders": seed_orders,
    "customers": seed_customers,
    "chats": chats.seed_chats,
    "users": seed_users,
    "people": seed_people,
}

# collections touched by each step, for --drop
_STEP_COLLECTIONS = {
    "orders": ["orders"],
    "customers": ["customers"],
    "chats": ["chats"],
    "users": ["users", "posts"],
    "people": ["people"],
}


def run(db, only: list[str] | None = None, drop: bool = False) -> dict:
    """Run the selected seed steps in order, continuing past failures.

    Returns a mapping of step name to ``True`` or the error message.
    """
    names = [name for name in STEPS if not only or name in only]
    results = {}
    for name in names:
        if drop:
            for collection in _STEP_COLLECTIONS[name]:
                db[collection].drop()
        try:
            STEPS[name](db)
            print(f"✅ Seeded {name}")
            results[name] = True
        except (RelationsError, PyMongoError) as e:
            print(f"❌ Failed to seed {name}: {e}")
            results[name] = str(e)
    return results


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Seed the relationship demo collections")
    parser.add_argument("--only", nargs="+", choices=sorted(STEPS), help="Seed only these steps")
    parser.add_argument("--drop", action="store_true", help="Drop the target collections first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    db = get_database()
    results = run(db, only=args.only, drop=args.drop)
    return 0 if all(v is True for v in results.values()) else 1


if __name__ == "__main__":
    raise SystemExit(main())
