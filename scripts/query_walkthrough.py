"""scripts/query_walkthrough.py

Run the basic query patterns against the ``people`` collection and print
what each one hands back. A failed step is reported and the tour goes on.

Usage:
    python ./scripts/query_walkthrough.py --drop
"""
from __future__ import annotations
import argparse
import logging

from pymongo.errors import PyMongoError

from relations_db import people
from relations_db.connect_db import get_database
from relations_db.errors import RelationsError


def run_query(label: str, func, *args, **kwargs):
    try:
        result = func(*args, **kwargs)
        print(f"✅ {label}: {result}")
        return result
    except (RelationsError, PyMongoError) as e:
        print(f"❌ {label}: {e}")
        return None


def walkthrough(db) -> None:
    run_query("insert people", people.insert_people, db, people.SAMPLE_PEOPLE)
    # unknown keys are rejected, nothing is written
    run_query(
        "insert with password",
        people.insert_people,
        db,
        [{"name": "user5", "email": "user5@gmail.com", "age": 21, "password": "hunter2"}],
    )

    first = run_query("find one (document)", people.find_one, db, "user1")
    run_query("find by age (list)", people.find_by_age, db, 18)
    if first is not None:
        run_query("find by id (document)", people.find_by_id, db, first["_id"])
    run_query("update one (count only)", people.update_one_age, db, "user1", 20)
    run_query("update many (count only)", people.update_many_age_above, db, 18, 18)
    run_query("find one and update (old doc)", people.find_one_and_update, db, "user1", {"age": 20})
    run_query(
        "find one and update (new doc)",
        people.find_one_and_update,
        db,
        "user1",
        {"age": 55},
        return_new=True,
    )
    run_query("find one and delete (deleted doc)", people.find_one_and_delete, db, "user1")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Walk through basic pymongo query patterns")
    parser.add_argument("--drop", action="store_true", help="Drop the people collection first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    db = get_database()
    if args.drop:
        db["people"].drop()
    walkthrough(db)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
