import logging

from pymongo.errors import CollectionInvalid, PyMongoError

from .connect_db import get_database
from .schema import COLLECTION_SCHEMAS

logger = logging.getLogger(__name__)


def create_collections(db) -> dict:
    """Create every collection and attach its validator.

    Returns a mapping of collection name to ``True`` or the error message for
    collections whose validator could not be applied.
    """
    results = {}
    for name, schema in COLLECTION_SCHEMAS.items():
        try:
            db.create_collection(name)
        except CollectionInvalid:
            # already exists
            pass

        try:
            db.command("collMod", name, validator={"$jsonSchema": schema})
            logger.info("Applied validator to collection %s", name)
            print(f"✅ Created/updated collection '{name}' with validation.")
            results[name] = True
        except PyMongoError as e:
            logger.warning("Failed to apply validator to %s: %s", name, e)
            print(f"⚠️ Failed to apply validator to '{name}': {e}")
            results[name] = str(e)
    return results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_collections(get_database())
