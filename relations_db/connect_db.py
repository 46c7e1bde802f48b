# connect_db.py - process-scoped MongoDB connection
import logging
import os

from dotenv import load_dotenv
from pymongo import MongoClient

load_dotenv()
MONGO_URI = os.getenv("MONGO_URI", "mongodb://127.0.0.1:27017")
DB_NAME = os.getenv("DB_NAME", "relationDemo")
MONGO_TLS = os.getenv("MONGO_TLS", "false").lower() in ("1", "true", "yes")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

logger = logging.getLogger(__name__)


def get_client(uri: str | None = None) -> MongoClient:
    """Open a client and ping the server so a bad URI fails at startup."""
    client = MongoClient(
        uri or MONGO_URI,
        serverSelectionTimeoutMS=MONGO_TIMEOUT_MS,
        tls=MONGO_TLS,
    )
    try:
        client.admin.command("ping")
    except Exception:
        client.close()
        raise
    return client


def get_database(client: MongoClient | None = None, name: str | None = None):
    try:
        client = client or get_client()
        db = client[name or DB_NAME]
        logger.info("Connected to MongoDB database: %s", db.name)
        return db
    except Exception as e:
        logger.error("Failed to connect to MongoDB: %s", e)
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    get_database()
