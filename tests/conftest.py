"""
Shared fixtures: an in-memory MongoDB (mongomock) and a TestClient bound to it.
"""
import mongomock
import pytest
from fastapi.testclient import TestClient

from relations_api.main import create_app


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    yield client["relationDemo"]
    client.close()


@pytest.fixture
def client(db):
    app = create_app(database=db, api_token="giveAccess")
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def three_orders(db):
    from relations_db import relationships

    return relationships.insert_orders(
        db,
        [
            {"item": "Samosa", "price": 15},
            {"item": "Coke", "price": 40},
            {"item": "Dosa", "price": 30},
        ],
    )
