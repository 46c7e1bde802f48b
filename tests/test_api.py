from unittest.mock import MagicMock

from bson.objectid import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError, InvalidOperation, PyMongoError, ServerSelectionTimeoutError, WriteError

from relations_api.main import create_app
from relations_db import chats, relationships


# ======== Greetings & middleware ========
def test_greetings(client):
    assert client.get("/").text == "Add '/ghost' on your route or add '/$yourname' on the route"
    assert client.get("/ghost").text == "👻👻 I'm the ghost"
    assert client.get("/Alice").text == "Have a warm welcome here Alice"


def test_api_routes_need_the_token(client):
    denied = client.get("/api/ping")
    assert denied.status_code == 403
    assert denied.text == "Access Denied"
    assert client.get("/api/ping", params={"token": "wrong"}).text == "Access Denied"

    allowed = client.get("/api/ping", params={"token": "giveAccess"})
    assert allowed.status_code == 200
    assert allowed.text == "pong"


def test_every_response_carries_request_time(client):
    assert client.get("/ghost").headers["X-Request-Time"]


# ======== Chats ========
def test_chat_index_lists_messages(client, db):
    chats.create_chat(db, "User1", "User2", "Hello <chai>")
    page = client.get("/chats")
    assert page.status_code == 200
    assert page.headers["content-type"].startswith("text/html")
    assert "Hello &lt;chai&gt;" in page.text


def test_new_chat_form(client):
    assert 'action="/chats"' in client.get("/chats/new").text


def test_create_chat_redirects(client, db):
    response = client.post(
        "/chats", data={"from": "User1", "to": "User2", "message": "hey"}, follow_redirects=False
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/chats"
    assert db["chats"].find_one({"message": "hey"})["from"] == "User1"


def test_create_chat_rejects_long_message(client, db):
    response = client.post("/chats", data={"from": "a", "to": "b", "message": "x" * 51})
    assert response.status_code == 422
    assert db["chats"].count_documents({}) == 0


def test_show_and_edit_pages(client, db):
    chat_id = chats.create_chat(db, "User1", "User2", "hello")
    assert "hello" in client.get(f"/chats/{chat_id}").text
    edit = client.get(f"/chats/{chat_id}/edit").text
    assert 'name="_method" value="PATCH"' in edit


def test_show_unknown_and_invalid_chat(client):
    assert client.get(f"/chats/{ObjectId()}").status_code == 404
    assert client.get("/chats/not-an-id").status_code == 400


def test_patch_and_delete_chat(client, db):
    chat_id = chats.create_chat(db, "User1", "User2", "old")

    patched = client.patch(f"/chats/{chat_id}", data={"message": "new"}, follow_redirects=False)
    assert patched.status_code == 303
    assert chats.get_chat(db, chat_id)["message"] == "new"

    deleted = client.delete(f"/chats/{chat_id}", follow_redirects=False)
    assert deleted.status_code == 303
    assert chats.get_chat(db, chat_id) is None
    assert client.delete(f"/chats/{chat_id}").status_code == 404


def test_method_override_from_html_forms(client, db):
    chat_id = chats.create_chat(db, "User1", "User2", "old")

    client.post(f"/chats/{chat_id}", data={"_method": "PATCH", "message": "edited"}, follow_redirects=False)
    assert chats.get_chat(db, chat_id)["message"] == "edited"

    client.post(f"/chats/{chat_id}", data={"_method": "delete"}, follow_redirects=False)
    assert chats.get_chat(db, chat_id) is None

    assert client.post(f"/chats/{chat_id}", data={"_method": "PUT"}).status_code == 405


# ======== Orders & customers ========
def test_orders_and_customer_populate(client):
    created = client.post(
        "/orders",
        json=[
            {"item": "Samosa", "price": 15},
            {"item": "Coke", "price": 40},
            {"item": "Dosa", "price": 30},
        ],
    )
    assert created.status_code == 201
    samosa, coke, dosa = created.json()["order_ids"]

    customer = client.post("/customers", json={"name": "Anuj Gupta", "orders": [samosa, dosa]})
    assert customer.status_code == 201
    customer_id = customer.json()["id"]
    assert customer.json()["orders"] == [samosa, dosa]

    populated = client.get(f"/customers/{customer_id}").json()
    assert [(o["item"], o["price"]) for o in populated["orders"]] == [("Samosa", 15), ("Dosa", 30)]

    raw = client.get(f"/customers/{customer_id}", params={"populate": "false"}).json()
    assert raw["orders"] == [samosa, dosa]

    listed = client.get("/customers").json()
    assert listed[0]["orders"][1]["item"] == "Dosa"
    assert len(client.get("/orders").json()) == 3
    assert client.get(f"/orders/{coke}").json()["item"] == "Coke"


def test_single_order_payload(client):
    response = client.post("/orders", json={"item": "Chai", "price": 10})
    assert response.status_code == 201
    assert len(response.json()["order_ids"]) == 1


def test_order_payload_with_unknown_fields_is_rejected(client, db):
    response = client.post("/orders", json={"item": "Chai", "price": 10, "discount": 2})
    assert response.status_code == 422
    assert db["orders"].count_documents({}) == 0


def test_deleted_order_drops_out_of_customer(client, db, three_orders):
    samosa, _, dosa = three_orders
    customer_id = relationships.create_customer(db, "Anuj Gupta", [samosa, dosa])

    assert client.delete(f"/orders/{samosa}").json() == {"deleted": 1}
    assert client.delete(f"/orders/{samosa}").status_code == 404

    body = client.get(f"/customers/{customer_id}").json()
    assert [o["item"] for o in body["orders"]] == ["Dosa"]
    kept = client.get(f"/customers/{customer_id}", params={"keep_missing": "true"}).json()
    assert kept["orders"][0] is None


def test_customer_with_unknown_order_is_rejected(client, db):
    response = client.post("/customers", json={"name": "x", "orders": [str(ObjectId())]})
    assert response.status_code == 400
    assert db["customers"].count_documents({}) == 0


def test_add_order_to_customer(client, db, three_orders):
    customer_id = relationships.create_customer(db, "Anuj Gupta", [three_orders[0]])

    body = client.post(f"/customers/{customer_id}/orders", json={"order_id": str(three_orders[1])}).json()
    assert body["orders"] == [str(three_orders[0]), str(three_orders[1])]

    again = client.post(f"/customers/{customer_id}/orders", json={"order_id": str(three_orders[1])}).json()
    assert again["orders"] == body["orders"]

    missing_order = client.post(f"/customers/{customer_id}/orders", json={"order_id": str(ObjectId())})
    assert missing_order.status_code == 404
    missing_customer = client.post(f"/customers/{ObjectId()}/orders", json={"order_id": str(three_orders[0])})
    assert missing_customer.status_code == 404


# ======== Users & posts ========
def test_user_addresses_and_posts(client):
    user = client.post(
        "/users",
        json={
            "username": "Sherlock holmes",
            "addresses": [{"location": "sharma galli", "city": "london"}],
        },
    )
    assert user.status_code == 201
    user_id = user.json()["id"]

    updated = client.post(f"/users/{user_id}/addresses", json={"location": "Singham nagar", "city": "New york"})
    assert [a["city"] for a in updated.json()["addresses"]] == ["london", "New york"]

    posts = client.post(f"/users/{user_id}/posts", json=[{"content": "Elementary", "likes": 3}])
    assert posts.status_code == 201
    post_id = posts.json()["post_ids"][0]

    assert client.get(f"/users/{user_id}/posts").json()[0]["user"] == user_id
    populated = client.get(f"/posts/{post_id}").json()
    assert populated["user"]["username"] == "Sherlock holmes"
    assert client.get(f"/posts/{post_id}", params={"populate": "false"}).json()["user"] == user_id


def test_posts_for_unknown_user(client):
    response = client.post(f"/users/{ObjectId()}/posts", json=[{"content": "x"}])
    assert response.status_code == 404


# ======== Health & store failures ========
def test_health_pings_the_store():
    fake_db = MagicMock()
    with TestClient(create_app(database=fake_db)) as test_client:
        assert test_client.get("/health").json() == {"status": "ok"}
        fake_db.client.admin.command.side_effect = PyMongoError("down")
        assert test_client.get("/health").status_code == 503


def test_store_outage_answers_503():
    fake_db = MagicMock()
    fake_db.__getitem__.return_value.find.side_effect = ServerSelectionTimeoutError("down")
    with TestClient(create_app(database=fake_db)) as test_client:
        response = test_client.get("/chats")
        assert response.status_code == 503
        assert response.text == "Database unavailable"
        # the app keeps serving
        assert test_client.get("/ghost").status_code == 200


def test_server_validation_failure_answers_400():
    fake_db = MagicMock()
    fake_db.__getitem__.return_value.insert_many.side_effect = WriteError("Document failed validation", 121)
    with TestClient(create_app(database=fake_db)) as test_client:
        response = test_client.post("/orders", json={"item": "Chai", "price": 10})
        assert response.status_code == 400
        assert response.json() == {"detail": "Document failed validation", "code": 121}


def test_duplicate_key_answers_400():
    fake_db = MagicMock()
    fake_db.__getitem__.return_value.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key", 11000)
    with TestClient(create_app(database=fake_db)) as test_client:
        response = test_client.post("/users", json={"username": "rahul"})
        assert response.status_code == 400
        assert response.json()["code"] == 11000


def test_other_store_errors_answer_500():
    fake_db = MagicMock()
    fake_db.__getitem__.return_value.find.side_effect = InvalidOperation("cursor already used")
    with TestClient(create_app(database=fake_db)) as test_client:
        response = test_client.get("/orders")
        assert response.status_code == 500
        assert response.text == "Database error"


def test_denied_requests_are_not_timed(client):
    denied = client.get("/api/ping")
    assert denied.status_code == 403
    assert "X-Request-Time" not in denied.headers
    assert client.get("/api/ping", params={"token": "giveAccess"}).headers["X-Request-Time"]


def test_user_with_empty_address_fields_can_be_read(client, db):
    user_id = relationships.create_user(db, "watson", addresses=[{"location": "", "city": "London"}])
    response = client.get(f"/users/{user_id}")
    assert response.status_code == 200
    assert response.json()["addresses"] == [{"location": "", "city": "London"}]
