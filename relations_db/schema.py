# schema.py

orders_schema = {
    "bsonType": "object",
    "required": ["item", "price"],
    "additionalProperties": False,
    "properties": {
        "_id": {"bsonType": "objectId"},
        "item": {"bsonType": "string", "minLength": 1},
        "price": {"bsonType": ["int", "double"], "minimum": 0},
    },
}

customers_schema = {
    "bsonType": "object",
    "required": ["name", "orders"],
    "additionalProperties": False,
    "properties": {
        "_id": {"bsonType": "objectId"},
        "name": {"bsonType": "string", "minLength": 1},
        "orders": {"bsonType": "array", "items": {"bsonType": "objectId"}},
    },
}

chats_schema = {
    "bsonType": "object",
    "required": ["from", "to", "message", "date"],
    "additionalProperties": False,
    "properties": {
        "_id": {"bsonType": "objectId"},
        "from": {"bsonType": "string", "minLength": 1},
        "to": {"bsonType": "string", "minLength": 1},
        "message": {"bsonType": "string", "maxLength": 50},
        "date": {"bsonType": "date"},
    },
}

address_schema = {
    "bsonType": "object",
    "required": ["location", "city"],
    "additionalProperties": False,
    "properties": {
        "location": {"bsonType": "string"},
        "city": {"bsonType": "string"},
    },
}

users_schema = {
    "bsonType": "object",
    "required": ["username", "addresses"],
    "additionalProperties": False,
    "properties": {
        "_id": {"bsonType": "objectId"},
        "username": {"bsonType": "string", "minLength": 1},
        "email": {"bsonType": ["string", "null"]},
        "addresses": {"bsonType": "array", "items": address_schema},
    },
}

posts_schema = {
    "bsonType": "object",
    "required": ["content", "likes", "user"],
    "additionalProperties": False,
    "properties": {
        "_id": {"bsonType": "objectId"},
        "content": {"bsonType": "string"},
        "likes": {"bsonType": "int", "minimum": 0},
        "user": {"bsonType": "objectId"},
    },
}

people_schema = {
    "bsonType": "object",
    "required": ["name", "email", "age"],
    "additionalProperties": False,
    "properties": {
        "_id": {"bsonType": "objectId"},
        "name": {"bsonType": "string"},
        "email": {"bsonType": "string"},
        "age": {"bsonType": "int", "minimum": 0},
    },
}

COLLECTION_SCHEMAS = {
    "orders": orders_schema,
    "customers": customers_schema,
    "chats": chats_schema,
    "users": users_schema,
    "posts": posts_schema,
    "people": people_schema,
}
