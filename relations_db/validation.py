"""Client-side enforcement of the collection validators in ``schema.py``.

MongoDB applies the same ``$jsonSchema`` server-side once
``create_collections`` has run, but documents are checked here first so that
an invalid write is rejected even against a server without validators.
"""
from datetime import datetime

from bson.objectid import ObjectId
from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import best_match

from . import schema as collection_schema
from .errors import SchemaValidationError

_BSON_TO_JSON_TYPES = {
    "string": "string",
    "int": "int",
    "long": "int",
    "double": "number",
    "decimal": "number",
    "bool": "boolean",
    "null": "null",
    "array": "array",
    "object": "object",
    "objectId": "objectId",
    "date": "datetime",
}

# keywords that mean the same thing in both vocabularies
_PASSTHROUGH = ("required", "minLength", "maxLength", "minimum", "maximum", "additionalProperties")


def _is_object_id(checker, instance):
    return isinstance(instance, ObjectId)


def _is_int(checker, instance):
    # floats are never stored as int, even integral ones like 5.0
    return isinstance(instance, int) and not isinstance(instance, bool)


def _is_datetime(checker, instance):
    return isinstance(instance, datetime)


BsonValidator = validators.extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine_many(
        {"objectId": _is_object_id, "datetime": _is_datetime, "int": _is_int}
    ),
)

_JSON_SCHEMA_CACHE: dict = {}


def bson_to_jsonschema(bson_schema: dict) -> dict:
    """Translate a ``$jsonSchema`` validator into plain JSON Schema."""
    json_schema: dict = {}
    bson_type = bson_schema.get("bsonType")
    if bson_type is not None:
        types = bson_type if isinstance(bson_type, list) else [bson_type]
        json_types = [_BSON_TO_JSON_TYPES.get(t, "string") for t in types]
        json_schema["type"] = json_types[0] if len(json_types) == 1 else json_types

    for key in _PASSTHROUGH:
        if key in bson_schema:
            json_schema[key] = bson_schema[key]

    if "properties" in bson_schema:
        json_schema["properties"] = {
            name: bson_to_jsonschema(prop) for name, prop in bson_schema["properties"].items()
        }
    if "items" in bson_schema:
        json_schema["items"] = bson_to_jsonschema(bson_schema["items"])
    return json_schema


def get_validator(collection: str):
    bson_sch = collection_schema.COLLECTION_SCHEMAS.get(collection)
    if bson_sch is None:
        return None
    if collection not in _JSON_SCHEMA_CACHE:
        _JSON_SCHEMA_CACHE[collection] = BsonValidator(bson_to_jsonschema(bson_sch))
    return _JSON_SCHEMA_CACHE[collection]


def _raise_first_error(validator, label: str, doc: dict):
    error = best_match(validator.iter_errors(doc))
    if error is not None:
        where = ".".join(str(p) for p in error.absolute_path)
        message = f"{where}: {error.message}" if where else error.message
        raise SchemaValidationError(label, message)


def validate_document(collection: str, doc: dict) -> dict:
    """Return ``doc`` unchanged or raise ``SchemaValidationError``.

    Collections without a registered validator accept anything.
    """
    validator = get_validator(collection)
    if validator is not None:
        _raise_first_error(validator, collection, doc)
    return doc


def validate_fragment(label: str, bson_schema: dict, doc):
    """Check a sub-document or single field value before a partial update."""
    _raise_first_error(BsonValidator(bson_to_jsonschema(bson_schema)), label, doc)
    return doc


def validate_changes(collection: str, changes: dict) -> dict:
    """Validate the fields of a ``$set`` payload one at a time."""
    properties = collection_schema.COLLECTION_SCHEMAS[collection]["properties"]
    for key, value in changes.items():
        if key == "_id" or key not in properties:
            raise SchemaValidationError(collection, f"{key!r} cannot be set")
        validate_fragment(f"{collection}.{key}", properties[key], value)
    return changes
