from bson.errors import InvalidId
from bson.objectid import ObjectId

from .errors import InvalidIdError


def to_object_id(value) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdError(value) from None


def stringify_id(doc: dict | None) -> dict | None:
    """Copy of ``doc`` with ``_id`` moved to a string ``id`` key."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out
