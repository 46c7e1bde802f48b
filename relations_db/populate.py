"""Reference resolver.

Replaces ObjectId references stored in a parent document with the referenced
child documents, the way an ODM ``populate`` call does. The children are read
in one ``$in`` query issued after the parent was read; nothing ties the two
reads together, so a child deleted in between simply does not resolve.

Missing children never raise. Store errors (``pymongo.errors.PyMongoError``)
propagate unchanged.
"""
import logging

logger = logging.getLogger(__name__)


def _collect_ids(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return [value]


def _fetch_children(db, collection: str, ids: list) -> dict:
    if not ids:
        return {}
    unique = list(dict.fromkeys(ids))
    cursor = db[collection].find({"_id": {"$in": unique}})
    return {child["_id"]: child for child in cursor}


def _resolve(value, children: dict, keep_missing: bool):
    if isinstance(value, list):
        resolved = [children.get(ref) for ref in value]
        if keep_missing:
            return resolved
        return [child for child in resolved if child is not None]
    if value is None:
        return None
    return children.get(value)


def populate(db, doc: dict | None, field: str, collection: str, *, keep_missing: bool = False):
    """Return a copy of ``doc`` with ``doc[field]`` resolved against ``collection``.

    Array fields keep their order. Ids that do not match a child are dropped,
    or kept as ``None`` when ``keep_missing`` is set, so the result is never
    longer than the stored reference list. A single-id field resolves to the
    child document or ``None``.
    """
    if doc is None:
        return None
    return populate_many(db, [doc], field, collection, keep_missing=keep_missing)[0]


def populate_many(db, docs: list, field: str, collection: str, *, keep_missing: bool = False) -> list:
    """Resolve ``field`` on every document in ``docs`` with a single child read."""
    ids = []
    for doc in docs:
        ids.extend(_collect_ids(doc.get(field)))
    children = _fetch_children(db, collection, ids)

    missing = len(set(ids) - children.keys())
    if missing:
        logger.debug("%d reference(s) in %s.%s did not resolve", missing, collection, field)

    out = []
    for doc in docs:
        resolved = dict(doc)
        if field in doc:
            resolved[field] = _resolve(doc[field], children, keep_missing)
        out.append(resolved)
    return out
