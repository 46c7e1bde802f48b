"""relations_db package initializer

Document-store helpers for the relationship demos: connection handling,
collection validators, the reference resolver and the per-collection
operations used by the API and the CLIs.
"""

__all__ = [
    "chats",
    "connect_db",
    "create_collections",
    "errors",
    "ids",
    "people",
    "populate",
    "relationships",
    "schema",
    "seed",
    "validation",
]
