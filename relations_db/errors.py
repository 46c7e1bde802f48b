class RelationsError(Exception):
    """Base class for errors raised by relations_db."""


class SchemaValidationError(RelationsError, ValueError):
    """A document does not match its collection validator."""

    def __init__(self, collection: str, message: str):
        super().__init__(f"{collection}: {message}")
        self.collection = collection
        self.message = message


class InvalidIdError(RelationsError, ValueError):
    """A string could not be parsed as an ObjectId."""

    def __init__(self, value):
        super().__init__(f"Invalid id: {value!r}")
        self.value = value


class DanglingReferenceError(RelationsError, ValueError):
    """Referenced documents do not exist."""

    def __init__(self, collection: str, missing: list):
        super().__init__(f"{collection}: unknown id(s) {', '.join(str(m) for m in missing)}")
        self.collection = collection
        self.missing = missing
