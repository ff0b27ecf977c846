"""Exception types raised by the database helper."""


class DatabaseError(Exception):
    """Base class for errors raised by utildb itself."""
    pass


class MultipleStatementsError(DatabaseError):
    """SQL text holds more than one statement on a single-statement connection."""
    pass


class InsertResultError(DatabaseError):
    """An insert completed without returning a generated identifier.

    The raw result is kept on ``result`` so callers can inspect it.
    """

    def __init__(self, result, id_column: str = "id"):
        self.result = result
        self.id_column = id_column
        super().__init__(f"Insert returned no '{id_column}' value: {result!r}")
