"""
Mapping-layer exception classes.
"""
import sqlite3

import sqlalchemy as sa


class DatabaseError(Exception):
    """Base class for all tablemap errors.
    """


class IntrospectionError(DatabaseError):
    """Table metadata could not be read.
    """


class InvalidRecordError(DatabaseError):
    """Record or destination does not have a mappable shape.
    """


class NotFoundError(DatabaseError):
    """No row where exactly one was expected.
    """


class MultipleRowsFoundError(DatabaseError):
    """More than one row returned to a single-row query.
    """


class ExecutionError(DatabaseError):
    """The database driver rejected a statement.

    The driver exception is kept on ``orig`` and chained as ``__cause__``.
    """

    def __init__(self, message: str, orig: BaseException | None = None) -> None:
        super().__init__(message)
        self.orig = orig


DriverError = (
    sa.exc.DBAPIError,           # SQLAlchemy-wrapped driver errors
    sa.exc.StatementError,       # Parameter binding failures
    sqlite3.Error,               # Raw sqlite3 errors
)
