"""
Table mapping: save (insert-or-update) and delete of single records.
"""
import logging
from typing import TYPE_CHECKING, Any

from tablemap.binding import Binding, bind
from tablemap.exceptions import InvalidRecordError, NotFoundError
from tablemap.query import Query
from tablemap.sql import build_delete_sql, build_insert_sql, build_update_sql
from tablemap.sql import quote_identifier

if TYPE_CHECKING:
    from tablemap.catalog import TableSchema
    from tablemap.session import Session

logger = logging.getLogger(__name__)

__all__ = ['TableMapping']


def _is_zero(value: Any) -> bool:
    """Unset primary key: None or the zero value of a scalar type."""
    if value is None:
        return True
    return isinstance(value, (int, float, str, bytes)) and not value


class TableMapping:
    """Maps records of one table through a session.
    """

    def __init__(self, name: str, session: 'Session') -> None:
        self.name = name
        self.session = session

    def __repr__(self) -> str:
        return f'TableMapping({self.name!r})'

    def schema(self) -> 'TableSchema':
        """Column layout of the mapped table.

        Raises
            IntrospectionError: If the layout cannot be read
        """
        return self.session.schema(self.name)

    def query(self) -> Query:
        """Start a new query over the mapped table."""
        return Query(self)

    def get(self, record_cls: type, key: Any) -> Any:
        """Fetch the record whose primary key equals `key`.

        Raises
            InvalidRecordError: If the table has no single-column primary key
            NotFoundError: If no such row exists
        """
        pk = self.schema().primary_key
        if pk is None:
            raise InvalidRecordError(f'table {self.name} has no primary key')
        return self.query().where(f'{quote_identifier(pk.column_name)} =', key).limit(1).one(record_cls)

    def save(self, record: Any) -> bool:
        """Insert or update `record`.

        A record whose primary-key field holds a non-zero value is updated;
        otherwise it is inserted and the generated row id is written back to
        an int-annotated primary-key field.

        Returns
            True if a row was inserted, False if it was updated

        Raises
            InvalidRecordError: If `record` is not a dataclass instance
            ExecutionError: If the database rejects the statement
        """
        schema = self.schema()
        bindings = bind(schema, record)
        pk = next((b for b in bindings if b.is_primary_key), None)
        data = [b for b in bindings if not b.is_primary_key]
        columns = [b.column.column_name for b in data]
        values = [b.value for b in data]

        if pk is not None and not _is_zero(pk.value):
            if not data:
                raise InvalidRecordError(f'{type(record).__name__} maps no updatable column of {self.name}')
            sql = build_update_sql(schema.name, columns, pk.column.column_name)
            result = self.session.execute(sql, *values, pk.value)
            if result.rowcount != 1:
                logger.warning(f'Update of {self.name} {pk.column.column_name}={pk.value!r} affected {result.rowcount} rows')
            return False

        sql = build_insert_sql(schema.name, columns)
        result = self.session.execute(sql, *values)
        if pk is not None and result.lastrowid is not None:
            self._write_back_id(pk, result.lastrowid)
        return True

    def _write_back_id(self, pk: Binding, rowid: int) -> None:
        if not pk.accepts_int:
            logger.debug(f'Primary key field {pk.column.field_name} is not int; generated id {rowid} dropped')
            return
        if not pk.writable:
            logger.warning(f'Primary key field {pk.column.field_name} is frozen; generated id {rowid} dropped')
            return
        pk.value = rowid

    def delete(self, record: Any) -> None:
        """Delete the row identified by the primary key of `record`.

        Raises
            InvalidRecordError: If the table has no primary key or the
            record does not map it
            NotFoundError: If the statement did not affect exactly one row
            ExecutionError: If the database rejects the statement
        """
        schema = self.schema()
        bindings = bind(schema, record)
        if schema.primary_key is None:
            raise InvalidRecordError(f'table {self.name} has no primary key')
        pk = next((b for b in bindings if b.is_primary_key), None)
        if pk is None:
            raise InvalidRecordError(f'{type(record).__name__} does not map primary key of {self.name}')

        sql = build_delete_sql(schema.name, pk.column.column_name)
        result = self.session.execute(sql, pk.value)
        if result.rowcount != 1:
            raise NotFoundError(f'{self.name} {pk.column.column_name}={pk.value!r} not found')
