"""
Fluent SELECT construction over a mapped table.

SQL is synthesized in a fixed order::

    SELECT "c1", "c2" FROM "table"
        [WHERE <f1> ? AND <f2> ?]
        [ORDER BY "a" ASC, ..., "d" DESC, ...]
        [LIMIT n] [OFFSET n]

Only columns the destination record declares a field for are selected.
Parameters are the `where` values in call order.

ORDER BY names and LIMIT/OFFSET are interpolated into the SQL text: names
are always quoted and counts must be non-negative ints, but column names
taken from untrusted input should still be checked against the table
schema by the caller. `where` fragments are used verbatim and must never
contain user input; pass values as the second argument instead.
"""
import logging
from collections.abc import MutableSequence
from typing import TYPE_CHECKING, Any, Self

from tablemap.binding import bind, bound_columns, build_record, is_record
from tablemap.binding import record_type, scan
from tablemap.exceptions import InvalidRecordError, MultipleRowsFoundError
from tablemap.exceptions import NotFoundError
from tablemap.sql import build_count_sql, build_exists_sql, build_order_clause
from tablemap.sql import build_select_sql, build_where_clause

if TYPE_CHECKING:
    from tablemap.catalog import ColumnSpec, TableSchema
    from tablemap.mapping import TableMapping

logger = logging.getLogger(__name__)

__all__ = ['Query']


def _check_count(name: str, n: Any) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f'{name} must be a non-negative int, got {n!r}')
    return n


class Query:
    """Accumulates filters, ordering and pagination for one table.

    Every builder method mutates and returns the same instance. A Query is
    not meant to be shared between threads.
    """

    def __init__(self, mapping: 'TableMapping') -> None:
        self.mapping = mapping
        self.filters: list[tuple[str, Any]] = []
        self._order_asc: list[str] = []
        self._order_desc: list[str] = []
        self._limit: int | None = None
        self._offset: int | None = None

    def __repr__(self) -> str:
        return (f'Query({self.mapping.name!r}, filters={self.filters!r}, '
                f'asc={self._order_asc!r}, desc={self._order_desc!r}, '
                f'limit={self._limit!r}, offset={self._offset!r})')

    def where(self, fragment: str, value: Any) -> Self:
        """Add ``<fragment> ?`` to the WHERE clause, e.g. ``where('name =', 'bob')``.
        """
        self.filters.append((fragment, value))
        return self

    def order_by(self, *columns: str) -> Self:
        """Order ascending by `columns`."""
        self._order_asc.extend(columns)
        return self

    def order_desc(self, *columns: str) -> Self:
        """Order descending by `columns`."""
        self._order_desc.extend(columns)
        return self

    def limit(self, n: int) -> Self:
        self._limit = _check_count('limit', n)
        return self

    def offset(self, n: int) -> Self:
        self._offset = _check_count('offset', n)
        return self

    @property
    def params(self) -> tuple[Any, ...]:
        """Placeholder values, one per `where` call."""
        return tuple(value for _, value in self.filters)

    def _where(self) -> str:
        return build_where_clause([fragment for fragment, _ in self.filters])

    def _limit_clause(self) -> str:
        return self.mapping.session.cn.dialect.limit_clause(self._limit, self._offset)

    def select_sql(self, schema: 'TableSchema', columns: list['ColumnSpec']) -> str:
        """Render the SELECT for the given destination columns."""
        return build_select_sql(
            schema.name,
            [col.column_name for col in columns],
            where=self._where(),
            order_by=build_order_clause(self._order_asc, self._order_desc),
            limit_clause=self._limit_clause(),
        )

    def one(self, dest: Any) -> Any:
        """Fetch exactly one row into `dest`.

        Args:
            dest: Dataclass instance to fill in place, or dataclass class to
                instantiate

        Returns
            The filled or newly built record

        Raises
            InvalidRecordError: If `dest` maps no column of the table
            NotFoundError: If the query returns no row
            MultipleRowsFoundError: If the query returns more than one row;
                use ``limit(1)`` when any match will do
        """
        schema = self.mapping.schema()
        if is_record(dest):
            bindings = bind(schema, dest, for_write=True)
            columns = [b.column for b in bindings]
        else:
            columns = bound_columns(schema, dest)
            bindings = None
        if not columns:
            raise InvalidRecordError(f'{_type_name(dest)} does not map table {schema.name}')

        rows = self.mapping.session.query(self.select_sql(schema, columns), *self.params, max_rows=2)
        if not rows:
            raise NotFoundError(f'no row in {schema.name} matches the query')
        if len(rows) > 1:
            raise MultipleRowsFoundError(f'more than one row in {schema.name} matches the query')

        if bindings is None:
            return build_record(dest, columns, rows[0])
        scan(bindings, rows[0])
        return dest

    def all(self, record_cls: type, into: MutableSequence | None = None) -> MutableSequence:
        """Fetch all matching rows as fresh `record_cls` instances.

        Args:
            record_cls: Dataclass class to build one instance per row
            into: Optional list to append to; a new list is used otherwise

        Returns
            The list of records, in result order

        Raises
            InvalidRecordError: If `record_cls` is not a dataclass class,
            maps no column, or `into` is not a mutable sequence
        """
        schema = self.mapping.schema()
        record_type(record_cls)
        if into is None:
            into = []
        elif not isinstance(into, MutableSequence):
            raise InvalidRecordError(f'query destination is not a list (got {type(into).__name__})')

        columns = bound_columns(schema, record_cls)
        if not columns:
            logger.error('query destination does not map source table')
            raise InvalidRecordError(f'{record_cls.__name__} does not map table {schema.name}')

        sql = self.select_sql(schema, columns)
        for row in self.mapping.session.query(sql, *self.params):
            into.append(build_record(record_cls, columns, row))
        return into

    def count(self) -> int:
        """Number of matching rows, after LIMIT/OFFSET."""
        schema = self.mapping.schema()
        sql = build_count_sql(schema.name, self._where(), self._limit_clause())
        rows = self.mapping.session.query(sql, *self.params)
        return int(rows[0][0])

    def exists(self) -> bool:
        """Whether at least one row matches."""
        schema = self.mapping.schema()
        sql = build_exists_sql(schema.name, self._where(), self._limit_clause())
        rows = self.mapping.session.query(sql, *self.params)
        return bool(rows[0][0])


def _type_name(dest: Any) -> str:
    return dest.__name__ if isinstance(dest, type) else type(dest).__name__
