"""
Table layout discovery and caching.

A `ColumnCatalog` asks the dialect for a table's columns the first time the
table is mentioned and keeps the resulting `TableSchema` for the life of the
catalog. A layout leaves the catalog only through `invalidate` or
`clear`, unless the catalog was given an explicit `maxsize`. Lookups are
lock-free reads of the cache; population is serialized by one lock and
re-checks the cache once inside it, so concurrent callers asking for the
same unknown table trigger a single introspection query.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import cachetools
from tablemap.exceptions import DriverError, IntrospectionError
from tablemap.naming import to_field_convention

if TYPE_CHECKING:
    from tablemap.connection import ConnectionWrapper
    from tablemap.dialect import ColumnRow

logger = logging.getLogger(__name__)

__all__ = ['ColumnSpec', 'TableSchema', 'ColumnCatalog']


@dataclass(frozen=True)
class ColumnSpec:
    """One table column and the record field it maps to.
    """
    field_name: str
    column_name: str
    is_primary_key: bool = False
    data_type: str = ''
    not_null: bool = False
    default: Any = None

    @classmethod
    def from_row(cls, row: 'ColumnRow', is_primary_key: bool) -> 'ColumnSpec':
        return cls(
            field_name=to_field_convention(row.name),
            column_name=row.name,
            is_primary_key=is_primary_key,
            data_type=row.type,
            not_null=row.notnull,
            default=row.dflt_value,
        )


@dataclass(frozen=True)
class TableSchema:
    """Cached column layout of one table.

    `columns` follows the physical column order. `primary_key` is the
    element of `columns` flagged as primary key, if exactly one is.
    """
    name: str
    columns: tuple[ColumnSpec, ...]
    primary_key: ColumnSpec | None = None
    _by_column: dict[str, ColumnSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_by_column', {c.column_name: c for c in self.columns})

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.column_name for c in self.columns)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(c.field_name for c in self.columns)

    def column(self, column_name: str) -> ColumnSpec:
        """Look up a column by its database name.

        Raises
            KeyError: If the table has no such column
        """
        return self._by_column[column_name]

    @classmethod
    def from_rows(cls, name: str, rows: list['ColumnRow']) -> 'TableSchema':
        """Build a schema from describe-table rows.

        A primary key spanning several columns is not addressable through a
        single field; such tables get no primary key at all.
        """
        pk_rows = [row for row in rows if row.pk]
        single_pk = pk_rows[0].cid if len(pk_rows) == 1 else None
        if len(pk_rows) > 1:
            logger.warning(f'Table {name} has a composite primary key '
                           f'({", ".join(r.name for r in pk_rows)}); save/delete by key disabled')

        columns = tuple(ColumnSpec.from_row(row, row.cid == single_pk) for row in rows)
        primary_key = next((c for c in columns if c.is_primary_key), None)
        return cls(name=name, columns=columns, primary_key=primary_key)


class ColumnCatalog:
    """Cache of table layouts keyed by table name.

    One catalog may be shared by any number of sessions and threads. It is
    unbounded by default; with `maxsize` set, layouts may be evicted once
    it is full and are introspected again on next use.
    """

    def __init__(self, maxsize: int | None = None) -> None:
        limit = float('inf') if maxsize is None else maxsize
        self._tables: cachetools.Cache = cachetools.Cache(maxsize=limit)
        self._lock = threading.RLock()

    def __contains__(self, table: str) -> bool:
        return table in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def get_schema(self, cn: 'ConnectionWrapper', table: str) -> TableSchema:
        """Return the layout of `table`, introspecting it on first use.

        Args:
            cn: Connection used for introspection on a cache miss
            table: Table name

        Raises
            IntrospectionError: If the metadata query fails or the table
            has no columns
        """
        try:
            schema = self._tables[table]
            logger.debug(f'Catalog hit for {table}')
            return schema
        except KeyError:
            pass

        with self._lock:
            schema = self._tables.get(table)
            if schema is not None:
                logger.debug(f'Catalog hit for {table} after wait')
                return schema

            logger.debug(f'Catalog miss for {table}')
            schema = self._introspect(cn, table)
            self._tables[table] = schema
            return schema

    def _introspect(self, cn: 'ConnectionWrapper', table: str) -> TableSchema:
        try:
            rows = cn.dialect.describe_table(cn, table)
        except DriverError as err:
            logger.error(f'cannot acquire table info for {table}: {err}')
            raise IntrospectionError(f'cannot read table info for {table}') from err
        if not rows:
            raise IntrospectionError(f'table {table} not found')
        return TableSchema.from_rows(table, rows)

    def invalidate(self, table: str) -> None:
        """Forget the cached layout of one table, e.g. after ALTER TABLE.
        """
        with self._lock:
            self._tables.pop(table, None)
            logger.debug(f'Invalidated catalog entry for {table}')

    def clear(self) -> None:
        """Forget all cached layouts."""
        with self._lock:
            self._tables.clear()
