"""
SQLite-specific dialect implementation.

Columns are enumerated with the ``pragma_table_info`` table-valued function,
which yields ``cid, name, type, notnull, dflt_value, pk`` in column order.
SQLite refuses OFFSET without LIMIT, so an offset alone is rendered with
``LIMIT -1``.
"""
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from tablemap.dialect.base import ColumnRow, Dialect, register_dialect

if TYPE_CHECKING:
    from tablemap.connection import ConnectionWrapper
    from tablemap.options import DatabaseOptions

logger = logging.getLogger(__name__)

_TABLE_INFO_SQL = """
SELECT cid, name, type, "notnull", dflt_value, pk
FROM pragma_table_info(?)
ORDER BY cid
"""


@register_dialect('sqlite')
class SQLiteDialect(Dialect):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for SQLite."""
        return f'sqlite:///{options.database}'

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        connect_args: dict[str, Any] = {
            'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
        }
        if options.timeout:
            connect_args['timeout'] = options.timeout
        return {'connect_args': connect_args}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def describe_table(self, cn: 'ConnectionWrapper', table: str) -> list[ColumnRow]:
        """Enumerate table columns via pragma_table_info.
        """
        result = cn.sa_connection.exec_driver_sql(_TABLE_INFO_SQL, (table,))
        rows = [ColumnRow(cid, name, type_ or '', bool(notnull), dflt, pk)
                for cid, name, type_, notnull, dflt, pk in result.fetchall()]
        logger.debug(f'pragma_table_info({table}) returned {len(rows)} columns')
        return rows

    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings for SQLite.
        """
        sqlite_conn = conn
        if hasattr(conn, 'dbapi_connection'):
            sqlite_conn = conn.dbapi_connection

        sqlite_conn.execute('PRAGMA foreign_keys = ON')

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        """Render LIMIT/OFFSET, using LIMIT -1 when only an offset is given.
        """
        if limit is None and offset is None:
            return ''
        clause = f' LIMIT {limit if limit is not None else -1}'
        if offset is not None:
            clause += f' OFFSET {offset}'
        return clause
