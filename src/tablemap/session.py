"""
Unit-of-work sessions.

A `Session` runs every statement inside its current transaction, beginning
one lazily on the first statement. `commit()` and `rollback()` end it; the
next statement begins a fresh one.

Examples
    with use(cn) as session:
        users = session.table('users')
        users.save(user)
        found = users.query().where('name =', 'bob').limit(1).one(User)

A session is not thread safe; give each thread its own session and share
the `ColumnCatalog` instead.
"""
import logging
import time
from typing import TYPE_CHECKING, Any, NamedTuple, Self

import sqlalchemy as sa
from tablemap.catalog import ColumnCatalog, TableSchema
from tablemap.connection import ConnectionWrapper
from tablemap.exceptions import DriverError, ExecutionError

from libb import attrdict

if TYPE_CHECKING:
    from tablemap.mapping import TableMapping

logger = logging.getLogger(__name__)

__all__ = ['ExecResult', 'Session', 'use']


class ExecResult(NamedTuple):
    """Outcome of a data-modifying statement."""
    rowcount: int
    lastrowid: int | None


class Session:
    """Runs statements for one logical unit of work on one connection.
    """

    def __init__(self, cn: ConnectionWrapper, catalog: ColumnCatalog | None = None) -> None:
        self.cn = cn
        self.catalog = catalog if catalog is not None else ColumnCatalog(cn.options.catalog_maxsize)
        self._tx: sa.engine.Transaction | None = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        if exc_type is not None:
            logger.warning('Rolling back the current transaction')
            self.rollback()
        else:
            self.commit()

    @property
    def in_transaction(self) -> bool:
        return self._tx is not None

    def _transaction(self) -> sa.engine.Transaction:
        if self._tx is None or not self._tx.is_active:
            sa_connection = self.cn.sa_connection
            if sa_connection.in_transaction():
                self._tx = sa_connection.get_transaction()
            else:
                self._tx = sa_connection.begin()
            logger.debug(f'Started transaction for connection {id(self.cn)}')
        return self._tx

    def _pop_transaction(self) -> sa.engine.Transaction | None:
        """Detach the current transaction, following the connection if the
        one begun here was ended behind the session's back.
        """
        tx, self._tx = self._tx, None
        if tx is not None and not tx.is_active:
            tx = self.cn.sa_connection.get_transaction()
        return tx

    def _run(self, sql: str, args: tuple) -> sa.engine.CursorResult:
        self._transaction()
        start = time.perf_counter()
        try:
            return self.cn.sa_connection.exec_driver_sql(sql, args)
        except DriverError as err:
            logger.warning(f'Statement error: {err}')
            raise ExecutionError(str(err), orig=err) from err
        finally:
            self.cn.addcall(time.perf_counter() - start)

    def execute(self, sql: str, *args: Any) -> ExecResult:
        """Execute a data-modifying statement.

        Returns
            ExecResult with the affected row count and the engine's last
            inserted row id
        """
        logger.debug(f'Exec: {sql}  =>  {args!r}')
        result = self._run(sql, args)
        return ExecResult(result.rowcount, result.lastrowid)

    def query(self, sql: str, *args: Any, max_rows: int | None = None) -> list[sa.Row]:
        """Execute a SELECT and return rows as positional sequences.

        Args:
            sql: Row-returning statement
            args: Placeholder values
            max_rows: Stop fetching after this many rows; all rows when None

        Raises
            ExecutionError: If the statement fails or returns no rows at all
            (e.g. an UPDATE passed to `query`)
        """
        logger.debug(f'Query: {sql}  =>  {args!r}')
        result = self._run(sql, args)
        try:
            if max_rows is not None:
                rows = result.fetchmany(max_rows)
                result.close()
                return list(rows)
            return list(result.fetchall())
        except sa.exc.ResourceClosedError as err:
            logger.warning(f'Statement returned no rows: {sql}')
            raise ExecutionError(f'statement does not return rows: {sql}', orig=err) from err
        except DriverError as err:
            logger.warning(f'Fetch error: {err}')
            raise ExecutionError(str(err), orig=err) from err

    def select(self, sql: str, *args: Any) -> list[attrdict]:
        """Execute a SELECT and return rows as attribute dictionaries.
        """
        return [attrdict(row._mapping) for row in self.query(sql, *args)]

    def commit(self) -> None:
        """Commit the current transaction, if any.
        """
        tx = self._pop_transaction()
        if tx is None:
            return
        try:
            tx.commit()
        except DriverError as err:
            logger.warning(f'Commit error: {err}')
            raise ExecutionError(str(err), orig=err) from err
        logger.debug(f'Committed transaction for connection {id(self.cn)}')

    def rollback(self) -> None:
        """Roll back the current transaction, if any.
        """
        tx = self._pop_transaction()
        if tx is None:
            return
        try:
            tx.rollback()
        except DriverError as err:
            logger.warning(f'Rollback error: {err}')
            raise ExecutionError(str(err), orig=err) from err
        logger.debug(f'Rolled back transaction for connection {id(self.cn)}')

    def schema(self, table: str) -> TableSchema:
        """Column layout of `table` from the session's catalog."""
        return self.catalog.get_schema(self.cn, table)

    def table(self, name: str) -> 'TableMapping':
        """Return the mapping for table `name`."""
        from tablemap.mapping import TableMapping
        return TableMapping(name, self)


def use(cn: ConnectionWrapper, catalog: ColumnCatalog | None = None) -> Session:
    """Open a session on `cn`, optionally sharing an existing catalog.
    """
    return Session(cn, catalog)
