"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for creating new database connections
2. The `ConnectionWrapper` class that holds one SQLAlchemy connection
3. Engine creation and management through a thread-safe registry
4. `exec_file()` for loading a schema script in one transaction
"""
import atexit
import logging
import pathlib
import threading
from collections.abc import Callable
from dataclasses import fields
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from tablemap.dialect import Dialect, get_dialect
from tablemap.exceptions import DriverError, ExecutionError
from tablemap.options import DatabaseOptions

from libb import load_options

__all__ = [
    'ConnectionWrapper',
    'connect',
    'configure_connection',
    'exec_file',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def get_engine_for_options(options: DatabaseOptions, use_pool: bool = False,
                           pool_size: int = 5, pool_recycle: int = 300,
                           pool_timeout: int = 30,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = f'{str(options)}_{use_pool}_{pool_size}_{pool_recycle}_{pool_timeout}'

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        dialect = get_dialect(options.drivername)
        url = dialect.build_connection_url(options)

        engine_kwargs: dict[str, Any] = {'echo': False}
        engine_kwargs.update(dialect.get_engine_kwargs(options))

        if not use_pool:
            engine_kwargs['poolclass'] = NullPool
        else:
            engine_kwargs['pool_size'] = pool_size
            engine_kwargs['pool_recycle'] = pool_recycle
            engine_kwargs['pool_timeout'] = pool_timeout
            engine_kwargs['max_overflow'] = 10
            engine_kwargs['pool_pre_ping'] = True
            engine_kwargs['pool_reset_on_return'] = 'rollback'

        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Holds one SQLAlchemy connection together with its options and dialect.

    Tracks statement counts and timing and supports the context manager
    protocol. Transactions are not managed here; see `Session`.
    """

    def __init__(self, sa_connection: sa.engine.Connection,
                 options: DatabaseOptions) -> None:
        self.sa_connection = sa_connection
        self.options = options
        self.calls = 0
        self.time = 0.0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Close the connection when exiting the context manager
        """
        self.close()
        logger.debug('Closed connection via context manager')

    @property
    def dialect_name(self) -> str:
        """Return the driver name ('sqlite')."""
        return self.options.drivername

    @property
    def dialect(self) -> Dialect:
        """Return the dialect implementation for this connection."""
        return get_dialect(self.options.drivername)

    @property
    def closed(self) -> bool:
        return self.sa_connection.closed

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def close(self) -> None:
        """Close the SQLAlchemy connection, discarding any open transaction
        """
        if not self.sa_connection.closed:
            self.sa_connection.close()
            logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')


def configure_connection(sa_connection: sa.engine.Connection,
                         options: DatabaseOptions) -> None:
    """Configure a SQLAlchemy connection with dialect-specific settings.
    """
    dialect = get_dialect(options.drivername)
    dialect.configure_connection(sa_connection.connection)


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = get_engine_for_options(options, use_pool=options.use_pool,
                                    pool_size=options.pool_max_connections,
                                    pool_recycle=options.pool_max_idle_time,
                                    pool_timeout=options.pool_wait_timeout)

    sa_connection = engine.connect()
    configure_connection(sa_connection, options)

    return ConnectionWrapper(sa_connection, options)


def _split_statements(script: str) -> list[str]:
    """Split a script on ``;`` keeping only non-blank statements.
    """
    return [stmt.strip() for stmt in script.split(';') if stmt.strip()]


def exec_file(cn: ConnectionWrapper, path: str | pathlib.Path) -> None:
    """Execute a ``;``-separated SQL script inside one transaction.

    The transaction is committed when every statement succeeds and rolled
    back on the first failure, which is raised as ExecutionError.
    """
    script = pathlib.Path(path).read_text()
    statements = _split_statements(script)
    sa_connection = cn.sa_connection

    if sa_connection.in_transaction():
        sa_connection.commit()

    with sa_connection.begin():
        for stmt in statements:
            try:
                sa_connection.exec_driver_sql(stmt)
            except DriverError as err:
                logger.warning(f'Script {path} failed at: {stmt}')
                raise ExecutionError(str(err), orig=err) from err
    logger.debug(f'Executed {len(statements)} statements from {path}')
