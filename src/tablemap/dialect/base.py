"""
Base dialect interface for engine-specific operations.

A dialect encapsulates what differs between engines: how a table's columns
are enumerated, how a fresh connection is configured, and how pagination is
rendered. The catalog, mapping and query layers only talk to this interface.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from tablemap.connection import ConnectionWrapper
    from tablemap.options import DatabaseOptions

# Registry of dialect name -> dialect class
# Defined here to avoid circular imports (concrete dialects import from base)
_DIALECT_REGISTRY: dict[str, type['Dialect']] = {}


def register_dialect(name: str):
    """Decorator to register a dialect class under a driver name.

    Usage:
        @register_dialect('sqlite')
        class SQLiteDialect(Dialect):
            ...
    """
    def decorator(cls: type['Dialect']) -> type['Dialect']:
        _DIALECT_REGISTRY[name] = cls
        return cls
    return decorator


class ColumnRow(NamedTuple):
    """One row of a describe-table result, in physical column order.
    """
    cid: int
    name: str
    type: str
    notnull: bool
    dflt_value: Any
    pk: int


class Dialect(ABC):
    """Base class for engine-specific operations.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'sqlite')."""

    @abstractmethod
    def describe_table(self, cn: 'ConnectionWrapper', table: str) -> list[ColumnRow]:
        """Enumerate the columns of a table.

        Args:
            cn: Database connection object
            table: Table name

        Returns
            list: One ColumnRow per column ordered by position; empty when
            the table does not exist
        """

    @abstractmethod
    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings.

        Args:
            conn: Raw DBAPI connection to configure
        """

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for this dialect.
        """

    @abstractmethod
    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.
        """

    @abstractmethod
    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        """Render LIMIT/OFFSET as literals.

        Args:
            limit: Maximum number of rows, or None for no limit
            offset: Rows to skip, or None

        Returns
            str: Clause with a leading space, or empty string
        """

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')
