"""
Dialect factory for engine-specific operations.
"""
from functools import lru_cache

from tablemap.dialect.base import _DIALECT_REGISTRY
from tablemap.dialect.base import ColumnRow as ColumnRow
from tablemap.dialect.base import Dialect as Dialect
from tablemap.dialect.base import register_dialect as register_dialect
from tablemap.dialect.sqlite import SQLiteDialect as SQLiteDialect


def _validate_dialect(name: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if name not in _DIALECT_REGISTRY:
        available = list(_DIALECT_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {name}. Available: {available}')


@lru_cache(maxsize=8)
def _get_dialect(name: str) -> Dialect:
    """Get cached dialect instance for a driver name."""
    _validate_dialect(name)
    return _DIALECT_REGISTRY[name]()


def get_dialect(name: str) -> Dialect:
    """Get the dialect instance for a driver name.
    """
    return _get_dialect(name)


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_DIALECT_REGISTRY.keys())


def is_supported_dialect(name: str) -> bool:
    """Check if a dialect is supported."""
    return name in _DIALECT_REGISTRY


def get_dialect_class(name: str) -> type[Dialect]:
    """Get the dialect class for a driver name without instantiating."""
    _validate_dialect(name)
    return _DIALECT_REGISTRY[name]
