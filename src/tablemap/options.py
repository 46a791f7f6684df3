from dataclasses import dataclass

from tablemap.dialect import get_available_dialects, get_dialect_class
from tablemap.dialect import is_supported_dialect

from libb import ConfigOptions

__all__ = ['DatabaseOptions']


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `sqlite`

    Connection pooling options:
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)

    Catalog options:
    - catalog_maxsize: Maximum number of table layouts kept by a
      ColumnCatalog created for a session; None keeps every layout until
      it is invalidated (default: None)
    """
    drivername: str = 'sqlite'
    database: str = None
    timeout: int = 0
    # Connection pooling parameters
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30
    # Column catalog
    catalog_maxsize: int | None = None

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ValueError(f'drivername must be one of: {available}')
        if self.catalog_maxsize is not None and self.catalog_maxsize < 1:
            raise ValueError('catalog_maxsize must be positive')
        dialect_cls = get_dialect_class(self.drivername)
        dialect_cls.validate_options(self)
