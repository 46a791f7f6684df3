"""
Minimal record-to-table mapping over SQLite.

Records are dataclasses whose field names are the capitalized form of the
table's column names (``user_name`` -> ``UserName``). Table layouts are
discovered at runtime and cached in a ColumnCatalog.

    cn = tablemap.connect({'drivername': 'sqlite', 'database': 'app.db'})
    with tablemap.use(cn) as session:
        users = session.table('users')
        users.save(User(Name='jim'))
        bob = users.query().where('name =', 'bob').limit(1).one(User)
"""
__version__ = '0.1.0'

from tablemap.catalog import ColumnCatalog, ColumnSpec, TableSchema
from tablemap.connection import ConnectionWrapper, connect, exec_file
from tablemap.exceptions import DatabaseError, ExecutionError
from tablemap.exceptions import IntrospectionError, InvalidRecordError
from tablemap.exceptions import MultipleRowsFoundError, NotFoundError
from tablemap.mapping import TableMapping
from tablemap.naming import to_column_convention, to_field_convention
from tablemap.options import DatabaseOptions
from tablemap.query import Query
from tablemap.session import ExecResult, Session, use

__all__ = [
    'connect',
    'exec_file',
    'use',
    'ConnectionWrapper',
    'DatabaseOptions',
    'Session',
    'ExecResult',
    'TableMapping',
    'Query',
    'ColumnCatalog',
    'ColumnSpec',
    'TableSchema',
    'to_field_convention',
    'to_column_convention',
    'DatabaseError',
    'IntrospectionError',
    'InvalidRecordError',
    'NotFoundError',
    'MultipleRowsFoundError',
    'ExecutionError',
]
