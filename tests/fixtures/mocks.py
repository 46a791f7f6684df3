"""
Mock connections for tests that must not touch a database.

Usage:
    def test_catalog(mock_connection):
        mock_connection.dialect.describe_table.return_value = [...]
"""
import pytest
from tablemap.dialect import ColumnRow, SQLiteDialect


def users_rows():
    """pragma_table_info rows of the users table in schema_test.sql"""
    return [
        ColumnRow(0, 'id', 'INTEGER', False, None, 1),
        ColumnRow(1, 'name', 'TEXT', True, None, 0),
        ColumnRow(2, 'email_address', 'TEXT', False, None, 0),
    ]


@pytest.fixture
def mock_connection(mocker):
    """Connection stand-in whose dialect introspection is a mock.

    `limit_clause` keeps the real SQLite rendering.
    """
    conn = mocker.Mock()
    conn.dialect.describe_table.return_value = users_rows()
    conn.dialect.limit_clause.side_effect = SQLiteDialect().limit_clause
    conn.options.catalog_maxsize = None
    return conn
