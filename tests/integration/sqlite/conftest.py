"""
Fixtures for SQLite integration tests that need a database file.
"""
import pytest
import tablemap


@pytest.fixture
def sqlite_file_options(tmp_path):
    """Options for a file database shared by several connections"""
    return {'drivername': 'sqlite', 'database': str(tmp_path / 'tablemap_test.db')}


@pytest.fixture
def sqlite_file_conn(sqlite_file_options, schema_file):
    """File-based SQLite connection loaded with the test schema"""
    conn = tablemap.connect(sqlite_file_options)
    tablemap.exec_file(conn, schema_file)

    yield conn
    conn.close()
