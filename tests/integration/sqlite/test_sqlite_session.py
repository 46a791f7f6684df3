"""
Session statement execution and transaction handling on SQLite.
"""
import pytest
import sqlalchemy as sa
import tablemap
from tablemap.exceptions import ExecutionError

INSERT_GARRY = "INSERT INTO users (name) VALUES ('garry')"


def count_users(session, name):
    return session.query('SELECT COUNT(*) FROM users WHERE name = ?', name)[0][0]


class TestExecute:

    def test_rollback_then_commit(self, session):
        """Duplicate inserts fail inside and across transactions"""
        session.execute(INSERT_GARRY)
        with pytest.raises(ExecutionError):
            session.execute(INSERT_GARRY)
        session.rollback()

        assert count_users(session, 'garry') == 0
        session.execute(INSERT_GARRY)
        session.commit()

        with pytest.raises(ExecutionError):
            session.execute(INSERT_GARRY)
        assert count_users(session, 'garry') == 1

    def test_exec_result(self, session):
        result = session.execute('INSERT INTO users (name) VALUES (?)', 'ann')
        assert result.rowcount == 1
        assert result.lastrowid == 4

        result = session.execute('UPDATE users SET email_address = ? WHERE id > ?', 'x@y', 1)
        assert result.rowcount == 3

    def test_execution_error_keeps_driver_error(self, session):
        with pytest.raises(ExecutionError) as exc_info:
            session.execute('INSERT INTO nowhere VALUES (1)')
        assert isinstance(exc_info.value.orig, sa.exc.OperationalError)
        assert exc_info.value.__cause__ is exc_info.value.orig

    def test_statistics(self, session, sqlite_conn):
        calls = sqlite_conn.calls
        session.query('SELECT 1')
        session.execute('UPDATE users SET name = name')
        assert sqlite_conn.calls == calls + 2


class TestQuery:

    def test_query_rows(self, session):
        rows = session.query('SELECT id, name FROM users ORDER BY id')
        assert [tuple(r) for r in rows] == [(1, 'bob'), (2, 'mike'), (3, 'john')]

    def test_select_attrdicts(self, session):
        rows = session.select('SELECT id, name FROM users WHERE name = ?', 'mike')
        assert len(rows) == 1
        assert rows[0].id == 2
        assert rows[0]['name'] == 'mike'

    def test_query_error(self, session):
        with pytest.raises(ExecutionError):
            session.query('SELECT nope FROM users')

    def test_max_rows(self, session):
        rows = session.query('SELECT id FROM users ORDER BY id', max_rows=2)
        assert [r[0] for r in rows] == [1, 2]
        assert session.query('SELECT COUNT(*) FROM users')[0][0] == 3

    def test_statement_without_rows(self, session):
        with pytest.raises(ExecutionError) as exc_info:
            session.query('UPDATE users SET name = name')
        assert isinstance(exc_info.value.orig, sa.exc.ResourceClosedError)


class TestContextManager:

    def test_commits_on_exit(self, sqlite_conn, catalog):
        with tablemap.use(sqlite_conn, catalog) as s:
            s.execute(INSERT_GARRY)
            assert s.in_transaction
        assert not s.in_transaction

        with tablemap.use(sqlite_conn, catalog) as s:
            assert count_users(s, 'garry') == 1

    def test_rolls_back_on_error(self, sqlite_conn, catalog):
        with pytest.raises(ValueError):
            with tablemap.use(sqlite_conn, catalog) as s:
                s.execute(INSERT_GARRY)
                raise ValueError('abort')

        with tablemap.use(sqlite_conn, catalog) as s:
            assert count_users(s, 'garry') == 0

    def test_commit_without_transaction(self, session):
        session.commit()
        session.rollback()
        assert not session.in_transaction


class TestVisibility:

    def test_uncommitted_rows_hidden_from_other_connections(self, sqlite_file_conn, sqlite_file_options):
        writer = tablemap.use(sqlite_file_conn)
        writer.execute(INSERT_GARRY)

        with tablemap.connect(sqlite_file_options) as other:
            assert count_users(tablemap.use(other), 'garry') == 0

        writer.commit()

        with tablemap.connect(sqlite_file_options) as other:
            assert count_users(tablemap.use(other), 'garry') == 1


if __name__ == '__main__':
    __import__('pytest').main([__file__])
