"""
SQL text synthesis for mapped tables.

Builders here only produce text. Values are always passed through
placeholders; identifiers are always double-quoted. ORDER BY identifiers
and LIMIT/OFFSET literals are interpolated, so callers must not route
unchecked user input into them (see ``Query``).
"""
from collections.abc import Iterable, Sequence


__all__ = [
    'quote_identifier',
    'make_placeholders',
    'build_where_clause',
    'build_order_clause',
    'build_select_sql',
    'build_insert_sql',
    'build_update_sql',
    'build_delete_sql',
    'build_count_sql',
    'build_exists_sql',
]


def quote_identifier(identifier: str, dialect: str = 'sqlite') -> str:
    """Safely quote database identifiers.

    Parameters
        identifier: Table or column name
        dialect: Database dialect

    Returns
        Quoted identifier

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect == 'sqlite':
        return '"' + identifier.replace('"', '""') + '"'

    raise ValueError(f'Unknown dialect: {dialect}')


def make_placeholders(count: int, dialect: str = 'sqlite') -> str:
    """Comma separated positional placeholders, e.g. ``?, ?, ?``.
    """
    if dialect != 'sqlite':
        raise ValueError(f'Unknown dialect: {dialect}')
    return ', '.join(['?'] * count)


def build_where_clause(conditions: Sequence[str]) -> str:
    """Join filter fragments into a WHERE clause.

    Each fragment carries its own comparison operator (``name =``) and is
    followed by exactly one placeholder.
    """
    if not conditions:
        return ''
    return ' WHERE ' + ' AND '.join(f'{cond} ?' for cond in conditions)


def build_order_clause(ascending: Iterable[str], descending: Iterable[str],
                       dialect: str = 'sqlite') -> str:
    """Build ORDER BY with all ascending keys before descending ones.
    """
    terms = [f'{quote_identifier(col, dialect)} ASC' for col in ascending]
    terms += [f'{quote_identifier(col, dialect)} DESC' for col in descending]
    if not terms:
        return ''
    return ' ORDER BY ' + ', '.join(terms)


def build_select_sql(table: str, columns: Sequence[str], where: str = '',
                     order_by: str = '', limit_clause: str = '',
                     dialect: str = 'sqlite') -> str:
    """Generate a SELECT statement over the given columns.

    Args:
        table: Table name
        columns: Column names, in output order
        where: Rendered WHERE clause (see ``build_where_clause``)
        order_by: Rendered ORDER BY clause (see ``build_order_clause``)
        limit_clause: Rendered LIMIT/OFFSET clause from the dialect
        dialect: Database dialect

    Returns
        SQL query string
    """
    quoted_table = quote_identifier(table, dialect)
    quoted_cols = ', '.join(quote_identifier(col, dialect) for col in columns)
    return f'SELECT {quoted_cols} FROM {quoted_table}{where}{order_by}{limit_clause}'


def build_insert_sql(table: str, columns: Sequence[str],
                     dialect: str = 'sqlite') -> str:
    """Generate an INSERT statement with one placeholder per column.

    With no columns the row is created from column defaults.
    """
    quoted_table = quote_identifier(table, dialect)
    if not columns:
        return f'INSERT INTO {quoted_table} DEFAULT VALUES'
    quoted_columns = ', '.join(quote_identifier(col, dialect) for col in columns)
    placeholders = make_placeholders(len(columns), dialect)
    return f'INSERT INTO {quoted_table} ({quoted_columns}) VALUES ({placeholders})'


def build_update_sql(table: str, columns: Sequence[str], key: str,
                     dialect: str = 'sqlite') -> str:
    """Generate an UPDATE of ``columns`` for the row identified by ``key``.

    Parameter order: column values, then the key value.
    """
    if not columns:
        raise ValueError('UPDATE requires at least one column')
    quoted_table = quote_identifier(table, dialect)
    assignments = ', '.join(f'{quote_identifier(col, dialect)} = ?' for col in columns)
    return f'UPDATE {quoted_table} SET {assignments} WHERE {quote_identifier(key, dialect)} = ?'


def build_delete_sql(table: str, key: str, dialect: str = 'sqlite') -> str:
    """Generate a DELETE of the row identified by ``key``.
    """
    quoted_table = quote_identifier(table, dialect)
    return f'DELETE FROM {quoted_table} WHERE {quote_identifier(key, dialect)} = ?'


def build_count_sql(table: str, where: str = '', limit_clause: str = '',
                    dialect: str = 'sqlite') -> str:
    """Generate a row count, honoring LIMIT/OFFSET through a derived table.
    """
    quoted_table = quote_identifier(table, dialect)
    if limit_clause:
        return f'SELECT COUNT(*) FROM (SELECT 1 FROM {quoted_table}{where}{limit_clause})'
    return f'SELECT COUNT(*) FROM {quoted_table}{where}'


def build_exists_sql(table: str, where: str = '', limit_clause: str = '',
                     dialect: str = 'sqlite') -> str:
    """Generate an existence check returning 0 or 1.
    """
    quoted_table = quote_identifier(table, dialect)
    return f'SELECT EXISTS(SELECT 1 FROM {quoted_table}{where}{limit_clause})'
