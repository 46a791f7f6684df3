"""
Column/field naming convention translation.

Columns use underscore separated lowercase words (``user_name``), record
fields use capitalized word concatenation (``UserName``).
"""
import re

_UNDERSCORE_RE = re.compile(r'_.')
_UPPER_RE = re.compile(r'[A-Z]')


def to_field_convention(column_name: str) -> str:
    """Translate a column name into its record field name.

    >>> to_field_convention('user_name')
    'UserName'
    >>> to_field_convention('id')
    'Id'
    """
    if not column_name:
        return ''
    name = _UNDERSCORE_RE.sub(lambda m: m.group(0)[1:].upper(), column_name)
    return name[:1].upper() + name[1:]


def to_column_convention(field_name: str) -> str:
    """Translate a record field name into its column name.

    >>> to_column_convention('UserName')
    'user_name'
    """
    name = _UPPER_RE.sub(lambda m: '_' + m.group(0).lower(), field_name)
    return name.lstrip('_')
