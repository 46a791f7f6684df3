"""Unit tests for column/field naming translation."""
import pytest
from tablemap.naming import to_column_convention, to_field_convention


@pytest.mark.parametrize(('column', 'field'), [
    ('id', 'Id'),
    ('name', 'Name'),
    ('email_address', 'EmailAddress'),
    ('user_id', 'UserId'),
    ('a_b_c', 'ABC'),
    ('Already', 'Already'),
    ('', ''),
])
def test_to_field_convention(column, field):
    assert to_field_convention(column) == field


@pytest.mark.parametrize(('field', 'column'), [
    ('Id', 'id'),
    ('EmailAddress', 'email_address'),
    ('userId', 'user_id'),
    ('NotMappedToTable', 'not_mapped_to_table'),
])
def test_to_column_convention(field, column):
    assert to_column_convention(field) == column


@pytest.mark.parametrize('field', ['Id', 'Name', 'EmailAddress', 'NotMappedToTable', 'CreatedAtUtc'])
def test_round_trip(field):
    """Capitalized word concatenations survive column -> field translation"""
    assert to_field_convention(to_column_convention(field)) == field


def test_trailing_underscore_kept():
    """An underscore with nothing after it has no character to upper-case"""
    assert to_field_convention('name_') == 'Name_'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
