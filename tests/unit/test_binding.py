"""
Tests for record <-> row binding.
"""
import pytest
from tablemap.binding import bind, bound_columns, build_record, record_type
from tablemap.binding import scan
from tablemap.catalog import TableSchema
from tablemap.exceptions import InvalidRecordError

from tests.fixtures.mocks import users_rows
from tests.fixtures.records import Contact, FrozenUser, RequiresTitle, Unrelated
from tests.fixtures.records import User, UserName


@pytest.fixture
def users_schema():
    return TableSchema.from_rows('users', users_rows())


class TestBind:

    def test_unmapped_fields_are_skipped(self, users_schema):
        user = User(Id=7, Name='jim', NotMappedToTable='x')
        bindings = bind(users_schema, user)
        assert [b.column.column_name for b in bindings] == ['id', 'name']
        assert [b.value for b in bindings] == [7, 'jim']

    def test_primary_key_binding(self, users_schema):
        bindings = bind(users_schema, User())
        assert [b.is_primary_key for b in bindings] == [True, False]

    def test_setter_writes_through(self, users_schema):
        user = User()
        bindings = bind(users_schema, user)
        bindings[1].value = 'bob'
        assert user.Name == 'bob'

    def test_int_annotations(self, users_schema):
        assert bind(users_schema, User())[0].accepts_int
        assert bind(users_schema, Contact())[0].accepts_int
        assert not bind(users_schema, Contact())[1].accepts_int

    @pytest.mark.parametrize('value', [None, 42, 'users', {'Id': 1}, User])
    def test_non_record_rejected(self, users_schema, value):
        with pytest.raises(InvalidRecordError):
            bind(users_schema, value)

    def test_frozen_record(self, users_schema):
        bindings = bind(users_schema, FrozenUser(Id=1, Name='bob'))
        assert [b.writable for b in bindings] == [False, False]
        with pytest.raises(InvalidRecordError, match='frozen'):
            bind(users_schema, FrozenUser(), for_write=True)

    def test_record_without_columns(self, users_schema):
        assert bind(users_schema, Unrelated()) == []


class TestColumns:

    def test_bound_columns_follow_schema_order(self, users_schema):
        columns = bound_columns(users_schema, Contact)
        assert [c.column_name for c in columns] == ['id', 'name', 'email_address']

    def test_bound_columns_subset(self, users_schema):
        assert [c.column_name for c in bound_columns(users_schema, UserName)] == ['name']

    def test_record_type_rejects_instances(self):
        assert record_type(User) is User
        with pytest.raises(InvalidRecordError):
            record_type(User())
        with pytest.raises(InvalidRecordError):
            record_type(dict)


class TestScan:

    def test_scan_positional(self, users_schema):
        user = User(NotMappedToTable='keep')
        scan(bind(users_schema, user, for_write=True), (3, 'john'))
        assert user == User(Id=3, Name='john', NotMappedToTable='keep')

    def test_scan_length_mismatch(self, users_schema):
        with pytest.raises(InvalidRecordError):
            scan(bind(users_schema, User()), (1,))


class TestBuildRecord:

    def test_build_fresh_record(self, users_schema):
        columns = bound_columns(users_schema, Contact)
        contact = build_record(Contact, columns, (2, 'mike', None))
        assert contact == Contact(Id=2, Name='mike', EmailAddress=None)

    def test_build_frozen_record(self, users_schema):
        columns = bound_columns(users_schema, FrozenUser)
        assert build_record(FrozenUser, columns, (1, 'bob')) == FrozenUser(Id=1, Name='bob')

    def test_missing_required_field(self, users_schema):
        columns = bound_columns(users_schema, RequiresTitle)
        with pytest.raises(InvalidRecordError, match='RequiresTitle'):
            build_record(RequiresTitle, columns, (1,))


if __name__ == '__main__':
    __import__('pytest').main([__file__])
