"""
Record <-> row binding.

Records are dataclass instances. A column binds to the record field whose
name is the column's field-convention name; columns without such a field are
skipped and record fields without a column are never touched. Bindings are
created per call and point into the caller's record, so they are never
cached. What is cached is the per-class field description, which depends on
the class declaration only.
"""
import dataclasses
import logging
import types
import typing
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from tablemap.catalog import ColumnSpec, TableSchema
from tablemap.exceptions import InvalidRecordError

logger = logging.getLogger(__name__)

__all__ = [
    'Binding',
    'bind',
    'bound_columns',
    'build_record',
    'is_record',
    'record_type',
    'scan',
]


class Binding:
    """A column paired with one attribute of one live record.
    """

    __slots__ = ('column', 'record', 'accepts_int', 'writable')

    def __init__(self, column: ColumnSpec, record: Any, accepts_int: bool,
                 writable: bool) -> None:
        self.column = column
        self.record = record
        self.accepts_int = accepts_int
        self.writable = writable

    def __repr__(self) -> str:
        return f'Binding({self.column.column_name!r} -> {type(self.record).__name__}.{self.column.field_name})'

    @property
    def is_primary_key(self) -> bool:
        return self.column.is_primary_key

    @property
    def value(self) -> Any:
        return getattr(self.record, self.column.field_name)

    @value.setter
    def value(self, value: Any) -> None:
        setattr(self.record, self.column.field_name, value)


def _is_int_hint(hint: Any) -> bool:
    """True for ``int`` and ``int | None`` style annotations."""
    if hint is int:
        return True
    if isinstance(hint, str):
        return hint.replace(' ', '') in {'int', 'int|None', 'None|int', 'Optional[int]',
                                         'typing.Optional[int]'}
    if typing.get_origin(hint) in {typing.Union, types.UnionType}:
        return [a for a in typing.get_args(hint) if a is not type(None)] == [int]
    return False


@lru_cache(maxsize=256)
def _describe(cls: type) -> tuple[frozenset[str], frozenset[str], frozenset[str], bool]:
    """Field names, init field names, int-annotated field names, frozen flag.
    """
    record_fields = dataclasses.fields(cls)
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {f.name: f.type for f in record_fields}
    names = frozenset(f.name for f in record_fields)
    init_names = frozenset(f.name for f in record_fields if f.init)
    int_names = frozenset(f.name for f in record_fields if _is_int_hint(hints.get(f.name, f.type)))
    return names, init_names, int_names, cls.__dataclass_params__.frozen


def is_record(value: Any) -> bool:
    """Check for a dataclass instance (not a dataclass class)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def record_type(dest: Any) -> type:
    """Validate a destination record class.

    Raises
        InvalidRecordError: If `dest` is not a dataclass class
    """
    if not (isinstance(dest, type) and dataclasses.is_dataclass(dest)):
        raise InvalidRecordError(f'expected a dataclass type, got {dest!r}')
    return dest


def bound_columns(schema: TableSchema, cls: type) -> list[ColumnSpec]:
    """Columns of `schema` that `cls` declares a field for, in schema order.
    """
    names = _describe(record_type(cls))[0]
    return [col for col in schema.columns if col.field_name in names]


def bind(schema: TableSchema, record: Any, for_write: bool = False) -> list[Binding]:
    """Bind every mappable column of `schema` to an attribute of `record`.

    Args:
        schema: Table layout
        record: Dataclass instance
        for_write: True when row values will be stored into the record,
            which then must not be frozen

    Raises
        InvalidRecordError: If `record` is not a dataclass instance, or is
        frozen while `for_write` is set
    """
    if not is_record(record):
        raise InvalidRecordError(f'{type(record).__name__} is not a mappable record')
    names, _, int_names, frozen = _describe(type(record))
    if for_write and frozen:
        raise InvalidRecordError(f'{type(record).__name__} is frozen and cannot receive row values')
    return [Binding(col, record, col.field_name in int_names, not frozen)
            for col in schema.columns if col.field_name in names]


def scan(bindings: Sequence[Binding], row: Sequence[Any]) -> None:
    """Store one result row into the bound attributes, positionally.
    """
    if len(bindings) != len(row):
        raise InvalidRecordError(f'row has {len(row)} values for {len(bindings)} bindings')
    for binding, value in zip(bindings, row):
        binding.value = value


def build_record(cls: type, columns: Sequence[ColumnSpec], row: Sequence[Any]) -> Any:
    """Construct a fresh `cls` instance from one result row.

    Values for init fields go through the constructor; the rest are set
    afterwards. Required constructor fields with no mapped column make the
    construction fail.

    Raises
        InvalidRecordError: If the record cannot be constructed
    """
    _, init_names, _, _ = _describe(cls)
    kwargs: dict[str, Any] = {}
    late: list[tuple[str, Any]] = []
    for col, value in zip(columns, row):
        if col.field_name in init_names:
            kwargs[col.field_name] = value
        else:
            late.append((col.field_name, value))
    try:
        record = cls(**kwargs)
    except TypeError as err:
        logger.error(f'cannot construct {cls.__name__} from row: {err}')
        raise InvalidRecordError(f'cannot construct {cls.__name__}: {err}') from err
    for name, value in late:
        object.__setattr__(record, name, value)
    return record
