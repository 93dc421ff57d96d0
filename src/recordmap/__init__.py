"""
Minimal object-relational mapper for dataclass records.

A record type is a dataclass with an `id` field and defaults for every field:

    @dataclass
    class Employee:
        id: int | None = None
        firstName: str | None = None
        hireDate: datetime.date | None = None

    mapper = recordmap.connect(database='staff.db')
    mapper.create(Employee(firstName='John', hireDate=datetime.date.today()))
    mapper.find_by_id(Employee, 1)

The table (`EMPLOYEE`) is created on first use.
"""
__version__ = '0.1.0'

from typing import Any

from recordmap.codec import DecodeStrategy, decode, encode
from recordmap.connection import Store, dispose_all_engines
from recordmap.exceptions import ConfigurationError, IntegrityError
from recordmap.exceptions import MapperError, MappingError, OperationalError
from recordmap.exceptions import SchemaError, StoreError, StoreFailure
from recordmap.exceptions import TypeConversionError
from recordmap.mapper import CallState, RecordMapper
from recordmap.naming import to_column_name, to_sql_type
from recordmap.options import MapperOptions, load_options
from recordmap.records import describe
from recordmap.results import ResultSet
from recordmap.schema import SchemaBuilder, SchemaRegistry
from recordmap.statements import Statement, StatementGenerator


def connect(options: MapperOptions | dict[str, Any] | None = None,
            registry: SchemaRegistry | None = None, **kw: Any) -> RecordMapper:
    """Create a RecordMapper for a store target.

    Args:
        options: MapperOptions object, dictionary of options, or None
        registry: SchemaRegistry to share with other mappers of the same target
        **kw: Options as keyword arguments, overriding dictionary entries

    Returns
        RecordMapper bound to the configured store
    """
    store = Store(load_options(options, **kw))
    return RecordMapper(store, registry)


__all__ = [
    'connect',
    'MapperOptions',
    'RecordMapper',
    'CallState',
    'Store',
    'ResultSet',
    'Statement',
    'StatementGenerator',
    'SchemaBuilder',
    'SchemaRegistry',
    'DecodeStrategy',
    'describe',
    'encode',
    'decode',
    'to_column_name',
    'to_sql_type',
    'dispose_all_engines',
    'MapperError',
    'ConfigurationError',
    'SchemaError',
    'MappingError',
    'StoreError',
    'StoreFailure',
    'TypeConversionError',
    'IntegrityError',
    'OperationalError',
]
