"""
Record mapper: CRUD operations on dataclass records.

Every public operation walks the same states:

    FRESH -> SCHEMA_ENSURED -> EXECUTED -> POPULATED | ABSENT | FAILED

Writes (create, update, delete) end in EXECUTED; reads end in POPULATED, or
in ABSENT when an id lookup matches no row. Any exception moves the call to
FAILED and propagates unchanged; nothing is retried or resumed. The schema
step is a cache lookup once the mapper's SchemaRegistry has seen the type.
"""
import enum
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from recordmap.codec import decode
from recordmap.connection import Store
from recordmap.records import RecordDescriptor, describe
from recordmap.results import ResultSet
from recordmap.schema import SchemaBuilder, SchemaRegistry
from recordmap.statements import Statement, StatementGenerator

__all__ = ['CallState', 'RecordMapper']

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CallState(enum.Enum):
    FRESH = 'fresh'
    SCHEMA_ENSURED = 'schema_ensured'
    EXECUTED = 'executed'
    POPULATED = 'populated'
    ABSENT = 'absent'
    FAILED = 'failed'


class _Call:
    """Progress of a single public operation."""

    def __init__(self, operation: str, record_type: type) -> None:
        self.operation = operation
        self.record_type = record_type
        self.label = getattr(record_type, '__name__', repr(record_type))
        self.state = CallState.FRESH

    def advance(self, state: CallState) -> None:
        logger.debug(f'{self.operation}({self.label}): {self.state.value} -> {state.value}')
        self.state = state


class RecordMapper:
    """Persist and load dataclass records through a Store.

    Each mapper owns a SchemaRegistry for its store target; pass one in to
    share it between mappers of the same target.
    """

    def __init__(self, store: Store, registry: SchemaRegistry | None = None) -> None:
        self.store = store
        self.registry = registry if registry is not None else SchemaRegistry()
        self.schema = SchemaBuilder(store.strategy)
        self.statements = StatementGenerator(store.strategy)
        self._local = threading.local()

    def __repr__(self) -> str:
        return f'RecordMapper({self.store!r}, ensured={len(self.registry)})'

    @property
    def last_state(self) -> CallState | None:
        """Terminal state of the calling thread's most recent operation."""
        call = getattr(self._local, 'call', None)
        return call.state if call else None

    @contextmanager
    def _call(self, operation: str, record_type: type) -> Iterator[_Call]:
        call = _Call(operation, record_type)
        self._local.call = call
        try:
            yield call
        except Exception:
            call.advance(CallState.FAILED)
            raise

    def _ensure(self, record_type: type) -> RecordDescriptor:
        descriptor = describe(record_type)
        if self.registry.is_ensured(record_type):
            logger.debug(f'Schema cache hit for {descriptor.name}')
            return descriptor
        self.schema.ensure_table(self.store, descriptor)
        self.registry.mark_ensured(record_type)
        return descriptor

    def _prepare(self, call: _Call) -> RecordDescriptor:
        descriptor = self._ensure(call.record_type)
        call.advance(CallState.SCHEMA_ENSURED)
        return descriptor

    def ensure_table(self, record_type: type) -> RecordDescriptor:
        """Create the record type's table unless this mapper already did.

        Raises ConfigurationError (SchemaError) for a type without an id
        field, before the store is contacted.
        """
        return self._ensure(record_type)

    def create(self, record: Any) -> None:
        """Insert a new row; the store assigns the primary key.

        The assigned key is written back to the record unless the record is
        frozen.
        """
        with self._call('create', type(record)) as call:
            descriptor = self._prepare(call)
            statement = self.statements.insert(descriptor.table, descriptor.field_map(record))
            new_id = self.store.insert(*statement)
            call.advance(CallState.EXECUTED)

            key = descriptor.primary_key
            if new_id is not None and key.init and not _is_frozen(record):
                setattr(record, key.name, decode(new_id, key.python_type))

    def update(self, record: Any) -> None:
        """Overwrite every column of the row identified by the record's key.
        """
        with self._call('update', type(record)) as call:
            descriptor = self._prepare(call)
            statement = self.statements.update(descriptor.table, descriptor.field_map(record))
            self.store.execute(*statement)
            call.advance(CallState.EXECUTED)

    def delete(self, record: Any) -> None:
        """Delete the row identified by the record's key.
        """
        with self._call('delete', type(record)) as call:
            descriptor = self._prepare(call)
            statement = self.statements.delete(descriptor.table, descriptor.field_map(record))
            self.store.execute(*statement)
            call.advance(CallState.EXECUTED)

    def find_by_id(self, record_type: type[T], id: Any) -> T | None:
        """Load one record by primary key, None when no row matches.
        """
        with self._call('find_by_id', record_type) as call:
            descriptor = self._prepare(call)
            statement = self.statements.select_by_id(descriptor.table, descriptor.columns, id)
            result = self.store.query(*statement)
            call.advance(CallState.EXECUTED)

            if not result:
                call.advance(CallState.ABSENT)
                return None

            record = self._rehydrate(descriptor, result)[0]
            call.advance(CallState.POPULATED)
            return record

    def find_all(self, record_type: type[T]) -> list[T]:
        """Load every record of a type in primary key order.
        """
        with self._call('find_all', record_type) as call:
            descriptor = self._prepare(call)
            result = self.store.query(*self.statements.select_all(descriptor.table))
            call.advance(CallState.EXECUTED)

            records = self._rehydrate(descriptor, result)
            call.advance(CallState.POPULATED)
            return records

    def query(self, record_type: type[T], source: Any, *args: Any) -> list[T]:
        """Map an arbitrary result shape onto records of `record_type`.

        `source` is raw SQL text (with `args` bound to its placeholders), a
        Statement, a ResultSet or an executed DB-API cursor. Columns are
        matched to fields by name; unmatched columns are ignored and
        unmatched fields keep their defaults.
        """
        with self._call('query', record_type) as call:
            descriptor = self._prepare(call)

            if isinstance(source, str):
                result = self.store.query(source, args)
            elif isinstance(source, Statement):
                if args:
                    raise ValueError('parameters are already bound to the Statement')
                result = self.store.query(*source)
            elif isinstance(source, ResultSet):
                result = source
            elif hasattr(source, 'description') and hasattr(source, 'fetchall'):
                result = ResultSet.from_cursor(source)
            else:
                raise TypeError(f'Cannot map records from {type(source).__name__}')
            call.advance(CallState.EXECUTED)

            records = self._rehydrate(descriptor, result)
            call.advance(CallState.POPULATED)
            return records

    def _rehydrate(self, descriptor: RecordDescriptor, result: ResultSet) -> list[Any]:
        """Build one record per result row, matching columns by name.
        """
        matched = []
        seen = set()
        for position, column in enumerate(result.columns):
            field = descriptor.by_column.get(column.upper())
            if field is None or field.name in seen:
                continue
            seen.add(field.name)
            matched.append((position, field))

        records = []
        for row in result.rows:
            values = {field.name: decode(row[position], field.python_type)
                      for position, field in matched}
            records.append(descriptor.build(values))
        return records


def _is_frozen(record: Any) -> bool:
    params = getattr(record, '__dataclass_params__', None)
    return bool(params and params.frozen)
