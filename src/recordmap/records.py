"""
Record registration.

A record type is a dataclass. Its ordered field descriptors are computed once
per type by `describe()` and memoised, so CRUD calls never re-inspect the
class. A descriptor knows the table name, the column of every field and which
field is the primary key.
"""
import dataclasses
import logging
import threading
import types
import typing
from typing import Any, NamedTuple

import cachetools
from recordmap.exceptions import ConfigurationError
from recordmap.naming import to_column_name

logger = logging.getLogger(__name__)

PRIMARY_KEY = 'ID'

_descriptor_cache: cachetools.LRUCache = cachetools.LRUCache(maxsize=256)
_descriptor_lock = threading.RLock()


class FieldDescriptor(NamedTuple):
    name: str
    column: str
    python_type: Any
    nullable: bool
    init: bool = True

    @property
    def is_primary_key(self) -> bool:
        return self.column == PRIMARY_KEY


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split `X | None` / `Optional[X]` into `(X, True)`."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        nullable = len(args) != len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return typing.Union[tuple(args)], nullable
    return annotation, annotation is type(None)


def _has_default(field: dataclasses.Field) -> bool:
    return (field.default is not dataclasses.MISSING
            or field.default_factory is not dataclasses.MISSING)


class RecordDescriptor:
    """Ordered field layout of one record type.
    """

    def __init__(self, record_type: type, fields: list[FieldDescriptor]) -> None:
        self.record_type = record_type
        self.name = record_type.__name__
        self.table = to_column_name(self.name)
        self.fields = tuple(fields)
        self.by_column = {f.column: f for f in self.fields}
        keys = [f for f in self.fields if f.is_primary_key]
        self.primary_key = keys[0] if keys else None

    def __repr__(self) -> str:
        return f'RecordDescriptor({self.name} -> {self.table}, {[f.column for f in self.fields]})'

    @property
    def columns(self) -> list[str]:
        return [f.column for f in self.fields]

    def field_map(self, record: Any) -> dict[str, Any]:
        """Ordered column -> current value projection of `record`.
        """
        if not isinstance(record, self.record_type):
            raise TypeError(f'Expected {self.name} instance, got {type(record).__name__}')
        return {f.column: getattr(record, f.name) for f in self.fields}

    def primary_key_value(self, record: Any) -> Any:
        if self.primary_key is None:
            return None
        return getattr(record, self.primary_key.name)

    def build(self, values: dict[str, Any]) -> Any:
        """Construct a record from field name -> value, defaults for the rest.
        """
        init_values = {}
        late_values = {}
        by_name = {f.name: f for f in self.fields}
        for name, value in values.items():
            if by_name[name].init:
                init_values[name] = value
            else:
                late_values[name] = value

        try:
            record = self.record_type(**init_values)
        except TypeError as err:
            raise ConfigurationError(f'Unable to instantiate {self.name}: {err}') from err

        for name, value in late_values.items():
            object.__setattr__(record, name, value)
        return record


def _resolve_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError) as err:
        logger.debug(f'Falling back to raw annotations for {record_type.__name__}: {err}')
        return {}


def _build_descriptor(record_type: type) -> RecordDescriptor:
    hints = _resolve_hints(record_type)
    fields = []
    seen: dict[str, str] = {}
    for field in dataclasses.fields(record_type):
        if field.init and not _has_default(field):
            raise ConfigurationError(
                f'{record_type.__name__} must be constructible without arguments; '
                f'field {field.name!r} has no default')

        column = PRIMARY_KEY if field.name.upper() == PRIMARY_KEY else to_column_name(field.name)
        if column in seen:
            raise ConfigurationError(
                f'{record_type.__name__}: fields {seen[column]!r} and {field.name!r} '
                f'both map to column {column}')
        seen[column] = field.name

        python_type, nullable = _unwrap_optional(hints.get(field.name, field.type))
        fields.append(FieldDescriptor(field.name, column, python_type, nullable, field.init))

    descriptor = RecordDescriptor(record_type, fields)
    logger.debug(f'Registered {descriptor!r}')
    return descriptor


def describe(record_type: type) -> RecordDescriptor:
    """Return the (memoised) descriptor of a record type.

    Raises ConfigurationError for types that cannot be mapped at all.
    A missing primary key is reported later by the schema builder.
    """
    if not isinstance(record_type, type) or not dataclasses.is_dataclass(record_type):
        raise ConfigurationError(f'{record_type!r} is not a dataclass type')

    with _descriptor_lock:
        descriptor = _descriptor_cache.get(record_type)
        if descriptor is None:
            descriptor = _build_descriptor(record_type)
            _descriptor_cache[record_type] = descriptor
        return descriptor


def clear_descriptor_cache() -> None:
    """Forget all registered record types."""
    with _descriptor_lock:
        _descriptor_cache.clear()
