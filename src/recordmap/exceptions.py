"""
Mapper-specific exception classes.
"""
import sqlite3

import psycopg
import sqlalchemy as sa


class MapperError(Exception):
    """Base class for all record mapper errors.
    """


class ConfigurationError(MapperError):
    """Record type cannot be mapped (no primary key, not constructible).
    """


class SchemaError(ConfigurationError):
    """Table schema cannot be derived from the record's fields.
    """


class MappingError(MapperError):
    """Record state does not allow the requested operation.
    """


class StoreFailure(MapperError):
    """Error raised by the mapper while talking to the store.
    """


class TypeConversionError(StoreFailure):
    """Column value could not be converted to the field's declared type.
    """


StoreError = (
    sqlite3.Error,
    psycopg.Error,
    sa.exc.SQLAlchemyError,
    StoreFailure,
    )

IntegrityError = (
    sqlite3.IntegrityError,
    psycopg.IntegrityError,
    )

OperationalError = (
    sqlite3.OperationalError,
    psycopg.OperationalError,
    )
