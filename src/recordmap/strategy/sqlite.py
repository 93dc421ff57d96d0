"""
SQLite-specific strategy implementation.

SQLite has no native date column type, so date/time fields are declared with
their conventional keywords (NUMERIC affinity) and hold epoch milliseconds.
The primary key is an AUTOINCREMENT rowid alias, reported back through
`cursor.lastrowid`.
"""
import datetime
import decimal
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

import numpy as np
from recordmap.strategy.base import DatabaseStrategy, register_strategy
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from recordmap.options import MapperOptions

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ':memory:'

sqlite_types: dict[type, str] = {
    str: 'VARCHAR',
    decimal.Decimal: 'TEXT',
    bool: 'BIT',
    np.bool_: 'BIT',
    np.int8: 'TINYINT',
    np.int16: 'SMALLINT',
    np.int32: 'INTEGER',
    int: 'INTEGER',
    np.int64: 'BIGINT',
    np.float32: 'REAL',
    float: 'DOUBLE',
    np.float64: 'DOUBLE',
    bytes: 'BINARY',
    bytearray: 'BINARY',
    datetime.date: 'DATE',
    datetime.datetime: 'TIMESTAMP',
    datetime.time: 'TIME',
}


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'MapperOptions') -> str:
        """Build the SQLAlchemy connection URL for SQLite."""
        return f'sqlite:///{options.database}'

    def get_engine_kwargs(self, options: 'MapperOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite.

        An in-memory database lives only as long as its connection, so every
        round trip has to share the same one.
        """
        if options.database == MEMORY_DATABASE:
            logger.debug('Sharing one connection for in-memory SQLite database')
            return {
                'poolclass': StaticPool,
                'connect_args': {'check_same_thread': False},
            }
        return {}

    def register_type_adapters(self, connection: Any) -> None:
        """Register dialect-specific type adapters for SQLite.

        sqlite3 cannot bind Decimal; store its exact text. Decimal columns are
        declared TEXT so the digits are never narrowed to an 8-byte REAL.
        """
        sqlite3.register_adapter(decimal.Decimal, str)

    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings for SQLite.
        """
        sqlite_conn = conn
        if hasattr(conn, 'dbapi_connection'):
            sqlite_conn = conn.dbapi_connection

        self.register_type_adapters(sqlite_conn)
        self.enable_autocommit(sqlite_conn)

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = None

    def get_type_map(self) -> dict[type, str]:
        """Return mapping of Python field types to SQLite column types."""
        return sqlite_types

    @property
    def fallback_type(self) -> str:
        return 'BLOB'

    def primary_key_definition(self, column: str) -> str:
        return f'{self.quote_identifier(column)} INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def get_placeholder_style(self) -> str:
        """Return SQLite's placeholder marker.
        """
        return '?'
