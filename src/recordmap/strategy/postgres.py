"""
PostgreSQL-specific strategy implementation.

PostgreSQL rejects integers in DATE/TIMESTAMP columns, so date/time fields
are stored as BIGINT epoch milliseconds, the same shape the value codec
produces. Generated keys come back through `INSERT ... RETURNING`.
"""
import datetime
import decimal
import logging
from typing import TYPE_CHECKING, Any

import numpy as np
from recordmap.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from recordmap.options import MapperOptions

logger = logging.getLogger(__name__)

postgres_types: dict[type, str] = {
    str: 'VARCHAR',
    decimal.Decimal: 'NUMERIC',
    bool: 'BOOLEAN',
    np.bool_: 'BOOLEAN',
    np.int8: 'SMALLINT',
    np.int16: 'SMALLINT',
    np.int32: 'INTEGER',
    int: 'BIGINT',
    np.int64: 'BIGINT',
    np.float32: 'REAL',
    float: 'DOUBLE PRECISION',
    np.float64: 'DOUBLE PRECISION',
    bytes: 'BYTEA',
    bytearray: 'BYTEA',
    datetime.date: 'BIGINT',
    datetime.datetime: 'BIGINT',
    datetime.time: 'BIGINT',
}


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'MapperOptions') -> str:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query_parts = []
        if options.timeout:
            query_parts.append(f'connect_timeout={options.timeout}')

        url = (f'postgresql+psycopg://{options.username}:{options.password}'
               f'@{options.hostname}:{options.port}/{options.database}')

        if query_parts:
            url += '?' + '&'.join(query_parts)

        logger.debug(f'PostgreSQL target {options.hostname}:{options.port}/{options.database}')
        return url

    def get_engine_kwargs(self, options: 'MapperOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {}

    def register_type_adapters(self, connection: Any) -> None:
        """Register dialect-specific type adapters for PostgreSQL.

        psycopg binds Decimal, bytes and bool natively.
        """

    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings for PostgreSQL.
        """
        pg_conn = conn
        if hasattr(conn, 'dbapi_connection'):
            pg_conn = conn.dbapi_connection

        self.register_type_adapters(pg_conn)
        self.enable_autocommit(pg_conn)

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for PostgreSQL.
        """
        if not raw_conn.autocommit:
            raw_conn.autocommit = True

    def get_type_map(self) -> dict[type, str]:
        """Return mapping of Python field types to PostgreSQL column types."""
        return postgres_types

    @property
    def fallback_type(self) -> str:
        return 'BYTEA'

    def primary_key_definition(self, column: str) -> str:
        return f'{self.quote_identifier(column)} BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']

    def returning_clause(self, column: str) -> str:
        return f' RETURNING {self.quote_identifier(column)}'

    def fetch_inserted_id(self, cursor: Any) -> int | None:
        row = cursor.fetchone()
        return row[0] if row else None
