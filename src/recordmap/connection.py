"""
Store access through SQLAlchemy engines.

This module provides:
1. A thread-safe registry of SQLAlchemy engines keyed by MapperOptions
2. The `Store` class, the mapper's only route to the database

Every Store round trip checks a connection out of the engine, runs one
statement on a DB-API cursor and gives the connection back before returning,
on success and on error alike. Connections run in autocommit mode, so each
statement stands alone.
"""
import atexit
import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import sqlalchemy as sa
from recordmap.options import MapperOptions
from recordmap.results import ResultSet
from recordmap.strategy import get_strategy
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

__all__ = [
    'Store',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)
sql_logger = logging.getLogger('recordmap.sql')

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def get_engine_for_options(options: MapperOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = f'{options.drivername}:{options.hostname}:{options.port}:{options.database}:{options.username}'

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        strategy = get_strategy(options.drivername)
        url = strategy.build_connection_url(options)

        engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
        engine_kwargs.update(strategy.get_engine_kwargs(options))

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class Store:
    """Relational store reachable through one engine.

    Tracks the number of round trips and the time spent in them.
    """

    def __init__(self, options: MapperOptions, engine: Engine | None = None) -> None:
        self.options = options
        self.strategy = get_strategy(options.drivername)
        self.engine = engine or get_engine_for_options(options)
        self.calls = 0
        self.time = 0.0

    def __repr__(self) -> str:
        return f'Store({self.options.drivername}:{self.options.database})'

    @property
    def dialect(self) -> str:
        return self.strategy.dialect_name

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    @contextmanager
    def connect(self) -> Iterator[Any]:
        """Check out a configured DB-API connection for the duration of the block.
        """
        with self.engine.connect() as sa_connection:
            dbapi_connection = sa_connection.connection
            self.strategy.configure_connection(dbapi_connection)
            yield dbapi_connection

    @contextmanager
    def _cursor(self, sql: str, params: tuple) -> Iterator[Any]:
        """Execute `sql` on a fresh cursor and yield it.
        """
        if self.options.print_sql:
            sql_logger.info(f'{sql} [{len(params)} parameters]')

        start = time.perf_counter()
        with self.connect() as conn:
            cursor = conn.cursor()
            try:
                if params:
                    cursor.execute(sql, params)
                else:
                    cursor.execute(sql)
                yield cursor
            finally:
                cursor.close()
                self.addcall(time.perf_counter() - start)

    def execute(self, sql: str, params: tuple = ()) -> int:
        """Execute a statement and return the affected row count.
        """
        with self._cursor(sql, tuple(params)) as cursor:
            rowcount = cursor.rowcount
        logger.debug(f'Executed statement with {len(params)} parameters, {rowcount} rows affected')
        return rowcount

    def insert(self, sql: str, params: tuple = ()) -> int | None:
        """Execute an INSERT and return the primary key the store assigned.
        """
        with self._cursor(sql, tuple(params)) as cursor:
            new_id = self.strategy.fetch_inserted_id(cursor)
        logger.debug(f'Inserted row {new_id}')
        return new_id

    def query(self, sql: str, params: tuple = ()) -> ResultSet:
        """Execute a query and materialise its rows.
        """
        with self._cursor(sql, tuple(params)) as cursor:
            result = ResultSet.from_cursor(cursor)
        logger.debug(f'Query returned {len(result)} rows')
        return result
