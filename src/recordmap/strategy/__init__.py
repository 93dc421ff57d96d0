"""
Dialect strategies, looked up by SQLAlchemy driver name.

Importing this package registers the SQLite and PostgreSQL strategies.
"""
from functools import lru_cache

from recordmap.strategy.base import _STRATEGY_REGISTRY
from recordmap.strategy.base import DatabaseStrategy as DatabaseStrategy
from recordmap.strategy.base import register_strategy as register_strategy
from recordmap.strategy.postgres import PostgresStrategy as PostgresStrategy
from recordmap.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def get_available_dialects() -> list[str]:
    return list(_STRATEGY_REGISTRY)


def get_strategy_class(dialect: str) -> type[DatabaseStrategy]:
    """Strategy class registered for `dialect`.

    Raises ValueError naming the available dialects when none is registered.
    """
    try:
        return _STRATEGY_REGISTRY[dialect]
    except KeyError:
        raise ValueError(f'drivername must be one of: {get_available_dialects()}, '
                         f'got {dialect!r}') from None


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Shared strategy instance for `dialect`."""
    return get_strategy_class(dialect)()
