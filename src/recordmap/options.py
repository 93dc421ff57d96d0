from dataclasses import dataclass, fields
from typing import Any

from recordmap.strategy import get_strategy_class

__all__ = ['MapperOptions', 'load_options']


@dataclass
class MapperOptions:
    """Options

    supported driver names: `sqlite`, `postgresql`

    - database: file path or `:memory:` for SQLite, database name for PostgreSQL
    - print_sql: emit every generated statement to the `recordmap.sql` logger
      before it is executed
    """
    drivername: str = 'sqlite'
    database: str = 'records.db'
    hostname: str = None
    username: str = None
    password: str = None
    port: int = 0
    timeout: int = 0
    print_sql: bool = False

    def __post_init__(self):
        get_strategy_class(self.drivername).validate_options(self)


def load_options(options: MapperOptions | dict[str, Any] | None = None,
                 **kw: Any) -> MapperOptions:
    """Build MapperOptions from an instance, a dict or keyword arguments.

    Keyword arguments override entries of a dict. Unknown keys are rejected.
    """
    if isinstance(options, MapperOptions):
        if kw:
            raise ValueError('keyword overrides cannot be combined with a MapperOptions instance')
        return options

    values = dict(options or {})
    values.update(kw)

    known = {f.name for f in fields(MapperOptions)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f'Unknown options: {unknown}')

    return MapperOptions(**values)
