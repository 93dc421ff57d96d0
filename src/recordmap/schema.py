"""
Table creation for record types.

`SchemaBuilder` turns a record descriptor into an idempotent
`CREATE TABLE IF NOT EXISTS` statement. `SchemaRegistry` remembers which
record types have already been ensured so a mapper issues that statement
once per type and process.
"""
import logging
import threading
from typing import TYPE_CHECKING, Any

from recordmap.exceptions import SchemaError
from recordmap.records import PRIMARY_KEY, RecordDescriptor
from recordmap.strategy import DatabaseStrategy

if TYPE_CHECKING:
    from recordmap.connection import Store

logger = logging.getLogger(__name__)


class SchemaBuilder:
    """Build and run table DDL for record descriptors.
    """

    def __init__(self, strategy: DatabaseStrategy) -> None:
        self.strategy = strategy

    def table_schema(self, descriptor: RecordDescriptor) -> dict[str, str]:
        """Column name -> SQL type keyword, primary key first.

        Raises SchemaError when the record has no primary key field.
        """
        if descriptor.primary_key is None:
            raise SchemaError(
                f'{descriptor.name} must declare an id field that uniquely identifies it')

        schema = {PRIMARY_KEY: 'INTEGER'}
        for field in descriptor.fields:
            if field.is_primary_key:
                continue
            schema[field.column] = self.strategy.sql_type(field.python_type)
        return schema

    def create_table_sql(self, descriptor: RecordDescriptor) -> str:
        """Return the `CREATE TABLE IF NOT EXISTS` statement for a record.
        """
        schema = self.table_schema(descriptor)
        quote = self.strategy.quote_identifier
        definitions = [self.strategy.primary_key_definition(PRIMARY_KEY)]
        definitions.extend(f'{quote(column)} {sql_type} NULL'
                           for column, sql_type in schema.items()
                           if column != PRIMARY_KEY)
        body = ',\n'.join(definitions)
        return f'CREATE TABLE IF NOT EXISTS {quote(descriptor.table)}(\n{body}\n)'

    def ensure_table(self, store: 'Store', descriptor: RecordDescriptor) -> None:
        """Create the table of `descriptor` unless it exists.

        The statement is built, and therefore validated, before the store is
        contacted.
        """
        sql = self.create_table_sql(descriptor)
        store.execute(sql)
        logger.debug(f'Ensured table {descriptor.table} for {descriptor.name}')


class SchemaRegistry:
    """Record types whose tables have been ensured.

    Append-only for the life of the process. Two threads may both see a type
    as not ensured and both run the (idempotent) DDL; `mark_ensured` makes
    sure only one of them records it.
    """

    def __init__(self) -> None:
        self._ensured: set[Any] = set()
        self._lock = threading.Lock()

    def __contains__(self, key: Any) -> bool:
        return self.is_ensured(key)

    def __len__(self) -> int:
        return len(self._ensured)

    def is_ensured(self, key: Any) -> bool:
        return key in self._ensured

    def mark_ensured(self, key: Any) -> bool:
        """Record `key` as ensured; True if this call was the first to do so.
        """
        with self._lock:
            if key in self._ensured:
                return False
            self._ensured.add(key)
            return True

    def clear(self) -> None:
        with self._lock:
            self._ensured.clear()
