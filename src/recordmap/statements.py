"""
SQL statement generation for record CRUD operations.

Every statement binds its values as parameters; identifiers are quoted and
placeholders rendered by the dialect strategy.
"""
import logging
from typing import Any, NamedTuple

from recordmap.codec import encode
from recordmap.exceptions import MappingError
from recordmap.records import PRIMARY_KEY
from recordmap.strategy import DatabaseStrategy

logger = logging.getLogger(__name__)


class Statement(NamedTuple):
    """SQL text with its positional parameters."""
    sql: str
    params: tuple = ()


class StatementGenerator:
    """Build INSERT/UPDATE/DELETE/SELECT statements from field maps.

    A field map is an ordered column -> value dict, as produced by
    `RecordDescriptor.field_map`.
    """

    def __init__(self, strategy: DatabaseStrategy) -> None:
        self.strategy = strategy

    def _quote(self, identifier: str) -> str:
        return self.strategy.quote_identifier(identifier)

    def _key_value(self, table: str, fields: dict[str, Any], operation: str) -> Any:
        key = fields.get(PRIMARY_KEY)
        if key is None:
            raise MappingError(f'Cannot {operation} {table} row without a bound {PRIMARY_KEY} value')
        return encode(key)

    def insert(self, table: str, fields: dict[str, Any]) -> Statement:
        """INSERT of every non-null column except the store-assigned key.
        """
        columns = [(col, val) for col, val in fields.items()
                   if col != PRIMARY_KEY and val is not None]
        if not columns:
            raise MappingError(f'Cannot insert into {table}: no non-null fields')

        quoted_columns = ', '.join(self._quote(col) for col, _ in columns)
        placeholders = self.strategy.placeholders(len(columns))
        returning = self.strategy.returning_clause(PRIMARY_KEY)
        sql = f'INSERT INTO {self._quote(table)} ({quoted_columns}) VALUES ({placeholders}){returning}'
        return Statement(sql, tuple(encode(val) for _, val in columns))

    def update(self, table: str, fields: dict[str, Any]) -> Statement:
        """UPDATE of every column, key included, targeting the row by key.
        """
        key = self._key_value(table, fields, 'update')
        marker = self.strategy.get_placeholder_style()
        assignments = ', '.join(f'{self._quote(col)} = {marker}' for col in fields)
        sql = f'UPDATE {self._quote(table)} SET {assignments} WHERE {self._quote(PRIMARY_KEY)} = {marker}'
        params = tuple(encode(val) for val in fields.values()) + (key,)
        return Statement(sql, params)

    def delete(self, table: str, fields: dict[str, Any]) -> Statement:
        """DELETE of the row identified by the key value.
        """
        key = self._key_value(table, fields, 'delete')
        marker = self.strategy.get_placeholder_style()
        sql = f'DELETE FROM {self._quote(table)} WHERE {self._quote(PRIMARY_KEY)} = {marker}'
        return Statement(sql, (key,))

    def select_by_id(self, table: str, fields: dict[str, Any] | list[str], id: Any) -> Statement:
        """SELECT of exactly the declared columns for one key.
        """
        marker = self.strategy.get_placeholder_style()
        quoted_columns = ', '.join(self._quote(col) for col in fields)
        sql = f'SELECT {quoted_columns} FROM {self._quote(table)} WHERE {self._quote(PRIMARY_KEY)} = {marker}'
        return Statement(sql, (encode(id),))

    def select_all(self, table: str) -> Statement:
        """SELECT * of the whole table in key order.
        """
        sql = f'SELECT * FROM {self._quote(table)} ORDER BY {self._quote(PRIMARY_KEY)}'
        return Statement(sql)
