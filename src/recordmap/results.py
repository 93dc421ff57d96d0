"""
Materialised query results.

A ResultSet holds the column names from the cursor description and the
fetched rows, and gives cell access by column name or position.
"""
from collections.abc import Iterator, Sequence
from typing import Any, Self


class ResultSet:
    """Rows of one query with their column names.

    Column name lookups are case-insensitive.
    """

    def __init__(self, columns: Sequence[str], rows: Sequence[Sequence[Any]] = ()) -> None:
        self.columns = [str(col) for col in columns]
        self.rows = [tuple(row) for row in rows]
        self._positions = {}
        for position, column in enumerate(self.columns):
            self._positions.setdefault(column.upper(), position)

    @classmethod
    def from_cursor(cls, cursor: Any) -> Self:
        """Fetch all remaining rows of an executed DB-API cursor.
        """
        if cursor.description is None:
            return cls([], [])
        columns = [desc[0] for desc in cursor.description]
        return cls(columns, cursor.fetchall())

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for row in self.rows:
            yield dict(zip(self.columns, row))

    def __repr__(self) -> str:
        return f'ResultSet(columns={self.columns}, rows={len(self.rows)})'

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def position(self, column: str) -> int | None:
        """Zero-based position of a column, or None if absent."""
        return self._positions.get(column.upper())

    def value(self, row: int, key: str | int) -> Any:
        """Cell at `row` by column name or zero-based column index.

        Raises KeyError for an unknown column name.
        """
        if isinstance(key, int):
            return self.rows[row][key]
        position = self.position(key)
        if position is None:
            raise KeyError(key)
        return self.rows[row][position]
