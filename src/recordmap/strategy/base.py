"""
Base strategy interface for dialect-specific behaviour.

Defines the abstract base class that all dialect strategies inherit from.
The mapping engine never branches on a dialect name: placeholder style,
identifier quoting, column types, the primary-key column definition and
connection setup are all answered by the strategy registered for the
configured driver.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from recordmap.sql import make_placeholders
from recordmap.sql import quote_identifier as sql_quote_identifier

if TYPE_CHECKING:
    from recordmap.options import MapperOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for dialect-specific operations.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'MapperOptions') -> str:
        """Build the database connection URL for this dialect.

        Args:
            options: MapperOptions containing connection parameters

        Returns
            Connection URL string suitable for SQLAlchemy
        """

    @abstractmethod
    def get_engine_kwargs(self, options: 'MapperOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.

        Args:
            options: MapperOptions containing connection parameters

        Returns
            Dictionary of keyword arguments for create_engine
        """

    @abstractmethod
    def register_type_adapters(self, connection: Any) -> None:
        """Register dialect-specific type adapters.

        Args:
            connection: Raw DBAPI connection to register adapters on
        """

    @abstractmethod
    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings.

        Args:
            conn: Database connection to configure with dialect-specific settings
        """

    @abstractmethod
    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode on a raw database connection.

        Args:
            raw_conn: The raw DBAPI connection (not wrapped)
        """

    @abstractmethod
    def get_type_map(self) -> dict[type, str]:
        """Return mapping of Python field types to column type keywords.
        """

    @property
    @abstractmethod
    def fallback_type(self) -> str:
        """Column type keyword used for any field type missing from the type map."""

    @abstractmethod
    def primary_key_definition(self, column: str) -> str:
        """Return the column definition of the auto-generated primary key.

        Args:
            column: Unquoted primary key column name

        Returns
            str: Full column definition, quoted name included
        """

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.

        Returns
            List of field names that must have non-None/non-zero values
        """

    @classmethod
    def validate_options(cls, options: 'MapperOptions') -> None:
        """Validate options for this dialect.

        Args:
            options: MapperOptions to validate

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    def sql_type(self, python_type: Any) -> str:
        """Return the column type keyword for a Python type, never failing.
        """
        try:
            return self.get_type_map().get(python_type, self.fallback_type)
        except TypeError:
            # unhashable annotations (e.g. typing constructs) have no mapping
            return self.fallback_type

    def quote_identifier(self, identifier: str) -> str:
        """Quote a database identifier.

        Default implementation uses standard SQL double-quote escaping.

        Args:
            identifier: Database identifier to be quoted

        Returns
            str: Properly quoted identifier according to dialect-specific rules
        """
        return sql_quote_identifier(identifier, self.dialect_name)

    def get_placeholder_style(self) -> str:
        """Return the placeholder marker for this database.

        Returns
            str: '%s' for PostgreSQL-style, '?' for SQLite-style
        """
        return '%s'

    def placeholders(self, count: int) -> str:
        """Return `count` comma-separated placeholders."""
        return make_placeholders(count, self.dialect_name)

    def returning_clause(self, column: str) -> str:
        """Suffix appended to INSERT statements to report the generated key.

        Default is empty: the key is read from `cursor.lastrowid`.
        """
        return ''

    def fetch_inserted_id(self, cursor: Any) -> int | None:
        """Return the primary key generated by the last INSERT on `cursor`.
        """
        return cursor.lastrowid
