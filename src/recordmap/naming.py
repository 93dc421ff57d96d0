"""
Field and type name mapping.

Field identifiers become upper snake case column identifiers; Python field
types become column type keywords of the configured dialect.
"""
import re
from typing import Any

from recordmap.strategy import get_strategy

_WORD_START = re.compile(r'([a-z0-9])([A-Z])')


def to_column_name(field_name: str) -> str:
    """Convert a field identifier to an upper snake case column identifier.

    A separator is inserted before an upper-case character that starts a new
    word, i.e. follows a lower-case letter or a digit. Runs of capitals and a
    leading capital get no separator.

    >>> to_column_name('hireDate')
    'HIRE_DATE'
    >>> to_column_name('id')
    'ID'
    >>> to_column_name('ABC')
    'ABC'
    >>> to_column_name('HireRecord')
    'HIRE_RECORD'
    >>> to_column_name('hire_date')
    'HIRE_DATE'
    """
    return _WORD_START.sub(r'\1_\2', field_name).upper()


def to_sql_type(declared_type: Any, dialect: str = 'sqlite') -> str:
    """Map a declared field type to a column type keyword.

    Unknown types map to the dialect's binary-large-object keyword.

    >>> to_sql_type(str)
    'VARCHAR'
    >>> to_sql_type(complex)
    'BLOB'
    """
    return get_strategy(dialect).sql_type(declared_type)
