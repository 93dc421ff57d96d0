"""
Identifier quoting and placeholder helpers shared by the dialect strategies.
"""

PLACEHOLDERS = {
    'postgresql': '%s',
    'sqlite': '?',
}


def quote_identifier(identifier: str, dialect: str = 'sqlite') -> str:
    """Safely quote database identifiers.

    Parameters
        identifier: Table or column name
        dialect: Database dialect

    Returns
        Quoted identifier

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect in PLACEHOLDERS:
        return '"' + identifier.replace('"', '""') + '"'

    raise ValueError(f'Unknown dialect: {dialect}')


def make_placeholders(count: int, dialect: str = 'sqlite') -> str:
    """Return `count` comma-separated positional placeholders for the dialect.
    """
    if dialect not in PLACEHOLDERS:
        raise ValueError(f'Unknown dialect: {dialect}')
    return ', '.join([PLACEHOLDERS[dialect]] * count)
