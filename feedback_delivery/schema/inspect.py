"""Live schema checks.

Every call opens its own connection and inspector, so nothing is cached
between migration steps.
"""

from sqlalchemy import inspect as sa_inspect


def _inspector(conn):
    return sa_inspect(conn)


def table_exists(engine, table):
    with engine.connect() as conn:
        return _inspector(conn).has_table(table)


def get_columns(engine, table):
    """Columns of a table by name; empty when the table is missing."""
    with engine.connect() as conn:
        inspector = _inspector(conn)
        if not inspector.has_table(table):
            return {}
        return {column['name']: column for column in inspector.get_columns(table)}


def get_column(engine, table, column):
    return get_columns(engine, table).get(column)


def column_exists(engine, table, column):
    return get_column(engine, table, column) is not None


def index_covers(engine, table, columns):
    """True when an index or unique constraint spans exactly these columns."""
    wanted = list(columns)
    with engine.connect() as conn:
        inspector = _inspector(conn)
        if not inspector.has_table(table):
            return False
        candidates = inspector.get_indexes(table) + inspector.get_unique_constraints(table)
    return any(list(c.get('column_names') or []) == wanted for c in candidates)
