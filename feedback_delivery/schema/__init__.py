"""Idempotent schema migrations for existing databases."""

from .errors import MigrationError, DatabaseConnectionError, CONNECTION_HINTS
from .migrations import MIGRATIONS, MIGRATION_ORDER
from .runner import MigrationRunner
from .sqlsplit import split_statements

__all__ = [
    'MigrationError',
    'DatabaseConnectionError',
    'CONNECTION_HINTS',
    'MIGRATIONS',
    'MIGRATION_ORDER',
    'MigrationRunner',
    'split_statements',
]
