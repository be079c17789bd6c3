"""Classification of database errors raised while migrating."""

import re

# MySQL server error codes
ER_DUP_FIELDNAME = 1060
ER_DUP_KEYNAME = 1061
BENIGN_ERROR_CODES = {ER_DUP_FIELDNAME, ER_DUP_KEYNAME}

# Access denied, unknown database, can't connect, unknown host, server gone, lost connection
CONNECTION_ERROR_CODES = {1045, 1049, 2003, 2005, 2006, 2013}

SQLITE_BENIGN_PATTERNS = (
    re.compile(r'duplicate column name', re.IGNORECASE),
    re.compile(r'index \S+ already exists', re.IGNORECASE),
)

CONNECTION_HINTS = (
    'Check that the MySQL server is running and reachable at DB_HOST',
    'Check the DB_USER and DB_PASSWORD credentials',
    'Check that the database named by DB_NAME exists',
)


class MigrationError(Exception):
    """A migration statement failed; the run stops here."""

    def __init__(self, message, statement=None, original=None):
        super().__init__(message)
        self.statement = statement
        self.original = original


class DatabaseConnectionError(MigrationError):
    """The database could not be reached or refused the credentials."""


def error_code(exc):
    """Server error number of a DB-API error (wrapped or not), if it has one."""
    orig = getattr(exc, 'orig', None) or exc
    args = getattr(orig, 'args', ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def error_message(exc):
    orig = getattr(exc, 'orig', None) or exc
    return str(orig)


def is_benign(exc):
    """Duplicate column or duplicate index: the change is already in place."""
    if error_code(exc) in BENIGN_ERROR_CODES:
        return True
    message = error_message(exc)
    return any(pattern.search(message) for pattern in SQLITE_BENIGN_PATTERNS)


def is_connection_error(exc):
    return error_code(exc) in CONNECTION_ERROR_CODES
