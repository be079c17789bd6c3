"""Applies migrations against a live database."""

from contextlib import contextmanager

import structlog
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from .errors import MigrationError, DatabaseConnectionError, is_benign, is_connection_error
from .migrations import MIGRATIONS, MIGRATION_ORDER
from .sqlsplit import split_statements

logger = structlog.get_logger(__name__)

SCHEMA_LOCK_NAME = 'feedback_delivery_schema'


class MigrationRunner:
    """Run named migrations in MIGRATION_ORDER.

    Every statement commits on its own; a failure leaves the statements
    before it applied. On MySQL a named lock keeps two runs from
    interleaving.
    """

    def __init__(self, engine, lock_timeout=10):
        self.engine = engine
        self.lock_timeout = lock_timeout
        self.executed = []
        self.swallowed = []
        self.applied = []
        self.skipped = []

    @property
    def is_mysql(self):
        return self.engine.dialect.name == 'mysql'

    def run(self, names=None):
        """Apply the selected migrations (all by default); returns the applied operations."""
        selected = self._select(names)
        with self._schema_lock():
            for name in selected:
                self._run_migration(MIGRATIONS[name])
        logger.info('schema_upgrade_finished', applied=len(self.applied),
                    skipped=len(self.skipped), swallowed=len(self.swallowed))
        return list(self.applied)

    def status(self, names=None):
        """Pending structural operations as (migration, description) pairs."""
        pending = []
        with self._translate_errors('schema inspection'):
            for name in self._select(names):
                for operation in MIGRATIONS[name].operations:
                    if operation.structural and operation.is_pending(self):
                        pending.append((name, operation.describe()))
        return pending

    def execute(self, sql, params=None, raw=False):
        """Execute and commit one statement; returns the affected row count.

        Duplicate column and duplicate index errors are logged and swallowed.
        ``raw`` sends the statement to the driver without parameter binding.
        """
        try:
            with self._translate_errors(sql):
                with self.engine.begin() as conn:
                    if raw:
                        result = conn.exec_driver_sql(sql, execution_options={'no_parameters': True})
                    else:
                        result = conn.execute(text(sql), params or {})
                    rowcount = result.rowcount
        except _BenignError as e:
            self.swallowed.append(sql)
            logger.warning('statement_already_applied', statement=sql, error=str(e))
            return 0
        self.executed.append(sql)
        logger.debug('statement_executed', statement=sql, rowcount=rowcount)
        return rowcount

    def fetch(self, sql, params=None):
        with self._translate_errors(sql):
            with self.engine.connect() as conn:
                return conn.execute(text(sql), params or {}).fetchall()

    def create_table(self, table):
        statement = f'CREATE TABLE {table.name}'
        try:
            with self._translate_errors(statement):
                table.create(bind=self.engine, checkfirst=True)
        except _BenignError as e:
            self.swallowed.append(statement)
            logger.warning('statement_already_applied', statement=statement, error=str(e))
            return
        self.executed.append(statement)

    def run_sql_file(self, path):
        """Execute a .sql file statement by statement; returns the number run."""
        with open(path, encoding='utf-8') as f:
            statements = split_statements(f.read())
        logger.info('sql_file_started', path=str(path), statements=len(statements))
        with self._schema_lock():
            for statement in statements:
                self.execute(statement, raw=True)
        return len(statements)

    @property
    def ddl_statements(self):
        return [s for s in self.executed
                if s.lstrip().upper().startswith(('CREATE', 'ALTER', 'DROP'))]

    def _select(self, names):
        if not names:
            return list(MIGRATION_ORDER)
        unknown = [n for n in names if n not in MIGRATIONS]
        if unknown:
            raise MigrationError(f'Unknown migration(s): {", ".join(unknown)}')
        return [n for n in MIGRATION_ORDER if n in names]

    def _run_migration(self, migration):
        log = logger.bind(migration=migration.name)
        log.info('migration_started', description=migration.description)
        for operation in migration.operations:
            with self._translate_errors(operation.describe()):
                pending = operation.is_pending(self)
            if not pending:
                self.skipped.append((migration.name, operation.describe()))
                log.info('operation_skipped', operation=operation.describe())
                continue
            operation.apply(self)
            self.applied.append((migration.name, operation.describe()))
            log.info('operation_applied', operation=operation.describe())

    @contextmanager
    def _translate_errors(self, statement):
        try:
            yield
        except DBAPIError as e:
            if is_benign(e):
                raise _BenignError(str(e.orig)) from e
            if is_connection_error(e):
                raise DatabaseConnectionError(f'Cannot connect to the database: {e.orig}',
                                              statement, e) from e
            raise MigrationError(f'Statement failed: {e.orig}', statement, e) from e

    @contextmanager
    def _schema_lock(self):
        if not self.is_mysql:
            yield
            return
        with self._translate_errors('SELECT GET_LOCK'):
            conn = self.engine.connect()
        try:
            with self._translate_errors('SELECT GET_LOCK'):
                acquired = conn.execute(text('SELECT GET_LOCK(:name, :timeout)'),
                                        {'name': SCHEMA_LOCK_NAME,
                                         'timeout': self.lock_timeout}).scalar()
            if acquired != 1:
                raise MigrationError(
                    f'Could not acquire schema lock {SCHEMA_LOCK_NAME!r} within '
                    f'{self.lock_timeout}s; another migration is running')
            logger.debug('schema_lock_acquired', name=SCHEMA_LOCK_NAME)
            try:
                yield
            finally:
                self._release_lock(conn)
        finally:
            conn.close()

    def _release_lock(self, conn):
        # A named lock ends with its session, so closing the connection frees it anyway
        try:
            conn.execute(text('SELECT RELEASE_LOCK(:name)'), {'name': SCHEMA_LOCK_NAME})
        except DBAPIError as e:
            logger.warning('schema_lock_release_failed', name=SCHEMA_LOCK_NAME, error=str(e.orig))
            return
        logger.debug('schema_lock_released', name=SCHEMA_LOCK_NAME)


class _BenignError(Exception):
    """Internal marker for errors that mean the change is already applied."""
