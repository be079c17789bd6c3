"""Idempotent schema operations.

Structural operations check the live schema before touching it and are
skipped when the change is already in place. Backfills always run and must be
written so that re-running them changes nothing.
"""

from .inspect import table_exists, column_exists, index_covers


class Operation:
    structural = True

    def is_pending(self, runner):
        raise NotImplementedError

    def apply(self, runner):
        raise NotImplementedError

    def describe(self):
        raise NotImplementedError

    def __repr__(self):
        return f'<{type(self).__name__} {self.describe()}>'


class CreateTable(Operation):
    """Create a model's table when it is missing."""

    def __init__(self, model):
        self.table = getattr(model, '__table__', model)

    def is_pending(self, runner):
        return not table_exists(runner.engine, self.table.name)

    def apply(self, runner):
        runner.create_table(self.table)

    def describe(self):
        return f'create table {self.table.name}'


class AddColumn(Operation):
    """``ALTER TABLE ... ADD COLUMN`` when the column is absent.

    ``mysql_ddl`` holds follow-up statements run only on MySQL, such as
    foreign key constraints.
    """

    def __init__(self, table, column, ddl, mysql_ddl=None):
        self.table = table
        self.column = column
        self.ddl = ddl
        if isinstance(mysql_ddl, str):
            mysql_ddl = [mysql_ddl]
        self.mysql_ddl = list(mysql_ddl or [])

    def is_pending(self, runner):
        return (table_exists(runner.engine, self.table)
                and not column_exists(runner.engine, self.table, self.column))

    def apply(self, runner):
        runner.execute(f'ALTER TABLE {self.table} ADD COLUMN {self.column} {self.ddl}')
        if runner.is_mysql:
            for statement in self.mysql_ddl:
                runner.execute(statement)

    def describe(self):
        return f'add column {self.table}.{self.column}'


class CreateIndex(Operation):
    """Create an index unless one already covers the same columns."""

    def __init__(self, table, name, columns, unique=False):
        self.table = table
        self.name = name
        self.columns = list(columns)
        self.unique = unique

    def is_pending(self, runner):
        return (table_exists(runner.engine, self.table)
                and not index_covers(runner.engine, self.table, self.columns))

    def apply(self, runner):
        kind = 'UNIQUE INDEX' if self.unique else 'INDEX'
        runner.execute(f'CREATE {kind} {self.name} ON {self.table} ({", ".join(self.columns)})')

    def describe(self):
        return f'create index {self.name} on {self.table}({", ".join(self.columns)})'


class Backfill(Operation):
    """Data fix-up; ``fn(runner)`` runs on every pass."""
    structural = False

    def __init__(self, description, fn):
        self.description = description
        self.fn = fn

    def is_pending(self, runner):
        return True

    def apply(self, runner):
        self.fn(runner)

    def describe(self):
        return self.description
