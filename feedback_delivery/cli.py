"""Flask CLI commands: schema migrations, seeding and the head admin."""

import os
import sys

import click
import structlog
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from .extensions import db
from .schema import (MigrationRunner, MigrationError, DatabaseConnectionError,
                     CONNECTION_HINTS, MIGRATIONS, MIGRATION_ORDER)
from .seed import seed_database, ensure_head_admin

logger = structlog.get_logger(__name__)

schema_cli = AppGroup('schema', help='Inspect and upgrade the database schema.')


def make_runner():
    return MigrationRunner(db.engine, lock_timeout=current_app.config['SCHEMA_LOCK_TIMEOUT'])


def fail(error):
    """Log a migration failure and exit with status 1."""
    if isinstance(error, DatabaseConnectionError):
        logger.error('database_connection_failed', error=str(error))
        for hint in CONNECTION_HINTS:
            logger.error('connection_hint', hint=hint)
    else:
        logger.error('migration_failed', error=str(error), statement=error.statement,
                     exc_info=error)
    click.echo(f'Error: {error}', err=True)
    sys.exit(1)


@schema_cli.command('upgrade')
@click.option('--only', 'names', multiple=True, metavar='NAME',
              help='Run only the named migration (repeatable).')
def upgrade(names):
    """Bring the schema up to date."""
    runner = make_runner()
    try:
        applied = runner.run(names)
    except MigrationError as e:
        fail(e)
    click.echo(f'Schema upgraded: {len(applied)} operation(s) applied, '
               f'{len(runner.skipped)} already in place.')


@schema_cli.command('status')
def status():
    """List operations that an upgrade would apply."""
    try:
        pending = make_runner().status()
    except MigrationError as e:
        fail(e)
    if not pending:
        click.echo('Schema is up to date.')
        return
    for name, description in pending:
        click.echo(f'{name}: {description}')


@schema_cli.command('list')
def list_migrations():
    """Print the migrations in the order they run."""
    for name in MIGRATION_ORDER:
        click.echo(f'{name} - {MIGRATIONS[name].description}')


@schema_cli.command('run-sql')
@click.argument('path')
def run_sql(path):
    """Execute a SQL file statement by statement."""
    if not os.path.isabs(path) and not os.path.exists(path):
        path = os.path.join(current_app.config['SCHEMA_SQL_DIR'], path)
    if not os.path.isfile(path):
        click.echo(f'Error: SQL file not found: {path}', err=True)
        sys.exit(1)
    try:
        count = make_runner().run_sql_file(path)
    except MigrationError as e:
        fail(e)
    click.echo(f'Executed {count} statement(s) from {path}.')


@click.command('seed')
@with_appcontext
def seed():
    """Create tables and sample data."""
    if seed_database():
        click.echo('Database seeded successfully!')
    else:
        click.echo('Database already seeded!')


@click.command('ensure-head-admin')
@click.option('--email', default=None, help='Defaults to HEAD_ADMIN_EMAIL.')
@click.option('--password', default=None)
@click.option('--name', default='Head Administrator', show_default=True)
@with_appcontext
def ensure_head_admin_command(email, password, name):
    """Create the head administrator or promote the existing account."""
    try:
        user, created = ensure_head_admin(email, password, name)
    except ValueError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    action = 'created' if created else 'promoted'
    click.echo(f'Head administrator {user.email} {action}.')


def register_commands(app):
    app.cli.add_command(schema_cli)
    app.cli.add_command(seed)
    app.cli.add_command(ensure_head_admin_command)
