from feedback_delivery.extensions import db
from feedback_delivery.models import Restaurant, User
from feedback_delivery.schema import MIGRATION_ORDER, MigrationRunner, DatabaseConnectionError


def test_schema_list(runner):
    result = runner.invoke(args=['schema', 'list'])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert [line.split(' - ')[0] for line in lines] == MIGRATION_ORDER


def test_schema_status_up_to_date(runner):
    result = runner.invoke(args=['schema', 'status'])
    assert result.exit_code == 0
    assert 'Schema is up to date.' in result.output


def test_schema_upgrade(runner):
    result = runner.invoke(args=['schema', 'upgrade'])
    assert result.exit_code == 0
    assert 'Schema upgraded' in result.output


def test_schema_upgrade_only(runner):
    result = runner.invoke(args=['schema', 'upgrade', '--only', 'standardize_roles'])
    assert result.exit_code == 0


def test_schema_upgrade_unknown_migration_fails(runner):
    result = runner.invoke(args=['schema', 'upgrade', '--only', 'nope'])
    assert result.exit_code == 1
    assert 'Unknown migration' in result.output


def test_connection_error_exits_with_hint(runner, monkeypatch):
    def refuse(self, names=None):
        raise DatabaseConnectionError("Cannot connect to the database: (2003, 'refused')")

    monkeypatch.setattr(MigrationRunner, 'run', refuse)
    result = runner.invoke(args=['schema', 'upgrade'])
    assert result.exit_code == 1
    assert 'Cannot connect' in result.output


def test_run_sql(app, runner, restaurant, tmp_path):
    path = tmp_path / 'rename.sql'
    path.write_text("UPDATE restaurants SET category = 'Fish; Chips' WHERE name = 'Blue Door';",
                    encoding='utf-8')
    result = runner.invoke(args=['schema', 'run-sql', str(path)])
    assert result.exit_code == 0
    assert 'Executed 1 statement(s)' in result.output
    with app.app_context():
        assert db.session.get(Restaurant, restaurant).category == 'Fish; Chips'


def test_run_sql_failure(runner, tmp_path):
    path = tmp_path / 'broken.sql'
    path.write_text('UPDATE no_such_table SET x = 1;', encoding='utf-8')
    result = runner.invoke(args=['schema', 'run-sql', str(path)])
    assert result.exit_code == 1


def test_run_sql_missing_file(runner, tmp_path):
    result = runner.invoke(args=['schema', 'run-sql', str(tmp_path / 'missing.sql')])
    assert result.exit_code == 1
    assert 'not found' in result.output


def test_seed_is_idempotent(app, runner):
    result = runner.invoke(args=['seed'])
    assert result.exit_code == 0
    assert 'seeded successfully' in result.output
    with app.app_context():
        assert Restaurant.query.filter_by(slug='кафе-пушкин').count() == 1
        manager = User.query.filter_by(email='manager@example.com').one()
        assert manager.restaurant is not None
        assert manager.restaurant.rating == 4.5

    result = runner.invoke(args=['seed'])
    assert 'already seeded' in result.output


def test_ensure_head_admin_creates(app, runner):
    result = runner.invoke(args=['ensure-head-admin', '--password', 'chief1234'])
    assert result.exit_code == 0
    assert 'created' in result.output
    with app.app_context():
        user = User.query.filter_by(email='head@example.com').one()
        assert user.role == 'head_admin'
        assert user.check_password('chief1234')


def test_ensure_head_admin_promotes(app, runner, make_user):
    make_user('user', email='boss@example.com', blocked_reason='Oops')
    result = runner.invoke(args=['ensure-head-admin', '--email', 'boss@example.com'])
    assert result.exit_code == 0
    assert 'promoted' in result.output
    with app.app_context():
        user = User.query.filter_by(email='boss@example.com').one()
        assert user.role == 'head_admin'
        assert user.is_blocked is False


def test_ensure_head_admin_needs_password(runner):
    result = runner.invoke(args=['ensure-head-admin'])
    assert result.exit_code == 1
