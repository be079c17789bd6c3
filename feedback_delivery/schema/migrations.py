"""Named migrations and the order they run in.

New migrations are appended to MIGRATION_ORDER by hand; there is no
version table, every operation checks the live schema instead.
"""

import structlog
from sqlalchemy import Enum, String

from feedback_delivery.models import (User, Restaurant, Review, ManagerResponse,
                                      DeletedReview, ErrorReport, Notification,
                                      ROLES, CRITERIA_FIELDS, slugify_name)
from .inspect import get_column, column_exists
from .operations import CreateTable, AddColumn, CreateIndex, Backfill


# Role names found in older databases
ROLE_ALIASES = {
    'moderator': 'manager',
    'менеджер': 'manager',
    'модератор': 'manager',
    'super_admin': 'admin',
    'администратор': 'admin',
    'глав_админ': 'head_admin',
}

ROLE_COLUMN_LENGTH = 20

# Columns of the name-keyed review table that newer code no longer fills
LEGACY_REVIEW_COLUMNS = {
    'restaurant_name': 'VARCHAR(100)',
    'comment': 'TEXT',
}

logger = structlog.get_logger(__name__)


class Migration:
    def __init__(self, name, description, operations):
        self.name = name
        self.description = description
        self.operations = operations

    def __repr__(self):
        return f'<Migration {self.name}>'


def _sql_list(values):
    return ', '.join("'{}'".format(v.replace("'", "''")) for v in values)


# Roles

def widen_role_column(runner):
    """Make the MySQL role column able to hold both legacy and standard names."""
    if not runner.is_mysql:
        return
    column = get_column(runner.engine, 'users', 'role')
    if column is None:
        return
    col_type = column['type']
    if isinstance(col_type, Enum):
        current = list(col_type.enums)
        if set(current) == set(ROLES):
            return
        values = current + [v for v in list(ROLES) + list(ROLE_ALIASES) if v not in current]
        runner.execute(f"ALTER TABLE users MODIFY COLUMN role ENUM({_sql_list(values)}) "
                       f"NOT NULL DEFAULT 'user'")
    elif isinstance(col_type, String) and (col_type.length or 0) < ROLE_COLUMN_LENGTH:
        runner.execute(f"ALTER TABLE users MODIFY COLUMN role VARCHAR({ROLE_COLUMN_LENGTH}) "
                       f"NOT NULL DEFAULT 'user'")


def remap_roles(runner):
    for legacy, role in ROLE_ALIASES.items():
        runner.execute('UPDATE users SET role = :role WHERE role = :legacy',
                       {'role': role, 'legacy': legacy})
    runner.execute(f"UPDATE users SET role = 'user' "
                   f"WHERE role IS NULL OR role NOT IN ({_sql_list(ROLES)})")


def narrow_role_column(runner):
    """Restrict a MySQL ENUM role column to the standard roles."""
    if not runner.is_mysql:
        return
    column = get_column(runner.engine, 'users', 'role')
    if column is None or not isinstance(column['type'], Enum):
        return
    if list(column['type'].enums) == list(ROLES):
        return
    runner.execute(f"ALTER TABLE users MODIFY COLUMN role ENUM({_sql_list(ROLES)}) "
                   f"NOT NULL DEFAULT 'user'")


def detach_non_managers(runner):
    runner.execute("UPDATE users SET restaurant_id = NULL "
                   "WHERE role <> 'manager' AND restaurant_id IS NOT NULL")


# Restaurants

def backfill_slugs(runner):
    """Give every restaurant without a slug a unique one derived from its name."""
    rows = runner.fetch('SELECT id, name, slug FROM restaurants ORDER BY id')
    taken = {row.slug for row in rows if row.slug}
    for row in rows:
        if row.slug:
            continue
        base = slugify_name(row.name)
        slug = base
        counter = 1
        while slug in taken:
            slug = f'{base}-{counter}'
            counter += 1
        taken.add(slug)
        runner.execute("UPDATE restaurants SET slug = :slug "
                       "WHERE id = :id AND (slug IS NULL OR slug = '')",
                       {'slug': slug, 'id': row.id})


def backfill_restaurant_flags(runner):
    runner.execute('UPDATE restaurants SET is_active = 1 WHERE is_active IS NULL')
    runner.execute('UPDATE restaurants SET deleted = 0 WHERE deleted IS NULL')
    runner.execute('UPDATE restaurants SET rating = 0 WHERE rating IS NULL')


# Reviews

def backfill_review_responses(runner):
    """Copy answers kept in the old ``response`` column into ``response_text``."""
    if not column_exists(runner.engine, 'reviews', 'response'):
        return
    runner.execute('UPDATE reviews SET response_text = response '
                   'WHERE response_text IS NULL AND response IS NOT NULL')


def backfill_review_restaurants(runner):
    """Link reviews stored by restaurant name to the restaurant row."""
    if not column_exists(runner.engine, 'reviews', 'restaurant_name'):
        return
    runner.execute('UPDATE reviews SET restaurant_id = '
                   '(SELECT r.id FROM restaurants r WHERE r.name = reviews.restaurant_name) '
                   'WHERE restaurant_id IS NULL AND restaurant_name IS NOT NULL')
    orphans = runner.fetch('SELECT COUNT(*) AS n FROM reviews WHERE restaurant_id IS NULL')
    if orphans[0].n:
        logger.warning('reviews_without_restaurant', count=orphans[0].n)


def backfill_review_content(runner):
    """Copy review text kept in the old ``comment`` column into ``content``."""
    if not column_exists(runner.engine, 'reviews', 'comment'):
        return
    runner.execute('UPDATE reviews SET content = comment '
                   'WHERE content IS NULL AND comment IS NOT NULL')


def relax_legacy_review_columns(runner):
    """Let new rows leave ``restaurant_name`` and ``comment`` empty (MySQL only)."""
    if not runner.is_mysql:
        return
    for name, ddl in LEGACY_REVIEW_COLUMNS.items():
        column = get_column(runner.engine, 'reviews', name)
        if column is not None and not column['nullable']:
            runner.execute(f'ALTER TABLE reviews MODIFY COLUMN {name} {ddl} NULL')


def backfill_criteria_ratings(runner):
    for name in CRITERIA_FIELDS:
        runner.execute(f'UPDATE reviews SET {name} = 0 WHERE {name} IS NULL')


def backfill_review_types(runner):
    runner.execute("UPDATE reviews SET type = 'inRestaurant' "
                   "WHERE type IS NULL OR type NOT IN ('inRestaurant', 'delivery')")


def backfill_manager_responses(runner):
    """One manager_responses row per answered review that lacks one."""
    runner.execute(
        'INSERT INTO manager_responses (review_id, manager_id, response_text, created_at, updated_at) '
        'SELECT r.id, r.responded_by, r.response_text, r.response_date, r.response_date '
        'FROM reviews r '
        'WHERE r.response_text IS NOT NULL AND r.responded_by IS NOT NULL '
        'AND NOT EXISTS (SELECT 1 FROM manager_responses m WHERE m.review_id = r.id)'
    )


MIGRATIONS = {m.name: m for m in [
    Migration('create_core_tables', 'Create users, restaurants and reviews', [
        CreateTable(Restaurant),
        CreateTable(User),
        CreateTable(Review),
    ]),
    Migration('update_user_schema', 'Blocking columns on users', [
        AddColumn('users', 'is_blocked', 'BOOLEAN NOT NULL DEFAULT 0'),
        AddColumn('users', 'blocked_reason', 'VARCHAR(255)'),
        AddColumn('users', 'updated_at', 'DATETIME'),
    ]),
    Migration('standardize_roles', 'Map legacy role names onto the four standard roles', [
        Backfill('widen role column', widen_role_column),
        Backfill('remap legacy roles', remap_roles),
        Backfill('narrow role column', narrow_role_column),
    ]),
    Migration('add_restaurant_to_users', 'Link managers to their restaurant', [
        AddColumn('users', 'restaurant_id', 'INTEGER', mysql_ddl=(
            'ALTER TABLE users ADD CONSTRAINT users_restaurant_fk FOREIGN KEY (restaurant_id) '
            'REFERENCES restaurants (id) ON DELETE SET NULL'
        )),
        Backfill('detach restaurants from non-managers', detach_non_managers),
    ]),
    Migration('update_restaurant_schema', 'Slugs, catalogue fields and flags on restaurants', [
        AddColumn('restaurants', 'slug', 'VARCHAR(120)'),
        AddColumn('restaurants', 'category', 'VARCHAR(100)'),
        AddColumn('restaurants', 'price_range', 'VARCHAR(10)'),
        AddColumn('restaurants', 'criteria', 'JSON'),
        AddColumn('restaurants', 'rating', 'FLOAT NOT NULL DEFAULT 0'),
        AddColumn('restaurants', 'is_active', 'BOOLEAN NOT NULL DEFAULT 1'),
        AddColumn('restaurants', 'deleted', 'BOOLEAN NOT NULL DEFAULT 0'),
        AddColumn('restaurants', 'updated_at', 'DATETIME'),
        Backfill('restaurant flags', backfill_restaurant_flags),
        Backfill('restaurant slugs', backfill_slugs),
        CreateIndex('restaurants', 'restaurants_name_unique', ['name'], unique=True),
        CreateIndex('restaurants', 'restaurants_slug_idx', ['slug']),
    ]),
    Migration('fix_reviews_table', 'Restaurant link, review text, criteria, type, soft delete '
              'and manager reply columns', [
        AddColumn('reviews', 'restaurant_id', 'INTEGER', mysql_ddl=(
            'ALTER TABLE reviews ADD CONSTRAINT reviews_restaurant_fk FOREIGN KEY (restaurant_id) '
            'REFERENCES restaurants (id) ON DELETE CASCADE'
        )),
        AddColumn('reviews', 'content', 'TEXT'),
        CreateIndex('reviews', 'reviews_restaurant_idx', ['restaurant_id']),
        Backfill('restaurant ids from restaurant names', backfill_review_restaurants),
        Backfill('review text from comments', backfill_review_content),
        Backfill('relax legacy review columns', relax_legacy_review_columns),
        AddColumn('reviews', 'type', "VARCHAR(20) NOT NULL DEFAULT 'inRestaurant'"),
        AddColumn('reviews', 'deleted', 'BOOLEAN NOT NULL DEFAULT 0'),
        AddColumn('reviews', 'response_text', 'TEXT'),
        AddColumn('reviews', 'response_date', 'DATETIME'),
        AddColumn('reviews', 'responded_by', 'INTEGER', mysql_ddl=(
            'ALTER TABLE reviews ADD CONSTRAINT reviews_responded_by_fk FOREIGN KEY (responded_by) '
            'REFERENCES users (id) ON DELETE SET NULL'
        )),
        AddColumn('reviews', 'food_rating', 'INTEGER NOT NULL DEFAULT 0'),
        AddColumn('reviews', 'service_rating', 'INTEGER NOT NULL DEFAULT 0'),
        AddColumn('reviews', 'atmosphere_rating', 'INTEGER NOT NULL DEFAULT 0'),
        AddColumn('reviews', 'price_rating', 'INTEGER NOT NULL DEFAULT 0'),
        AddColumn('reviews', 'cleanliness_rating', 'INTEGER NOT NULL DEFAULT 0'),
        AddColumn('reviews', 'updated_at', 'DATETIME'),
        Backfill('criteria ratings', backfill_criteria_ratings),
        Backfill('review types', backfill_review_types),
        Backfill('copy legacy responses', backfill_review_responses),
    ]),
    Migration('setup_manager_tables', 'Manager responses', [
        CreateTable(ManagerResponse),
        Backfill('manager responses from answered reviews', backfill_manager_responses),
    ]),
    Migration('create_moderation_tables', 'Deleted review archive and error reports', [
        CreateTable(DeletedReview),
        CreateTable(ErrorReport),
    ]),
    Migration('create_notifications', 'Notifications', [
        CreateTable(Notification),
    ]),
]}

MIGRATION_ORDER = [
    'create_core_tables',
    'update_user_schema',
    'standardize_roles',
    'add_restaurant_to_users',
    'update_restaurant_schema',
    'fix_reviews_table',
    'setup_manager_tables',
    'create_moderation_tables',
    'create_notifications',
]
