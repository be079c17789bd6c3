import os
from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()

basedir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def database_uri():
    """Resolve the database URI from DATABASE_URL or the DB_* variables."""
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    if os.environ.get('DB_HOST'):
        return URL.create(
            'mysql+pymysql',
            username=os.environ.get('DB_USER', 'root'),
            password=os.environ.get('DB_PASSWORD', ''),
            host=os.environ['DB_HOST'],
            port=int(os.environ['DB_PORT']) if os.environ.get('DB_PORT') else None,
            database=os.environ.get('DB_NAME', 'feedback'),
            query={'charset': 'utf8mb4'},
        ).render_as_string(hide_password=False)
    return f'sqlite:///{os.path.join(basedir, "instance", "feedback.db")}'


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Bearer tokens
    JWT_SECRET = os.environ.get('JWT_SECRET') or SECRET_KEY
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_HOURS = int(os.environ.get('JWT_EXPIRES_HOURS', 24))

    # The API is token authenticated, forms only validate JSON bodies
    WTF_CSRF_ENABLED = False

    # Database - MySQL when DB_HOST is set, SQLite otherwise
    SQLALCHEMY_DATABASE_URI = database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}

    # Schema migrations
    SCHEMA_SQL_DIR = os.environ.get('SCHEMA_SQL_DIR') or os.path.join(basedir, 'sql')
    SCHEMA_LOCK_TIMEOUT = int(os.environ.get('SCHEMA_LOCK_TIMEOUT', 10))

    # Account protected from role changes and blocking
    HEAD_ADMIN_EMAIL = os.environ.get('HEAD_ADMIN_EMAIL', 'admin@example.com')

    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',')]

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    LOG_JSON = False

    # Pagination
    ITEMS_PER_PAGE = 10
    MAX_ITEMS_PER_PAGE = 100


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_JSON = True


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    BCRYPT_LOG_ROUNDS = 4
    JWT_SECRET = 'testing-secret'
    HEAD_ADMIN_EMAIL = 'head@example.com'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
