"""Flask application factory."""

import os

import structlog
from flask import Flask
from .config import config
from .extensions import db, migrate, login_manager, bcrypt, cors
from .logging_config import setup_logging

__version__ = '1.0.0'


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    setup_logging(app.config['LOG_LEVEL'], app.config['LOG_JSON'])

    # Create the directory of a local SQLite database
    uri = app.config['SQLALCHEMY_DATABASE_URI']
    if uri.startswith('sqlite:///') and uri != 'sqlite:///:memory:':
        db_dir = os.path.dirname(uri[len('sqlite:///'):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    # Bearer token loader for Flask-Login
    from . import auth  # noqa: F401

    # Register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .cli import register_commands
    register_commands(app)

    structlog.get_logger(__name__).debug('app_created', config=config_name)
    return app
