"""Routes package - register all blueprints."""

from flask import Flask


def register_blueprints(app: Flask):
    """Register all blueprints with the application."""
    from .main import main_bp
    from .auth import auth_bp
    from .restaurants import restaurants_bp
    from .reviews import reviews_bp
    from .manager import manager_bp
    from .manager_responses import manager_responses_bp
    from .admin import admin_bp
    from .notifications import notifications_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(restaurants_bp, url_prefix='/api/restaurants')
    app.register_blueprint(reviews_bp, url_prefix='/api/reviews')
    app.register_blueprint(manager_bp, url_prefix='/api/manager')
    app.register_blueprint(manager_responses_bp, url_prefix='/api/manager-responses')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
