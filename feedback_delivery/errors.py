"""API error type and the JSON error handlers."""

from datetime import datetime, timezone

import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db

logger = structlog.get_logger(__name__)


class APIError(Exception):
    """Error raised from views and services, rendered as a JSON response."""

    def __init__(self, message, status_code=400, details=None, **extra):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.extra = extra


def error_response(message, status_code, details=None, **extra):
    """Build the standard error payload."""
    payload = {
        'success': False,
        'message': message,
        'details': details if details is not None else 'No additional details available',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }
    payload.update(extra)
    return jsonify(payload), status_code


def form_error(form, message='Invalid request data'):
    """APIError carrying the field errors of a failed form."""
    return APIError(message, 400, details=form.errors)


def register_error_handlers(app):
    """Register JSON error handlers on the application."""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error('api_error', message=error.message, status=error.status_code)
        return error_response(error.message, error.status_code, error.details, **error.extra)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return error_response(error.name, error.code, error.description)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('unhandled_error', error=str(error))
        return error_response('Internal server error', 500,
                              'An unexpected error occurred on the server')
