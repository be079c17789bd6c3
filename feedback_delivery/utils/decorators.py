"""Role-based access decorators."""

from functools import wraps
from flask_login import current_user
from feedback_delivery.errors import APIError
from feedback_delivery.models import role_level


def role_required(role):
    """Require at least the given role in the hierarchy user < manager < admin < head_admin."""
    required_level = role_level(role)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise APIError('Authorization required', 401, 'User is not authenticated')
            if current_user.level < required_level:
                raise APIError('Access denied', 403,
                               'You do not have the rights required for this action')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def manager_required(f):
    """Decorator to require manager role or above."""
    return role_required('manager')(f)


def admin_required(f):
    """Decorator to require admin role or above."""
    return role_required('admin')(f)
