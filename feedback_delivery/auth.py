from datetime import datetime, timedelta, timezone

import structlog
from flask import current_app
from jose import JWTError, jwt

from .extensions import db, login_manager
from .errors import APIError
from .models import User

logger = structlog.get_logger(__name__)


def create_access_token(user, expires_delta=None):
    expires = expires_delta or timedelta(hours=current_app.config['JWT_EXPIRES_HOURS'])
    to_encode = {
        'sub': str(user.id),
        'role': user.role,
        'exp': datetime.now(timezone.utc) + expires,
    }
    return jwt.encode(to_encode, current_app.config['JWT_SECRET'],
                      algorithm=current_app.config['JWT_ALGORITHM'])


def decode_access_token(token):
    try:
        return jwt.decode(token, current_app.config['JWT_SECRET'],
                          algorithms=[current_app.config['JWT_ALGORITHM']])
    except JWTError:
        return None


def get_user_from_token(token):
    """User for a valid, unexpired token; None otherwise."""
    payload = decode_access_token(token)
    if not payload:
        return None
    try:
        user_id = int(payload.get('sub'))
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


@login_manager.request_loader
def load_user_from_request(request):
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    user = get_user_from_token(auth_header.split(' ', 1)[1].strip())
    if user is None:
        return None
    if user.is_blocked:
        logger.info('blocked_user_token_rejected', user_id=user.id)
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    raise APIError('Authorization required', 401, 'Missing or invalid access token')
