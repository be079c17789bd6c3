"""Authentication routes."""

import structlog
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from feedback_delivery.extensions import db
from feedback_delivery.models import User
from feedback_delivery.forms.auth import RegistrationForm, LoginForm
from feedback_delivery.auth import create_access_token, get_user_from_token
from feedback_delivery.errors import APIError, form_error

auth_bp = Blueprint('auth', __name__)
logger = structlog.get_logger(__name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and return it with an access token."""
    form = RegistrationForm()
    if not form.validate():
        raise form_error(form)

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        raise APIError('Email already registered', 409,
                       'An account with this email already exists')

    user = User(name=form.name.data.strip(), email=email, role='user')
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()

    logger.info('user_registered', user_id=user.id)
    return jsonify({
        'success': True,
        'message': 'Registration successful',
        'user': user.to_dict(),
        'token': create_access_token(user)
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate():
        raise form_error(form)

    email = form.email.data.strip().lower()
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(form.password.data):
        logger.info('login_failed', email=email)
        raise APIError('Invalid email or password', 401, 'Check your credentials and try again')

    if user.is_blocked:
        raise APIError('Account blocked', 403, 'This account has been blocked by an administrator',
                       blocked=True, blocked_reason=user.blocked_reason)

    logger.info('user_logged_in', user_id=user.id)
    return jsonify({
        'success': True,
        'message': 'Login successful',
        'user': user.to_dict(),
        'token': create_access_token(user)
    })


@auth_bp.route('/validate-token', methods=['POST'])
def validate_token():
    """Report whether a token belongs to an active account."""
    data = request.get_json(silent=True) or {}
    token = data.get('token')
    if not token:
        auth_header = request.headers.get('Authorization', '')
        if auth_header.startswith('Bearer '):
            token = auth_header.split(' ', 1)[1].strip()
    if not token:
        raise APIError('Token is required', 400, 'Pass the token in the body or Authorization header')

    user = get_user_from_token(token)
    if user is None or user.is_blocked:
        return jsonify({'success': True, 'valid': False})
    return jsonify({'success': True, 'valid': True, 'user': user.to_dict()})


@auth_bp.route('/profile')
@login_required
def profile():
    return jsonify({'success': True, 'user': current_user.to_dict()})
