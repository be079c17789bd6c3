"""Notification routes."""

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from feedback_delivery.extensions import db
from feedback_delivery.models import Notification
from feedback_delivery.errors import APIError

notifications_bp = Blueprint('notifications', __name__)


def get_own_notification(notification_id):
    notification = Notification.query.filter_by(
        id=notification_id,
        user_id=current_user.id
    ).first()
    if not notification:
        raise APIError('Notification not found', 404, f'No notification with id {notification_id}')
    return notification


@notifications_bp.route('/')
@login_required
def list_notifications():
    """Latest notifications and the unread count."""
    notifications = Notification.query.filter_by(user_id=current_user.id) \
        .order_by(Notification.created_at.desc(), Notification.id.desc()) \
        .limit(20).all()
    unread = Notification.query.filter_by(user_id=current_user.id, is_read=False).count()
    return jsonify({
        'success': True,
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': unread
    })


@notifications_bp.route('/<int:notification_id>/read', methods=['PUT'])
@login_required
def mark_read(notification_id):
    notification = get_own_notification(notification_id)
    notification.is_read = True
    db.session.commit()
    return jsonify({'success': True})


@notifications_bp.route('/<int:notification_id>', methods=['DELETE'])
@login_required
def delete_notification(notification_id):
    notification = get_own_notification(notification_id)
    db.session.delete(notification)
    db.session.commit()
    return jsonify({'success': True})
