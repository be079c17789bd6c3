"""Administration and moderation routes."""

import structlog
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy import func, or_
from feedback_delivery.extensions import db
from feedback_delivery.models import (User, Restaurant, Review, DeletedReview,
                                      ErrorReport, Notification, ROLES, REPORT_STATUSES,
                                      role_level)
from feedback_delivery.forms.admin import (RoleForm, BlockForm, DeleteReasonForm,
                                           ResolveReportForm, CategoryRenameForm,
                                           AssignRestaurantForm)
from feedback_delivery.errors import APIError, form_error
from feedback_delivery.utils.decorators import admin_required, manager_required
from feedback_delivery.utils.pagination import paginate, page_payload

admin_bp = Blueprint('admin', __name__)
logger = structlog.get_logger(__name__)


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise APIError('User not found', 404, f'No user with id {user_id}')
    return user


def is_head_admin_account(user):
    return user.email.lower() == current_app.config['HEAD_ADMIN_EMAIL'].lower()


def check_can_manage(target):
    """The caller may only act on accounts strictly below their own level."""
    if is_head_admin_account(target) and target.id != current_user.id:
        raise APIError('Access denied', 403, 'The head administrator account is protected')
    if target.level >= current_user.level:
        raise APIError('Access denied', 403,
                       'You can only manage users with a lower role than your own')


# User management

@admin_bp.route('/users')
@login_required
@admin_required
def list_users():
    query = User.query

    role = request.args.get('role')
    if role:
        if role not in ROLES:
            raise APIError('Invalid role', 400, f'Role must be one of {", ".join(ROLES)}')
        query = query.filter_by(role=role)

    search = request.args.get('search', '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    pagination = paginate(query.order_by(User.id))
    return jsonify(page_payload(pagination, 'users'))


@admin_bp.route('/users/<int:user_id>/role', methods=['PUT'])
@login_required
@admin_required
def update_user_role(user_id):
    """Change a user's role within the caller's authority."""
    target = get_user_or_404(user_id)
    form = RoleForm()
    if not form.validate():
        raise form_error(form)

    check_can_manage(target)
    new_role = form.role.data
    if role_level(new_role) >= current_user.level:
        if new_role == 'admin':
            raise APIError('Access denied', 403, 'Only the head administrator can appoint admins')
        raise APIError('Access denied', 403,
                       'You can only assign roles lower than your own')

    old_role = target.role
    target.change_role(new_role)
    db.session.commit()

    logger.info('user_role_changed', user_id=target.id, old_role=old_role,
                new_role=new_role, by=current_user.id)
    return jsonify({
        'success': True,
        'message': f'Role changed to {new_role}',
        'user': target.to_dict()
    })


@admin_bp.route('/users/<int:user_id>/block', methods=['POST'])
@login_required
@admin_required
def block_user(user_id):
    target = get_user_or_404(user_id)
    form = BlockForm()
    if not form.validate():
        raise form_error(form, 'Block reason is required')

    check_can_manage(target)
    target.block(form.reason.data.strip())
    db.session.commit()

    logger.info('user_blocked', user_id=target.id, by=current_user.id)
    return jsonify({
        'success': True,
        'message': 'User blocked',
        'user': target.to_dict()
    })


@admin_bp.route('/users/<int:user_id>/unblock', methods=['POST'])
@login_required
@admin_required
def unblock_user(user_id):
    target = get_user_or_404(user_id)
    check_can_manage(target)
    target.unblock()
    db.session.commit()

    logger.info('user_unblocked', user_id=target.id, by=current_user.id)
    return jsonify({
        'success': True,
        'message': 'User unblocked',
        'user': target.to_dict()
    })


@admin_bp.route('/users/<int:user_id>/restaurant', methods=['PUT'])
@login_required
@admin_required
def assign_user_restaurant(user_id):
    """Attach a manager to a restaurant, or detach with null."""
    target = get_user_or_404(user_id)
    form = AssignRestaurantForm()
    if not form.validate():
        raise form_error(form)

    restaurant = None
    if form.restaurant_id.data is not None:
        restaurant = db.session.get(Restaurant, form.restaurant_id.data)
        if restaurant is None or restaurant.deleted:
            raise APIError('Restaurant not found', 404,
                           f'No restaurant with id {form.restaurant_id.data}')

    try:
        target.assign_restaurant(restaurant)
    except ValueError as e:
        raise APIError('Invalid assignment', 400, str(e))
    db.session.commit()

    return jsonify({'success': True, 'user': target.to_dict()})


# Moderation

@admin_bp.route('/reviews/<int:review_id>', methods=['DELETE'])
@login_required
@manager_required
def moderate_review(review_id):
    """Archive a review into deleted_reviews, then hide it."""
    review = db.session.get(Review, review_id)
    if review is None or review.deleted:
        raise APIError('Review not found', 404, f'No review with id {review_id}')

    form = DeleteReasonForm()
    if not form.validate():
        raise form_error(form, 'Deletion reason is required')
    reason = form.reason.data.strip()

    db.session.add(DeletedReview.from_review(review, current_user, reason))
    review.deleted = True
    db.session.flush()
    if review.restaurant is not None:
        review.restaurant.update_rating()

    if review.user_id is not None and review.user_id != current_user.id:
        db.session.add(Notification.review_removed(review, reason))

    db.session.commit()

    logger.info('review_moderated', review_id=review.id, by=current_user.id)
    return jsonify({'success': True, 'message': 'Review deleted'})


@admin_bp.route('/deleted-reviews')
@login_required
@manager_required
def list_deleted_reviews():
    pagination = paginate(DeletedReview.query.order_by(DeletedReview.deleted_at.desc()))
    return jsonify(page_payload(pagination, 'deleted_reviews'))


@admin_bp.route('/error-reports')
@login_required
@manager_required
def list_error_reports():
    query = ErrorReport.query

    status = request.args.get('status')
    if status:
        if status not in REPORT_STATUSES:
            raise APIError('Invalid status', 400,
                           f'Status must be one of {", ".join(REPORT_STATUSES)}')
        query = query.filter_by(status=status)

    reports = query.order_by(ErrorReport.created_at.desc(), ErrorReport.id.desc()).all()
    return jsonify({'success': True, 'reports': [r.to_dict() for r in reports]})


@admin_bp.route('/error-reports/<int:report_id>/resolve', methods=['POST'])
@login_required
@manager_required
def resolve_error_report(report_id):
    report = db.session.get(ErrorReport, report_id)
    if report is None:
        raise APIError('Report not found', 404, f'No error report with id {report_id}')
    if report.status != 'pending':
        raise APIError('Report already closed', 409, f'Report is {report.status}')

    form = ResolveReportForm()
    if not form.validate():
        raise form_error(form)

    report.resolve(current_user, form.status.data, form.notes.data or None)
    db.session.commit()
    return jsonify({'success': True, 'report': report.to_dict()})


# Categories

@admin_bp.route('/categories')
@login_required
@admin_required
def list_categories():
    rows = db.session.query(Restaurant.category, func.count(Restaurant.id)) \
        .filter(Restaurant.category.isnot(None), Restaurant.deleted.is_(False)) \
        .group_by(Restaurant.category) \
        .order_by(Restaurant.category) \
        .all()
    return jsonify({
        'success': True,
        'categories': [{'name': name, 'count': count} for name, count in rows]
    })


@admin_bp.route('/categories', methods=['PUT'])
@login_required
@admin_required
def rename_category():
    form = CategoryRenameForm()
    if not form.validate():
        raise form_error(form)

    old = form.old.data.strip()
    new = form.new.data.strip()
    updated = Restaurant.query.filter_by(category=old) \
        .update({Restaurant.category: new}, synchronize_session=False)
    if not updated:
        raise APIError('Category not found', 404, f'No restaurants in category {old!r}')
    db.session.commit()

    logger.info('category_renamed', old=old, new=new, restaurants=updated)
    return jsonify({
        'success': True,
        'message': f'Category renamed in {updated} restaurants',
        'updated': updated
    })
