"""Review routes."""

import structlog
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from feedback_delivery.extensions import db
from feedback_delivery.models import Review, Restaurant, User, ErrorReport, Notification
from feedback_delivery.forms.review import ReviewForm, ReviewUpdateForm, ReportForm
from feedback_delivery.errors import APIError, form_error
from feedback_delivery.utils.pagination import paginate, page_payload

reviews_bp = Blueprint('reviews', __name__)
logger = structlog.get_logger(__name__)


def get_review_or_404(review_id):
    review = db.session.get(Review, review_id)
    if review is None or review.deleted:
        raise APIError('Review not found', 404, f'No review with id {review_id}')
    return review


def resolve_restaurant(form):
    """Restaurant named by id, or failing that by exact name."""
    if form.restaurant_id.data is not None:
        restaurant = db.session.get(Restaurant, form.restaurant_id.data)
    else:
        restaurant = Restaurant.query.filter_by(name=form.restaurant_name.data.strip()).first()
    if restaurant is None or restaurant.deleted or not restaurant.is_active:
        raise APIError('Restaurant not found', 404, 'The review must target an existing restaurant')
    return restaurant


@reviews_bp.route('/', methods=['POST'])
@login_required
def create_review():
    """Post a review and notify the restaurant's managers."""
    form = ReviewForm()
    if not form.validate():
        raise form_error(form)

    restaurant = resolve_restaurant(form)
    review = Review(
        user_id=current_user.id,
        restaurant_id=restaurant.id,
        rating=form.rating.data,
        content=form.content.data.strip(),
        type=form.type.data or 'inRestaurant',
        **form.criteria_ratings()
    )
    db.session.add(review)
    db.session.flush()
    restaurant.update_rating()

    managers = User.query.filter_by(role='manager', restaurant_id=restaurant.id).all()
    for manager in managers:
        db.session.add(Notification.new_review(manager.id, review))

    db.session.commit()

    logger.info('review_created', review_id=review.id, restaurant_id=restaurant.id,
                notified=len(managers))
    return jsonify({
        'success': True,
        'message': 'Review published',
        'review': review.to_dict()
    }), 201


@reviews_bp.route('/')
def list_reviews():
    query = Review.query.filter_by(deleted=False)

    user_id = request.args.get('user_id', type=int)
    if user_id is not None:
        query = query.filter_by(user_id=user_id)

    restaurant_id = request.args.get('restaurant_id', type=int)
    if restaurant_id is not None:
        query = query.filter_by(restaurant_id=restaurant_id)

    pagination = paginate(query.order_by(Review.created_at.desc(), Review.id.desc()))
    return jsonify(page_payload(pagination, 'reviews'))


@reviews_bp.route('/<int:review_id>')
def get_review(review_id):
    review = get_review_or_404(review_id)
    return jsonify({'success': True, 'review': review.to_dict()})


@reviews_bp.route('/<int:review_id>', methods=['PUT'])
@login_required
def update_review(review_id):
    """Edit own review."""
    review = get_review_or_404(review_id)
    if review.user_id != current_user.id:
        raise APIError('Access denied', 403, 'Only the author can edit a review')

    form = ReviewUpdateForm()
    if not form.validate():
        raise form_error(form)

    if form.rating.data is not None:
        review.rating = form.rating.data
    if form.content.raw_data and form.content.data:
        review.content = form.content.data.strip()
    if form.type.raw_data:
        review.type = form.type.data
    for name, value in form.criteria_ratings().items():
        setattr(review, name, value)

    db.session.flush()
    if review.restaurant is not None:
        review.restaurant.update_rating()
    db.session.commit()

    return jsonify({
        'success': True,
        'message': 'Review updated',
        'review': review.to_dict()
    })


@reviews_bp.route('/<int:review_id>', methods=['DELETE'])
@login_required
def delete_review(review_id):
    """Soft delete by the author or by staff."""
    review = get_review_or_404(review_id)
    if review.user_id != current_user.id and not current_user.has_role('manager'):
        raise APIError('Access denied', 403, 'You can only delete your own reviews')

    review.deleted = True
    db.session.flush()
    if review.restaurant is not None:
        review.restaurant.update_rating()
    db.session.commit()

    logger.info('review_deleted', review_id=review.id, by=current_user.id)
    return jsonify({'success': True, 'message': 'Review deleted'})


@reviews_bp.route('/<int:review_id>/report', methods=['POST'])
@login_required
def report_review(review_id):
    review = get_review_or_404(review_id)
    form = ReportForm()
    if not form.validate():
        raise form_error(form)

    report = ErrorReport(
        review_id=review.id,
        reporter_id=current_user.id,
        reason=form.reason.data.strip(),
        status='pending'
    )
    db.session.add(report)
    db.session.commit()

    logger.info('review_reported', review_id=review.id, report_id=report.id)
    return jsonify({
        'success': True,
        'message': 'Report submitted',
        'report': report.to_dict()
    }), 201
