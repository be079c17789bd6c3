"""Restaurant manager routes."""

from datetime import datetime, time, timedelta

import structlog
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import func
from feedback_delivery.extensions import db
from feedback_delivery.models import (Review, Restaurant, ManagerResponse, Notification,
                                      REVIEW_TYPES, CRITERIA_FIELDS)
from feedback_delivery.forms.manager import ResponseForm, ReviewTypeForm
from feedback_delivery.errors import APIError, form_error
from feedback_delivery.utils.decorators import manager_required

manager_bp = Blueprint('manager', __name__)
logger = structlog.get_logger(__name__)

# Days shown per period; a year is shown as 12 months
CHART_PERIODS = {'week': 7, 'month': 30, 'year': 12}


def scoped_reviews():
    """Non-deleted reviews visible to the current staff member, or None if there are none.

    Managers see their own restaurant only; admins see every restaurant, or
    the one given as ?restaurant_id=.
    """
    query = Review.query.filter_by(deleted=False)
    if current_user.is_admin():
        restaurant_id = request.args.get('restaurant_id', type=int)
        if restaurant_id is not None:
            query = query.filter_by(restaurant_id=restaurant_id)
        return query
    if current_user.restaurant_id is None:
        return None
    return query.filter_by(restaurant_id=current_user.restaurant_id)


def get_managed_review(review_id):
    review = db.session.get(Review, review_id)
    if review is None or review.deleted:
        raise APIError('Review not found', 404, f'No review with id {review_id}')
    if not current_user.is_admin() and review.restaurant_id != current_user.restaurant_id:
        raise APIError('Access denied', 403, 'This review belongs to another restaurant')
    return review


@manager_bp.route('/reviews')
@login_required
@manager_required
def list_reviews():
    query = scoped_reviews()
    if query is None:
        return jsonify({'success': True, 'reviews': []})
    reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).all()
    return jsonify({'success': True, 'reviews': [r.to_dict() for r in reviews]})


@manager_bp.route('/reviews/<int:review_id>/response', methods=['POST'])
@login_required
@manager_required
def respond_to_review(review_id):
    """Create or replace the answer to a review and tell its author."""
    review = get_managed_review(review_id)
    form = ResponseForm()
    if not form.validate():
        raise form_error(form)

    text = form.text.data.strip()
    now = datetime.utcnow()

    response = review.manager_response
    if response is None:
        response = ManagerResponse(review_id=review.id, manager_id=current_user.id,
                                   response_text=text)
        db.session.add(response)
    else:
        response.manager_id = current_user.id
        response.response_text = text

    review.response_text = text
    review.response_date = now
    review.responded_by = current_user.id

    if review.user_id is not None and review.user_id != current_user.id:
        db.session.add(Notification.review_answered(review))

    db.session.commit()

    logger.info('review_answered', review_id=review.id, manager_id=current_user.id)
    return jsonify({
        'success': True,
        'message': 'Response saved',
        'review': review.to_dict(),
        'response': response.to_dict()
    })


@manager_bp.route('/reviews/<int:review_id>/type', methods=['PUT'])
@login_required
@manager_required
def update_review_type(review_id):
    review = get_managed_review(review_id)
    form = ReviewTypeForm()
    if not form.validate():
        raise form_error(form)

    review.type = form.type.data
    db.session.commit()
    return jsonify({'success': True, 'review': review.to_dict()})


@manager_bp.route('/restaurants')
@login_required
@manager_required
def managed_restaurants():
    """The manager's restaurant (all restaurants for admins) with review totals."""
    query = Restaurant.query.filter_by(deleted=False)
    if not current_user.is_admin():
        if current_user.restaurant_id is None:
            return jsonify({'success': True, 'restaurants': []})
        query = query.filter_by(id=current_user.restaurant_id)

    results = []
    for restaurant in query.order_by(Restaurant.name).all():
        count, average = db.session.query(
            func.count(Review.id), func.avg(Review.rating)
        ).filter(Review.restaurant_id == restaurant.id, Review.deleted.is_(False)).one()
        data = restaurant.to_dict()
        data['review_count'] = count
        data['average_rating'] = round(float(average), 1) if average is not None else 0
        results.append(data)

    return jsonify({'success': True, 'restaurants': results})


@manager_bp.route('/analytics/stats')
@login_required
@manager_required
def analytics_stats():
    query = scoped_reviews()
    reviews = query.all() if query is not None else []

    total = len(reviews)
    by_type = {t: 0 for t in REVIEW_TYPES}
    for review in reviews:
        key = review.type or 'inRestaurant'
        by_type[key] = by_type.get(key, 0) + 1
    responded = sum(1 for r in reviews if r.response_text is not None)

    return jsonify({
        'success': True,
        'totalReviews': total,
        'averageRating': round(sum(r.rating for r in reviews) / total, 1) if total else 0,
        'totalRestaurants': len({r.restaurant_id for r in reviews}),
        'reviewsByType': by_type,
        'activeUsers': len({r.user_id for r in reviews if r.user_id is not None}),
        'responseRate': round(responded / total * 100, 1) if total else 0
    })


def chart_buckets(period, today):
    """Bucket start dates, oldest first: days for week and month, months for year."""
    if period == 'year':
        buckets = []
        year, month = today.year, today.month
        for _ in range(CHART_PERIODS['year']):
            buckets.append(today.replace(year=year, month=month, day=1))
            month -= 1
            if month == 0:
                year, month = year - 1, 12
        return buckets[::-1]
    days = CHART_PERIODS[period]
    return [today - timedelta(days=n) for n in range(days - 1, -1, -1)]


def mean_score(values):
    return round(sum(values) / len(values), 1) if values else 0


@manager_bp.route('/analytics/charts')
@login_required
@manager_required
def analytics_charts():
    """Rating trend, review volume, score distribution and criteria averages."""
    period = request.args.get('period', 'week')
    if period not in CHART_PERIODS:
        raise APIError('Unknown period', 400, 'period must be week, month or year')

    buckets = chart_buckets(period, datetime.utcnow().date())
    query = scoped_reviews()
    if query is None:
        reviews = []
    else:
        since = datetime.combine(buckets[0], time.min)
        reviews = query.filter(Review.created_at >= since).all()

    monthly = period == 'year'
    ratings_by_bucket = {bucket: [] for bucket in buckets}
    for review in reviews:
        day = review.created_at.date()
        key = day.replace(day=1) if monthly else day
        if key in ratings_by_bucket:
            ratings_by_bucket[key].append(review.rating)
    labels = [b.strftime('%Y-%m') if monthly else b.isoformat() for b in buckets]

    distribution = {score: 0 for score in range(1, 6)}
    for review in reviews:
        distribution[review.rating] = distribution.get(review.rating, 0) + 1

    criteria = []
    for name in CRITERIA_FIELDS:
        # unrated criteria are stored as 0
        scores = [getattr(r, name) for r in reviews if getattr(r, name)]
        criteria.append({'name': name, 'score': mean_score(scores) if scores else None})

    return jsonify({
        'success': True,
        'period': period,
        'ratings': {
            'labels': labels,
            'data': [mean_score(v) for v in ratings_by_bucket.values()]
        },
        'volumeByDay': {
            'labels': labels,
            'data': [len(v) for v in ratings_by_bucket.values()]
        },
        'ratingDistribution': {
            'labels': [str(score) for score in distribution],
            'data': list(distribution.values())
        },
        'criteriaRatings': criteria
    })
