"""Public listing of manager responses."""

from flask import Blueprint, jsonify, request
from feedback_delivery.models import ManagerResponse, Review

manager_responses_bp = Blueprint('manager_responses', __name__)


@manager_responses_bp.route('/')
def list_responses():
    query = ManagerResponse.query.join(Review, ManagerResponse.review_id == Review.id) \
        .filter(Review.deleted.is_(False))

    restaurant_id = request.args.get('restaurant_id', type=int)
    if restaurant_id is not None:
        query = query.filter(Review.restaurant_id == restaurant_id)

    review_id = request.args.get('review_id', type=int)
    if review_id is not None:
        query = query.filter(ManagerResponse.review_id == review_id)

    responses = query.order_by(ManagerResponse.created_at.desc()).all()
    return jsonify({
        'success': True,
        'responses': [r.to_dict() for r in responses]
    })
