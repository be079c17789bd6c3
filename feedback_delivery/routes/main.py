"""Service index route."""

from flask import Blueprint, jsonify
from feedback_delivery import __version__

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({
        'name': 'Feedback Delivery API',
        'version': __version__,
        'status': 'running'
    })
