"""Restaurant catalogue routes."""

import structlog
from flask import Blueprint, jsonify, request
from flask_login import login_required
from sqlalchemy import case, or_
from feedback_delivery.extensions import db
from feedback_delivery.models import Restaurant, slugify_name
from feedback_delivery.forms.restaurant import (RestaurantForm, RestaurantUpdateForm, SlugForm,
                                               CriteriaForm)
from feedback_delivery.errors import APIError, form_error
from feedback_delivery.utils.decorators import admin_required
from feedback_delivery.utils.pagination import paginate, page_payload

restaurants_bp = Blueprint('restaurants', __name__)
logger = structlog.get_logger(__name__)

OPTIONAL_FIELDS = ('address', 'description', 'image_url', 'category', 'price_range')


def get_restaurant_or_404(restaurant_id):
    restaurant = db.session.get(Restaurant, restaurant_id)
    if restaurant is None or restaurant.deleted:
        raise APIError('Restaurant not found', 404, f'No restaurant with id {restaurant_id}')
    return restaurant


def ensure_name_available(name, exclude_id=None):
    query = Restaurant.query.filter(Restaurant.name == name)
    if exclude_id is not None:
        query = query.filter(Restaurant.id != exclude_id)
    if query.first():
        raise APIError('Restaurant already exists', 409,
                       f'A restaurant named {name!r} already exists')


@restaurants_bp.route('/')
def list_restaurants():
    """Active restaurants with optional filters."""
    query = Restaurant.query.filter_by(deleted=False, is_active=True)

    category = request.args.get('category')
    if category:
        query = query.filter(Restaurant.category == category)

    price_range = request.args.get('price_range')
    if price_range:
        query = query.filter(Restaurant.price_range == price_range)

    search = request.args.get('search', '').strip()
    if search:
        query = query.filter(Restaurant.name.ilike(f'%{search}%'))

    pagination = paginate(query.order_by(Restaurant.rating.desc(), Restaurant.name))
    return jsonify(page_payload(pagination, 'restaurants'))


@restaurants_bp.route('/search')
def search_restaurants():
    """Match name, address or description; name matches come first."""
    q = request.args.get('q', '').strip()
    if not q:
        raise APIError('Search query is required', 400, 'Pass the query as ?q=')

    pattern = f'%{q}%'
    restaurants = Restaurant.query.filter(
        Restaurant.deleted.is_(False),
        Restaurant.is_active.is_(True),
        or_(
            Restaurant.name.ilike(pattern),
            Restaurant.address.ilike(pattern),
            Restaurant.description.ilike(pattern)
        )
    ).order_by(
        case((Restaurant.name.ilike(pattern), 0), else_=1),
        Restaurant.name
    ).limit(50).all()

    return jsonify({
        'success': True,
        'restaurants': [r.to_dict() for r in restaurants]
    })


@restaurants_bp.route('/<int:restaurant_id>')
def get_restaurant(restaurant_id):
    restaurant = get_restaurant_or_404(restaurant_id)
    return jsonify({'success': True, 'restaurant': restaurant.to_dict()})


@restaurants_bp.route('/by-slug/<slug>')
def get_restaurant_by_slug(slug):
    restaurant = Restaurant.query.filter_by(slug=slug, deleted=False).first()
    if restaurant is None:
        raise APIError('Restaurant not found', 404, f'No restaurant with slug {slug!r}')
    return jsonify({'success': True, 'restaurant': restaurant.to_dict()})


@restaurants_bp.route('/', methods=['POST'])
@login_required
@admin_required
def create_restaurant():
    form = RestaurantForm()
    if not form.validate():
        raise form_error(form)

    name = form.name.data.strip()
    ensure_name_available(name)

    restaurant = Restaurant(
        name=name,
        is_active=form.is_active.data if form.is_active.raw_data else True
    )
    for field in OPTIONAL_FIELDS:
        setattr(restaurant, field, getattr(form, field).data or None)
    restaurant.generate_slug()

    db.session.add(restaurant)
    db.session.commit()

    logger.info('restaurant_created', restaurant_id=restaurant.id, slug=restaurant.slug)
    return jsonify({
        'success': True,
        'message': 'Restaurant created',
        'restaurant': restaurant.to_dict()
    }), 201


@restaurants_bp.route('/<int:restaurant_id>', methods=['PUT'])
@login_required
@admin_required
def update_restaurant(restaurant_id):
    """Update the fields present in the request; a new name regenerates the slug."""
    restaurant = get_restaurant_or_404(restaurant_id)
    form = RestaurantUpdateForm()
    if not form.validate():
        raise form_error(form)

    if form.name.raw_data and form.name.data:
        name = form.name.data.strip()
        if name != restaurant.name:
            ensure_name_available(name, exclude_id=restaurant.id)
            restaurant.name = name
            restaurant.generate_slug()

    for field in OPTIONAL_FIELDS:
        if getattr(form, field).raw_data:
            setattr(restaurant, field, getattr(form, field).data or None)

    if form.is_active.raw_data:
        restaurant.is_active = form.is_active.data

    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Restaurant updated',
        'restaurant': restaurant.to_dict()
    })


@restaurants_bp.route('/<int:restaurant_id>/slug', methods=['PUT'])
@login_required
@admin_required
def update_slug(restaurant_id):
    restaurant = get_restaurant_or_404(restaurant_id)
    form = SlugForm()
    if not form.validate():
        raise form_error(form)

    slug = slugify_name(form.slug.data)
    taken = Restaurant.query.filter(Restaurant.slug == slug,
                                    Restaurant.id != restaurant.id).first()
    if taken:
        raise APIError('Slug already in use', 409, f'Slug {slug!r} belongs to another restaurant')

    restaurant.slug = slug
    db.session.commit()
    return jsonify({'success': True, 'restaurant': restaurant.to_dict()})


@restaurants_bp.route('/<int:restaurant_id>/criteria', methods=['PUT'])
@login_required
@admin_required
def update_criteria(restaurant_id):
    """Replace the restaurant's rating criteria and their weights."""
    restaurant = get_restaurant_or_404(restaurant_id)
    form = CriteriaForm()
    if not form.validate():
        raise form_error(form)

    restaurant.criteria = form.cleaned()
    db.session.commit()

    logger.info('restaurant_criteria_updated', restaurant_id=restaurant.id,
                criteria=len(restaurant.criteria))
    return jsonify({
        'success': True,
        'message': 'Restaurant criteria updated',
        'restaurant': restaurant.to_dict()
    })


@restaurants_bp.route('/<int:restaurant_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_restaurant(restaurant_id):
    """Soft delete: hidden from listings, reviews kept."""
    restaurant = get_restaurant_or_404(restaurant_id)
    restaurant.soft_delete()
    db.session.commit()

    logger.info('restaurant_deleted', restaurant_id=restaurant.id)
    return jsonify({'success': True, 'message': 'Restaurant deleted'})
