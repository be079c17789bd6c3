"""Sample data and the head administrator account."""

import structlog
from flask import current_app
from feedback_delivery.extensions import db
from feedback_delivery.models import User, Restaurant, Review

logger = structlog.get_logger(__name__)

SAMPLE_RESTAURANTS = [
    {
        'name': 'Sample Restaurant 1',
        'address': '123 Main St',
        'description': 'A great restaurant',
        'category': 'Italian',
        'price_range': '₽₽'
    },
    {
        'name': 'Sample Restaurant 2',
        'address': '456 Oak Ave',
        'description': 'Another great restaurant',
        'category': 'Japanese',
        'price_range': '₽₽₽'
    },
    {
        'name': 'Кафе Пушкин',
        'address': 'Тверской бульвар, 26А',
        'description': 'Русская кухня в интерьере дворянской усадьбы',
        'category': 'Russian',
        'price_range': '₽₽₽₽'
    },
]

SAMPLE_USERS = [
    {'name': 'Restaurant Manager', 'email': 'manager@example.com', 'password': 'manager123',
     'role': 'manager', 'restaurant': 'Sample Restaurant 1'},
    {'name': 'Anna Guest', 'email': 'anna@example.com', 'password': 'guest1234', 'role': 'user'},
    {'name': 'Ivan Guest', 'email': 'ivan@example.com', 'password': 'guest1234', 'role': 'user'},
]

SAMPLE_REVIEWS = [
    ('anna@example.com', 'Sample Restaurant 1', 5, 'inRestaurant', 'Excellent pasta and friendly staff.'),
    ('ivan@example.com', 'Sample Restaurant 1', 4, 'delivery', 'Arrived hot, a little late.'),
    ('anna@example.com', 'Sample Restaurant 2', 3, 'inRestaurant', 'Good rolls, noisy hall.'),
    ('ivan@example.com', 'Кафе Пушкин', 5, 'inRestaurant', 'Отличный сервис и атмосфера.'),
]


def ensure_head_admin(email=None, password=None, name='Head Administrator'):
    """Create the head administrator, or promote the existing account.

    Returns ``(user, created)``.
    """
    email = (email or current_app.config['HEAD_ADMIN_EMAIL']).strip().lower()
    user = User.query.filter_by(email=email).first()
    if user:
        user.change_role('head_admin')
        user.unblock()
        if password:
            user.set_password(password)
        db.session.commit()
        logger.info('head_admin_promoted', user_id=user.id)
        return user, False

    if not password:
        raise ValueError('A password is required to create the head administrator')

    user = User(name=name, email=email, role='head_admin')
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info('head_admin_created', user_id=user.id)
    return user, True


def seed_database():
    """Create tables and sample data; returns False if data was already there."""
    db.create_all()

    if Restaurant.query.first():
        return False

    restaurants = {}
    for data in SAMPLE_RESTAURANTS:
        restaurant = Restaurant(**data)
        restaurant.generate_slug()
        db.session.add(restaurant)
        db.session.flush()
        restaurants[restaurant.name] = restaurant

    users = {}
    for data in SAMPLE_USERS:
        user = User(name=data['name'], email=data['email'], role=data['role'])
        user.set_password(data['password'])
        if data.get('restaurant'):
            user.assign_restaurant(restaurants[data['restaurant']])
        db.session.add(user)
        users[user.email] = user
    db.session.flush()

    for email, restaurant_name, rating, review_type, content in SAMPLE_REVIEWS:
        db.session.add(Review(
            user_id=users[email].id,
            restaurant_id=restaurants[restaurant_name].id,
            rating=rating,
            type=review_type,
            content=content
        ))
    db.session.flush()

    for restaurant in restaurants.values():
        restaurant.update_rating()

    db.session.commit()
    logger.info('database_seeded', restaurants=len(restaurants), users=len(users),
                reviews=len(SAMPLE_REVIEWS))
    return True
