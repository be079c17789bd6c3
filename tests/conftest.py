import itertools

import pytest

from feedback_delivery import create_app
from feedback_delivery.auth import create_access_token
from feedback_delivery.extensions import db as _db
from feedback_delivery.models import User, Restaurant, Review

PASSWORD = 'password123'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make_user(role='user', email=None, name=None, password=PASSWORD,
                   restaurant_id=None, blocked_reason=None):
        n = next(counter)
        with app.app_context():
            user = User(name=name or f'{role.title()} {n}',
                        email=email or f'{role}{n}@example.com',
                        role=role)
            user.set_password(password)
            user.restaurant_id = restaurant_id
            if blocked_reason:
                user.block(blocked_reason)
            _db.session.add(user)
            _db.session.commit()
            return user.id
    return _make_user


@pytest.fixture
def make_restaurant(app):
    def _make_restaurant(name='Test Bistro', **fields):
        with app.app_context():
            restaurant = Restaurant(name=name, **fields)
            restaurant.generate_slug()
            _db.session.add(restaurant)
            _db.session.commit()
            return restaurant.id
    return _make_restaurant


@pytest.fixture
def make_review(app):
    def _make_review(user_id, restaurant_id, rating=4, content='Tasty and quick',
                     type='inRestaurant', **fields):
        with app.app_context():
            review = Review(user_id=user_id, restaurant_id=restaurant_id, rating=rating,
                            content=content, type=type, **fields)
            _db.session.add(review)
            _db.session.flush()
            _db.session.get(Restaurant, restaurant_id).update_rating()
            _db.session.commit()
            return review.id
    return _make_review


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user_id):
        with app.app_context():
            token = create_access_token(_db.session.get(User, user_id))
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers


@pytest.fixture
def fetch(app):
    """Load a fresh copy of a row and hand back its dict form."""
    def _fetch(model, id):
        with app.app_context():
            obj = _db.session.get(model, id)
            return obj.to_dict() if obj is not None else None
    return _fetch


@pytest.fixture
def user(make_user):
    return make_user('user', email='guest@example.com')


@pytest.fixture
def restaurant(make_restaurant):
    return make_restaurant('Blue Door', category='Italian', price_range='₽₽',
                           address='1 Main St')


@pytest.fixture
def manager(make_user, restaurant):
    return make_user('manager', email='manager@example.com', restaurant_id=restaurant)


@pytest.fixture
def admin(make_user):
    return make_user('admin', email='admin@example.com')


@pytest.fixture
def head_admin(make_user):
    return make_user('head_admin', email='head@example.com')
