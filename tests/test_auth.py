from datetime import timedelta

from feedback_delivery.auth import create_access_token
from feedback_delivery.extensions import db
from feedback_delivery.models import User

from conftest import PASSWORD


def register(client, **overrides):
    payload = {'name': 'Anna Guest', 'email': 'anna@example.com', 'password': 'secret123'}
    payload.update(overrides)
    return client.post('/api/auth/register', json=payload)


def test_register_returns_user_and_token(client):
    response = register(client, email='Anna@Example.com')
    assert response.status_code == 201
    data = response.get_json()
    assert data['user']['email'] == 'anna@example.com'
    assert data['user']['role'] == 'user'
    assert data['token']


def test_register_accepts_cyrillic_name(client):
    response = register(client, name='Анна Петрова')
    assert response.status_code == 201


def test_register_existing_email_conflicts(client):
    register(client)
    response = register(client, name='Someone Else')
    assert response.status_code == 409
    assert response.get_json()['success'] is False


def test_register_validation_errors(client):
    assert register(client, name='A').status_code == 400
    assert register(client, name='Bad<script>').status_code == 400
    assert register(client, email='not-an-email').status_code == 400
    assert register(client, password='short1').status_code == 400
    assert register(client, password='lettersonly').status_code == 400
    assert register(client, name=123).status_code == 400
    assert register(client, password=12345678).status_code == 400

    data = register(client, password='12345678').get_json()
    assert 'password' in data['details']
    assert 'timestamp' in data


def test_login(client, user):
    response = client.post('/api/auth/login', json={'email': 'guest@example.com',
                                                    'password': PASSWORD})
    assert response.status_code == 200
    assert response.get_json()['user']['id'] == user


def test_login_bad_credentials(client, user):
    response = client.post('/api/auth/login', json={'email': 'guest@example.com',
                                                    'password': 'wrong-password1'})
    assert response.status_code == 401
    response = client.post('/api/auth/login', json={'email': 'nobody@example.com',
                                                    'password': PASSWORD})
    assert response.status_code == 401


def test_login_blocked_account(client, make_user):
    make_user(email='spam@example.com', blocked_reason='Spam reviews')
    response = client.post('/api/auth/login', json={'email': 'spam@example.com',
                                                    'password': PASSWORD})
    assert response.status_code == 403
    data = response.get_json()
    assert data['blocked'] is True
    assert data['blocked_reason'] == 'Spam reviews'


def test_profile_requires_token(client):
    response = client.get('/api/auth/profile')
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Authorization required'


def test_profile(client, user, auth_headers):
    response = client.get('/api/auth/profile', headers=auth_headers(user))
    assert response.status_code == 200
    assert response.get_json()['user']['email'] == 'guest@example.com'


def test_garbage_token_rejected(client):
    response = client.get('/api/auth/profile', headers={'Authorization': 'Bearer nope'})
    assert response.status_code == 401


def test_expired_token_rejected(app, client, user):
    with app.app_context():
        token = create_access_token(db.session.get(User, user), timedelta(seconds=-1))
    response = client.get('/api/auth/profile', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 401


def test_blocked_user_token_rejected(app, client, user, auth_headers):
    headers = auth_headers(user)
    with app.app_context():
        db.session.get(User, user).block('Abuse')
        db.session.commit()
    assert client.get('/api/auth/profile', headers=headers).status_code == 401


def test_validate_token(client, user, auth_headers):
    token = auth_headers(user)['Authorization'].split()[1]
    data = client.post('/api/auth/validate-token', json={'token': token}).get_json()
    assert data['valid'] is True
    data = client.post('/api/auth/validate-token', json={'token': 'garbage'}).get_json()
    assert data['valid'] is False
    assert client.post('/api/auth/validate-token', json={}).status_code == 400


def test_login_with_non_text_values(client, user):
    response = client.post('/api/auth/login', json={'email': 42, 'password': PASSWORD})
    assert response.status_code == 400
