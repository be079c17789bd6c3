from feedback_delivery.extensions import db
from feedback_delivery.models import Notification


def add_notifications(app, user_id, count):
    with app.app_context():
        for i in range(count):
            db.session.add(Notification(user_id=user_id, title=f'Note {i}', message='Hello'))
        db.session.commit()
        return [n.id for n in Notification.query.filter_by(user_id=user_id).all()]


def test_list_latest_twenty_with_unread_count(app, client, user, auth_headers):
    add_notifications(app, user, 25)
    data = client.get('/api/notifications/', headers=auth_headers(user)).get_json()
    assert len(data['notifications']) == 20
    assert data['unread_count'] == 25


def test_mark_read(app, client, user, auth_headers):
    ids = add_notifications(app, user, 2)
    headers = auth_headers(user)
    assert client.put(f'/api/notifications/{ids[0]}/read', headers=headers).status_code == 200
    data = client.get('/api/notifications/', headers=headers).get_json()
    assert data['unread_count'] == 1


def test_delete_notification(app, client, user, auth_headers):
    ids = add_notifications(app, user, 1)
    headers = auth_headers(user)
    assert client.delete(f'/api/notifications/{ids[0]}', headers=headers).status_code == 200
    assert client.get('/api/notifications/', headers=headers).get_json()['notifications'] == []


def test_cannot_touch_other_users_notifications(app, client, user, make_user, auth_headers):
    ids = add_notifications(app, user, 1)
    headers = auth_headers(make_user())
    assert client.put(f'/api/notifications/{ids[0]}/read', headers=headers).status_code == 404
    assert client.delete(f'/api/notifications/{ids[0]}', headers=headers).status_code == 404


def test_requires_auth(client):
    assert client.get('/api/notifications/').status_code == 401
