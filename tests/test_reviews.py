import pytest

from feedback_delivery.models import Restaurant, Review, ErrorReport, Notification
from feedback_delivery.extensions import db


def post_review(client, headers, **overrides):
    payload = {'rating': 5, 'content': 'Great food', 'type': 'delivery'}
    payload.update(overrides)
    return client.post('/api/reviews/', json=payload, headers=headers)


def test_create_review_updates_rating(client, user, restaurant, auth_headers, fetch):
    headers = auth_headers(user)
    response = post_review(client, headers, restaurant_id=restaurant, rating=5)
    assert response.status_code == 201
    review = response.get_json()['review']
    assert review['type'] == 'delivery'
    assert review['user_name']
    assert review['restaurant_name'] == 'Blue Door'

    post_review(client, headers, restaurant_id=restaurant, rating=2)
    assert fetch(Restaurant, restaurant)['rating'] == 3.5


def test_create_review_by_restaurant_name(client, user, restaurant, auth_headers):
    response = post_review(client, auth_headers(user), restaurant_name='Blue Door')
    assert response.status_code == 201
    assert response.get_json()['review']['restaurant_id'] == restaurant


def test_create_review_defaults_to_in_restaurant(client, user, restaurant, auth_headers):
    response = client.post('/api/reviews/', headers=auth_headers(user), json={
        'restaurant_id': restaurant, 'rating': 4, 'content': 'Nice'
    })
    assert response.get_json()['review']['type'] == 'inRestaurant'


@pytest.mark.parametrize('rating', [0, 6, 4.5, '4.5', 'five', True, None])
def test_rating_must_be_integer_in_range(client, user, restaurant, auth_headers, rating):
    response = post_review(client, auth_headers(user), restaurant_id=restaurant, rating=rating)
    assert response.status_code == 400
    assert 'rating' in response.get_json()['details']


def test_integral_float_rating_accepted(client, user, restaurant, auth_headers):
    response = post_review(client, auth_headers(user), restaurant_id=restaurant, rating=4.0)
    assert response.status_code == 201
    assert response.get_json()['review']['rating'] == 4


def test_review_validation(client, user, restaurant, auth_headers):
    headers = auth_headers(user)
    assert post_review(client, headers, restaurant_id=restaurant, content='').status_code == 400
    assert post_review(client, headers, restaurant_id=restaurant,
                       content='x' * 1001).status_code == 400
    assert post_review(client, headers, restaurant_id=restaurant,
                       type='takeaway').status_code == 400
    assert post_review(client, headers).status_code == 400
    assert post_review(client, headers, restaurant_id=999).status_code == 404
    assert post_review(client, headers, restaurant_name='Nowhere').status_code == 404


def test_create_review_requires_auth(client, restaurant):
    assert post_review(client, {}, restaurant_id=restaurant).status_code == 401


def test_new_review_notifies_managers(app, client, user, manager, restaurant, auth_headers):
    post_review(client, auth_headers(user), restaurant_id=restaurant)
    with app.app_context():
        notifications = Notification.query.filter_by(user_id=manager).all()
        assert len(notifications) == 1
        assert notifications[0].type == 'review'


def test_list_reviews_filters(client, make_user, make_restaurant, make_review):
    first = make_user()
    second = make_user()
    roma = make_restaurant('Roma')
    tokyo = make_restaurant('Tokyo')
    make_review(first, roma)
    make_review(second, roma)
    make_review(first, tokyo)

    data = client.get(f'/api/reviews/?restaurant_id={roma}').get_json()
    assert len(data['reviews']) == 2
    data = client.get(f'/api/reviews/?user_id={first}').get_json()
    assert len(data['reviews']) == 2
    data = client.get(f'/api/reviews/?user_id={first}&restaurant_id={tokyo}').get_json()
    assert len(data['reviews']) == 1


def test_update_own_review(client, user, restaurant, make_review, auth_headers, fetch):
    review_id = make_review(user, restaurant, rating=2)
    response = client.put(f'/api/reviews/{review_id}', headers=auth_headers(user),
                          json={'rating': 4, 'type': 'delivery'})
    assert response.status_code == 200
    data = response.get_json()['review']
    assert data['rating'] == 4
    assert data['type'] == 'delivery'
    assert data['content'] == 'Tasty and quick'
    assert fetch(Restaurant, restaurant)['rating'] == 4.0


def test_update_rejects_bad_values(client, user, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    headers = auth_headers(user)
    assert client.put(f'/api/reviews/{review_id}', headers=headers,
                      json={'rating': 9}).status_code == 400
    assert client.put(f'/api/reviews/{review_id}', headers=headers,
                      json={'type': 'takeaway'}).status_code == 400


def test_only_author_can_update(client, user, make_user, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    other = make_user()
    response = client.put(f'/api/reviews/{review_id}', headers=auth_headers(other),
                          json={'rating': 1})
    assert response.status_code == 403


def test_author_soft_deletes_review(app, client, user, restaurant, make_review, auth_headers, fetch):
    review_id = make_review(user, restaurant, rating=5)
    response = client.delete(f'/api/reviews/{review_id}', headers=auth_headers(user))
    assert response.status_code == 200
    assert client.get(f'/api/reviews/{review_id}').status_code == 404
    with app.app_context():
        assert db.session.get(Review, review_id).deleted is True
    assert fetch(Restaurant, restaurant)['rating'] == 0.0


def test_other_user_cannot_delete(client, user, make_user, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    response = client.delete(f'/api/reviews/{review_id}', headers=auth_headers(make_user()))
    assert response.status_code == 403


def test_manager_can_delete(client, user, manager, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    response = client.delete(f'/api/reviews/{review_id}', headers=auth_headers(manager))
    assert response.status_code == 200


def test_report_review(app, client, user, make_user, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    reporter = make_user()
    response = client.post(f'/api/reviews/{review_id}/report', headers=auth_headers(reporter),
                           json={'reason': 'Offensive language'})
    assert response.status_code == 201
    report = response.get_json()['report']
    assert report['status'] == 'pending'
    assert report['reporter_id'] == reporter

    with app.app_context():
        assert ErrorReport.query.count() == 1

    response = client.post(f'/api/reviews/{review_id}/report', headers=auth_headers(reporter),
                           json={})
    assert response.status_code == 400


def test_update_rejects_blank_content(client, user, restaurant, make_review, auth_headers, fetch):
    review_id = make_review(user, restaurant)
    response = client.put(f'/api/reviews/{review_id}', headers=auth_headers(user),
                          json={'content': '   '})
    assert response.status_code == 400
    assert 'content' in response.get_json()['details']
    assert fetch(Review, review_id)['content'] == 'Tasty and quick'


@pytest.mark.parametrize('content', [5, {'text': 'Great'}, True])
def test_content_must_be_text(client, user, restaurant, auth_headers, content):
    response = post_review(client, auth_headers(user), restaurant_id=restaurant, content=content)
    assert response.status_code == 400
    assert 'content' in response.get_json()['details']


def test_non_text_restaurant_name(client, user, restaurant, auth_headers):
    response = post_review(client, auth_headers(user), restaurant_name=42)
    assert response.status_code == 400


def test_criteria_ratings(client, user, restaurant, auth_headers):
    headers = auth_headers(user)
    response = post_review(client, headers, restaurant_id=restaurant,
                           food_rating=5, service_rating=3)
    assert response.status_code == 201
    review = response.get_json()['review']
    assert review['criteria_ratings'] == {
        'food_rating': 5,
        'service_rating': 3,
        'atmosphere_rating': 0,
        'price_rating': 0,
        'cleanliness_rating': 0,
    }

    response = client.put(f'/api/reviews/{review["id"]}', headers=headers,
                          json={'price_rating': 4, 'food_rating': 0})
    ratings = response.get_json()['review']['criteria_ratings']
    assert ratings['price_rating'] == 4
    assert ratings['food_rating'] == 0
    assert ratings['service_rating'] == 3


@pytest.mark.parametrize('value', [6, -1, 2.5, 'good', True])
def test_criteria_rating_range(client, user, restaurant, auth_headers, value):
    response = post_review(client, auth_headers(user), restaurant_id=restaurant,
                           atmosphere_rating=value)
    assert response.status_code == 400
    assert 'atmosphere_rating' in response.get_json()['details']
