from datetime import datetime, timedelta

from feedback_delivery.models import ManagerResponse, Notification, Review
from feedback_delivery.extensions import db


def test_manager_endpoints_require_manager(client, user, auth_headers):
    assert client.get('/api/manager/reviews', headers=auth_headers(user)).status_code == 403
    assert client.get('/api/manager/reviews').status_code == 401


def test_manager_sees_own_restaurant_reviews(client, user, manager, restaurant,
                                             make_restaurant, make_review, auth_headers):
    other = make_restaurant('Elsewhere')
    make_review(user, restaurant)
    make_review(user, other)

    data = client.get('/api/manager/reviews', headers=auth_headers(manager)).get_json()
    assert [r['restaurant_id'] for r in data['reviews']] == [restaurant]


def test_unattached_manager_gets_empty_list(client, make_user, auth_headers):
    lonely = make_user('manager')
    data = client.get('/api/manager/reviews', headers=auth_headers(lonely)).get_json()
    assert data['reviews'] == []


def test_respond_to_review(app, client, user, manager, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    response = client.post(f'/api/manager/reviews/{review_id}/response',
                           headers=auth_headers(manager), json={'text': 'Thank you!'})
    assert response.status_code == 200
    review = response.get_json()['review']
    assert review['response_text'] == 'Thank you!'
    assert review['responded_by'] == manager
    assert review['has_response'] is True

    # answering again replaces the response
    client.post(f'/api/manager/reviews/{review_id}/response',
                headers=auth_headers(manager), json={'text': 'Updated answer'})

    with app.app_context():
        responses = ManagerResponse.query.filter_by(review_id=review_id).all()
        assert len(responses) == 1
        assert responses[0].response_text == 'Updated answer'
        assert db.session.get(Review, review_id).response_text == 'Updated answer'
        assert Notification.query.filter_by(user_id=user, type='response').count() == 2


def test_response_requires_text(client, user, manager, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    response = client.post(f'/api/manager/reviews/{review_id}/response',
                           headers=auth_headers(manager), json={'text': ''})
    assert response.status_code == 400


def test_cannot_respond_to_other_restaurant(client, user, manager, make_restaurant,
                                            make_review, auth_headers):
    other = make_restaurant('Elsewhere')
    review_id = make_review(user, other)
    response = client.post(f'/api/manager/reviews/{review_id}/response',
                           headers=auth_headers(manager), json={'text': 'Hello'})
    assert response.status_code == 403


def test_admin_can_respond_anywhere(client, user, admin, make_restaurant, make_review,
                                    auth_headers):
    review_id = make_review(user, make_restaurant('Elsewhere'))
    response = client.post(f'/api/manager/reviews/{review_id}/response',
                           headers=auth_headers(admin), json={'text': 'Hello'})
    assert response.status_code == 200


def test_update_review_type(client, user, manager, restaurant, make_review, auth_headers):
    review_id = make_review(user, restaurant)
    headers = auth_headers(manager)
    response = client.put(f'/api/manager/reviews/{review_id}/type', headers=headers,
                          json={'type': 'delivery'})
    assert response.get_json()['review']['type'] == 'delivery'
    response = client.put(f'/api/manager/reviews/{review_id}/type', headers=headers,
                          json={'type': 'takeaway'})
    assert response.status_code == 400


def test_managed_restaurants(client, user, manager, restaurant, make_review, auth_headers):
    make_review(user, restaurant, rating=5)
    make_review(user, restaurant, rating=4)
    data = client.get('/api/manager/restaurants', headers=auth_headers(manager)).get_json()
    assert len(data['restaurants']) == 1
    assert data['restaurants'][0]['review_count'] == 2
    assert data['restaurants'][0]['average_rating'] == 4.5


def test_analytics_stats(client, make_user, manager, restaurant, make_review, auth_headers):
    first = make_user()
    second = make_user()
    answered = make_review(first, restaurant, rating=5, type='delivery')
    make_review(first, restaurant, rating=4)
    make_review(second, restaurant, rating=2)
    headers = auth_headers(manager)
    client.post(f'/api/manager/reviews/{answered}/response', headers=headers,
                json={'text': 'Thanks'})

    data = client.get('/api/manager/analytics/stats', headers=headers).get_json()
    assert data['totalReviews'] == 3
    assert data['averageRating'] == 3.7
    assert data['reviewsByType'] == {'inRestaurant': 2, 'delivery': 1}
    assert data['activeUsers'] == 2
    assert data['responseRate'] == 33.3


def test_analytics_stats_empty(client, make_user, auth_headers):
    data = client.get('/api/manager/analytics/stats',
                      headers=auth_headers(make_user('manager'))).get_json()
    assert data['totalReviews'] == 0
    assert data['responseRate'] == 0


def test_manager_responses_listing(client, user, manager, restaurant, make_restaurant,
                                   make_review, auth_headers, admin):
    first = make_review(user, restaurant)
    second = make_review(user, make_restaurant('Elsewhere'))
    client.post(f'/api/manager/reviews/{first}/response', headers=auth_headers(manager),
                json={'text': 'Thanks'})
    client.post(f'/api/manager/reviews/{second}/response', headers=auth_headers(admin),
                json={'text': 'Noted'})

    data = client.get('/api/manager-responses/').get_json()
    assert len(data['responses']) == 2
    data = client.get(f'/api/manager-responses/?restaurant_id={restaurant}').get_json()
    assert [r['response_text'] for r in data['responses']] == ['Thanks']
    data = client.get(f'/api/manager-responses/?review_id={second}').get_json()
    assert [r['review_id'] for r in data['responses']] == [second]


def test_analytics_charts(client, user, manager, restaurant, make_restaurant, make_review,
                          auth_headers):
    now = datetime.utcnow()
    make_review(user, restaurant, rating=5, food_rating=4)
    make_review(user, restaurant, rating=3)
    make_review(user, restaurant, rating=4, created_at=now - timedelta(days=2))
    make_review(user, restaurant, rating=1, created_at=now - timedelta(days=20))
    make_review(user, make_restaurant('Elsewhere'), rating=2)
    headers = auth_headers(manager)

    data = client.get('/api/manager/analytics/charts', headers=headers).get_json()
    assert data['period'] == 'week'
    assert len(data['ratings']['labels']) == 7
    assert data['ratings']['labels'][-1] == now.date().isoformat()
    assert data['ratings']['data'][-1] == 4.0
    assert data['ratings']['data'][-3] == 4
    assert data['volumeByDay']['data'][-1] == 2
    assert sum(data['volumeByDay']['data']) == 3
    assert data['ratingDistribution'] == {'labels': ['1', '2', '3', '4', '5'],
                                          'data': [0, 0, 1, 1, 1]}
    criteria = {c['name']: c['score'] for c in data['criteriaRatings']}
    assert criteria['food_rating'] == 4.0
    assert criteria['service_rating'] is None

    data = client.get('/api/manager/analytics/charts?period=month', headers=headers).get_json()
    assert len(data['volumeByDay']['labels']) == 30
    assert sum(data['volumeByDay']['data']) == 4

    data = client.get('/api/manager/analytics/charts?period=year', headers=headers).get_json()
    assert len(data['ratings']['labels']) == 12
    assert data['ratings']['labels'][-1] == now.strftime('%Y-%m')
    assert sum(data['volumeByDay']['data']) == 4


def test_analytics_charts_unknown_period(client, manager, auth_headers):
    response = client.get('/api/manager/analytics/charts?period=decade',
                          headers=auth_headers(manager))
    assert response.status_code == 400


def test_analytics_charts_unattached_manager(client, make_user, auth_headers):
    data = client.get('/api/manager/analytics/charts',
                      headers=auth_headers(make_user('manager'))).get_json()
    assert data['volumeByDay']['data'] == [0] * 7
    assert data['ratingDistribution']['data'] == [0] * 5
