import json
import pytest
import redis


def _track(client, country, city="City", region="Region", timezone="UTC"):
    return client.get('/api/date', query_string={'timezone': timezone}, headers={
        'X-Real-IP': '198.51.100.23',
        'X-Vercel-IP-Country': country,
        'X-Vercel-IP-City': city,
        'X-Vercel-IP-Country-Region': region,
    })


def test_analytics_empty_store(client, redis_client):
    response = client.get('/api/analytics')

    assert response.status_code == 200
    data = response.get_json()
    assert data['summary'] == {
        'totalHits': 0,
        'uniqueCountries': 0,
        'uniqueCities': 0,
        'uniqueTimezones': 0
    }
    assert data['dailyHits'] == []
    assert data['timezones'] == []
    assert data['countries'] == []
    assert data['cities'] == []
    assert data['regions'] == []
    assert data['recentRequests'] == []


def test_analytics_counts_tracked_requests(client, redis_client):
    """After N tracked requests from distinct countries, the summary reports N."""
    countries = ['FR', 'DE', 'IN', 'US', 'BR']
    for country in countries:
        assert _track(client, country).status_code == 200

    data = client.get('/api/analytics').get_json()

    assert data['summary']['totalHits'] == len(countries)
    assert data['summary']['uniqueCountries'] == len(countries)
    assert data['summary']['uniqueTimezones'] == 1
    assert len(data['dailyHits']) == 1
    assert data['dailyHits'][0]['hits'] == len(countries)
    assert data['timezones'] == [{'name': 'UTC', 'count': len(countries)}]
    # Newest first
    assert [r['country'] for r in data['recentRequests']] == list(reversed(countries))
    assert data['recentRequests'][0]['ip'] == '198.51.100***'


def test_analytics_truncates_and_sorts_cities_and_regions(client, redis_client):
    for i in range(30):
        redis_client.hset('analytics:cities', f'City{i}, XX', i + 1)
        redis_client.hset('analytics:regions', f'Region{i}, XX', 30 - i)

    data = client.get('/api/analytics').get_json()

    assert data['summary']['uniqueCities'] == 30
    assert len(data['cities']) == 20
    assert len(data['regions']) == 20
    city_counts = [c['count'] for c in data['cities']]
    assert city_counts == sorted(city_counts, reverse=True)
    assert data['cities'][0] == {'name': 'City29, XX', 'count': 30}
    assert data['regions'][0] == {'name': 'Region0, XX', 'count': 30}


def test_analytics_returns_full_timezone_and_country_lists(client, redis_client):
    for i in range(25):
        redis_client.hset('analytics:timezones', f'Zone/{i}', i + 1)
        redis_client.hset('analytics:countries', f'C{i}', i + 1)

    data = client.get('/api/analytics').get_json()

    assert len(data['timezones']) == 25
    assert len(data['countries']) == 25


def test_analytics_recent_requests_limited_and_parsed(client, redis_client):
    for i in range(60):
        redis_client.lpush('analytics:recent_requests', json.dumps({'timestamp': i}))
    redis_client.lpush('analytics:recent_requests', '{not json')

    data = client.get('/api/analytics').get_json()

    assert len(data['recentRequests']) == 50
    assert data['recentRequests'][0] == {'timestamp': 59}


def test_analytics_daily_hits_sorted_ascending(client, redis_client):
    redis_client.hset('analytics:daily_hits', mapping={
        '2024-03-02': 5,
        '2024-02-28': 1,
        '2024-03-01': 3,
    })

    data = client.get('/api/analytics').get_json()

    assert data['dailyHits'] == [
        {'date': '2024-02-28', 'hits': 1},
        {'date': '2024-03-01', 'hits': 3},
        {'date': '2024-03-02', 'hits': 5},
    ]


def test_analytics_store_failure(app, client, redis_client, mocker):
    """A Redis read failure yields a generic 500 and no partial data."""
    failing_pipeline = mocker.MagicMock()
    failing_pipeline.execute.side_effect = redis.exceptions.ConnectionError("Connection refused")
    mocker.patch.object(app.analytics_service.redis_client, 'pipeline', return_value=failing_pipeline)

    response = client.get('/api/analytics')

    assert response.status_code == 500
    data = response.get_json()
    assert data['error'] == 'Failed to fetch analytics'
    assert 'Connection refused' not in data['message']
    assert 'summary' not in data


def test_analytics_without_redis(app, client, monkeypatch):
    monkeypatch.setattr(app.analytics_service, 'redis_client', None)

    response = client.get('/api/analytics')

    assert response.status_code == 500
    assert response.get_json()['error'] == 'Failed to fetch analytics'


@pytest.mark.parametrize("method", ["post", "put", "delete"])
def test_analytics_method_not_allowed(client, method):
    response = getattr(client, method)('/api/analytics')

    assert response.status_code == 405
    assert response.get_json()['error'] == 'Method not allowed'


def test_analytics_cors_preflight(client):
    response = client.options('/api/analytics', headers={
        'Origin': 'https://dashboard.example.com',
        'Access-Control-Request-Method': 'GET',
        'Access-Control-Request-Headers': 'Content-Type'
    })

    assert response.status_code == 200
    assert response.data == b''
    assert response.headers['Access-Control-Allow-Origin'] == '*'
    assert response.headers['Access-Control-Allow-Methods'] == 'GET, OPTIONS'
    assert response.headers['Access-Control-Allow-Headers'] == 'Content-Type'


def test_analytics_preflight_without_request_headers(client):
    """A preflight that asks for no extra headers still advertises Content-Type."""
    response = client.options('/api/analytics', headers={
        'Origin': 'https://dashboard.example.com',
        'Access-Control-Request-Method': 'GET'
    })

    assert response.status_code == 200
    assert response.data == b''
    assert response.headers['Access-Control-Allow-Origin'] == '*'
    assert response.headers['Access-Control-Allow-Methods'] == 'GET, OPTIONS'
    assert response.headers['Access-Control-Allow-Headers'] == 'Content-Type'


def test_analytics_bare_options(client):
    response = client.options('/api/analytics')

    assert response.status_code == 200
    assert response.headers['Access-Control-Allow-Methods'] == 'GET, OPTIONS'
    assert response.headers['Access-Control-Allow-Headers'] == 'Content-Type'


def test_analytics_head_not_allowed(client, redis_client):
    response = client.head('/api/analytics')

    assert response.status_code == 405
    assert response.headers['Allow'] == 'GET, OPTIONS'
