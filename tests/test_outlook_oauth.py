from urllib.parse import parse_qs, urlparse

import pytest

from app.models import User
from app.services import outlook_service
from tests.helpers import load

APP_URL = 'http://localhost:5000'


@pytest.fixture
def outlook_app(app):
    app.config.update(MICROSOFT_CLIENT_ID='client-id', MICROSOFT_CLIENT_SECRET='client-secret', APP_URL=APP_URL)
    return app


def query(response):
    return parse_qs(urlparse(response.headers['Location']).query)


def start_flow(client):
    response = client.get('/api/auth/microsoft')
    assert response.status_code == 302
    return query(response)['state'][0]


def test_unauthenticated_redirects_to_sign_in(outlook_app, client):
    for path in ('/api/auth/microsoft', '/api/auth/microsoft/callback?code=x&state=y'):
        response = client.get(path)
        assert response.status_code == 302
        assert response.headers['Location'] == f'{APP_URL}/auth/signin'


def test_not_configured(app, doctor_client):
    response = doctor_client.get('/api/auth/microsoft')
    assert response.status_code == 302
    assert query(response) == {'outlook': ['error'], 'message': ['not_configured']}


def test_redirects_to_microsoft_with_state_cookie(outlook_app, doctor_client):
    response = doctor_client.get('/api/auth/microsoft')
    assert response.status_code == 302
    location = urlparse(response.headers['Location'])
    assert f'{location.scheme}://{location.netloc}{location.path}' == outlook_service.MICROSOFT_AUTHORIZE_URL

    params = parse_qs(location.query)
    assert params['client_id'] == ['client-id']
    assert params['redirect_uri'] == [f'{APP_URL}/api/auth/microsoft/callback']
    assert 'offline_access' in params['scope'][0]

    cookie = next(c for c in response.headers.getlist('Set-Cookie') if c.startswith('outlook_oauth_state='))
    assert f"outlook_oauth_state={params['state'][0]}" in cookie
    assert 'HttpOnly' in cookie
    assert 'Max-Age=600' in cookie


def test_state_mismatch_is_rejected(outlook_app, doctor_client, monkeypatch):
    monkeypatch.setattr(outlook_service, 'exchange_code', lambda code: pytest.fail('must not exchange'))
    start_flow(doctor_client)

    response = doctor_client.get('/api/auth/microsoft/callback?code=abc&state=forged')
    assert response.status_code == 302
    assert query(response) == {'outlook': ['error'], 'message': ['invalid_callback']}


def test_provider_error_is_passed_through(outlook_app, doctor_client):
    start_flow(doctor_client)
    response = doctor_client.get('/api/auth/microsoft/callback?error=access_denied')
    assert query(response) == {'outlook': ['error'], 'message': ['access_denied']}


def test_successful_connection_stores_tokens(outlook_app, doctor_client, doctor, monkeypatch):
    monkeypatch.setattr(outlook_service, 'exchange_code', lambda code: {
        'access_token': 'access-1', 'refresh_token': 'refresh-1', 'expires_in': 3600,
    })
    state = start_flow(doctor_client)

    response = doctor_client.get(f'/api/auth/microsoft/callback?code=abc&state={state}')
    assert response.status_code == 302
    assert response.headers['Location'] == f'{APP_URL}/dashboard/settings?outlook=connected'

    user = load(outlook_app, User, doctor)
    assert user.microsoft_access_token == 'access-1'
    assert user.microsoft_refresh_token == 'refresh-1'
    assert user.microsoft_token_expires_at is not None

    # State is single-use
    replay = doctor_client.get(f'/api/auth/microsoft/callback?code=abc&state={state}')
    assert query(replay)['message'] == ['invalid_callback']


def test_token_exchange_failure(outlook_app, doctor_client, monkeypatch):
    monkeypatch.setattr(outlook_service, 'exchange_code', lambda code: None)
    state = start_flow(doctor_client)
    response = doctor_client.get(f'/api/auth/microsoft/callback?code=abc&state={state}')
    assert query(response) == {'outlook': ['error'], 'message': ['token_exchange_failed']}
