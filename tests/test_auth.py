from app.models import Role
from tests.conftest import RECEPTION_EMAIL
from tests.helpers import PASSWORD, create_user, login


def test_login_and_me(client, reception):
    response = login(client, '  Reception@Example.com ')
    assert response.status_code == 200
    assert response.get_json()['data']['role'] == 'reception'

    me = client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.get_json()['data']['email'] == RECEPTION_EMAIL


def test_bad_password_and_unknown_email_look_the_same(client, reception):
    wrong = login(client, RECEPTION_EMAIL, 'wrong-password')
    unknown = login(client, 'nobody@example.com')
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.get_json() == unknown.get_json() == {
        'success': False,
        'error': 'Invalid email or password',
    }


def test_user_without_password_cannot_sign_in(app, client):
    create_user(app, 'nopass@example.com', Role.DOCTOR, password=None)
    assert login(client, 'nopass@example.com').status_code == 401


def test_sixth_attempt_is_locked_out(client, reception):
    for _ in range(5):
        assert login(client, RECEPTION_EMAIL, 'wrong-password').status_code == 401

    locked = login(client, RECEPTION_EMAIL, PASSWORD)
    assert locked.status_code == 429
    assert 'Retry-After' in locked.headers

    # Other identities are unaffected
    assert login(client, 'other@example.com', 'whatever').status_code == 401


def test_logout(reception_client):
    assert reception_client.post('/api/auth/logout').status_code == 200
    assert reception_client.get('/api/auth/me').status_code == 401


def test_unauthenticated_requests_get_401(client):
    for path in ('/api/appointments', '/api/doctors', '/api/dashboard', '/api/settings/outlook'):
        response = client.get(path)
        assert response.status_code == 401, path
        assert response.get_json()['error'] == 'Authentication required'


def test_invalid_json(client):
    response = client.post('/api/auth/login', data='not json', content_type='application/json')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid JSON'


def test_non_string_credentials_are_rejected(client, reception):
    for body in ({'email': 5, 'password': 'x'}, {'email': RECEPTION_EMAIL, 'password': 12345678}):
        response = client.post('/api/auth/login', json=body)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email and password required'
