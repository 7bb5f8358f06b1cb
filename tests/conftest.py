import pytest

from app import create_app
from app.extensions import db
from app.models import Role
from tests.helpers import create_user, login

RECEPTION_EMAIL = 'reception@example.com'
DOCTOR_EMAIL = 'doctor@example.com'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def reception(app):
    return create_user(app, RECEPTION_EMAIL, Role.RECEPTION, name='Reception')


@pytest.fixture
def doctor(app):
    return create_user(app, DOCTOR_EMAIL, Role.DOCTOR, name='Dr. Adams')


@pytest.fixture
def reception_client(app, reception):
    client = app.test_client()
    assert login(client, RECEPTION_EMAIL).status_code == 200
    return client


@pytest.fixture
def doctor_client(app, doctor):
    client = app.test_client()
    assert login(client, DOCTOR_EMAIL).status_code == 200
    return client
