import pytest

from app import create_app
from models import db


@pytest.fixture()
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def register(client):
    """Register a user and return ``(user_json, token)``."""

    def _register(email='a@x.com', password='secret1'):
        response = client.post('/users', json={'email': email, 'password': password})
        assert response.status_code == 200
        return response.get_json(), response.headers['x-auth']

    return _register


@pytest.fixture()
def token(register):
    return register()[1]


@pytest.fixture()
def other_token(register):
    return register('b@x.com', 'secret2')[1]


@pytest.fixture()
def make_todo(client):
    def _make_todo(token, text='buy milk'):
        response = client.post('/todos', json={'text': text}, headers={'x-auth': token})
        assert response.status_code == 200
        return response.get_json()

    return _make_todo
