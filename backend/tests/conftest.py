import pytest
from fastapi.testclient import TestClient

from postboard.config import Settings
from postboard.main import create_app

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


def make_env(tmp_path, **overrides):
    env = {
        "NODE_ENV": "test",
        "DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": "4",
        "ENABLE_LOGGING": "false",
    }
    env.update(overrides)
    return env


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fresh SQLite file per test."""
    return Settings(environ=make_env(tmp_path))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def register(client, username="alice", email="alice@example.com", password="secret123"):
    r = client.post('/api/auth/register', json={'username': username, 'email': email, 'password': password})
    assert r.status_code == 201, r.text
    return r.json()['data']


def login(client, email="alice@example.com", password="secret123"):
    r = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert r.status_code == 200, r.text
    return r.json()['data']['token']


def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def alice(client):
    """Registered user `alice` and her bearer headers."""
    user = register(client)
    return user, auth_headers(login(client))
