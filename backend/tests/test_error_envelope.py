from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from postboard import repositories
from postboard.config import Settings
from postboard.main import create_app

from conftest import make_env


def _broken_listing(self):
    raise OperationalError('SELECT', {}, Exception('disk I/O error'))


def test_database_failure_is_500_with_stack_outside_production(client, monkeypatch):
    monkeypatch.setattr(repositories.PostRepository, 'list_with_authors', _broken_listing)
    r = client.get('/api/posts')
    assert r.status_code == 500
    error = r.json()['error']
    assert r.json()['success'] is False
    assert error['message'] == 'Internal server error'
    assert 'OperationalError' in error['stack']


def test_production_hides_stack(tmp_path, monkeypatch):
    app = create_app(Settings(environ=make_env(tmp_path, NODE_ENV='production')))
    monkeypatch.setattr(repositories.PostRepository, 'list_with_authors', _broken_listing)
    with TestClient(app) as client:
        r = client.get('/api/posts')
    assert r.status_code == 500
    assert r.json() == {'success': False, 'error': {'message': 'Internal server error'}}


def test_unexpected_exception_uses_envelope(tmp_path, monkeypatch):
    def explode(self):
        raise RuntimeError('boom')

    app = create_app(Settings(environ=make_env(tmp_path, NODE_ENV='production')))
    monkeypatch.setattr(repositories.PostRepository, 'list_with_authors', explode)
    with TestClient(app, raise_server_exceptions=False) as client:
        r = client.get('/api/posts')
    assert r.status_code == 500
    assert r.json() == {'success': False, 'error': {'message': 'Internal server error'}}


def test_unknown_route(client):
    r = client.get('/api/nothing-here')
    assert r.status_code == 404
    assert r.json() == {'success': False, 'error': {'message': 'Route not found'}}


def test_wrong_method(client):
    r = client.patch('/api/posts/1')
    assert r.status_code == 405
    assert r.json()['success'] is False


def test_unexpected_exception_keeps_request_id_and_cors(client, monkeypatch):
    def explode(self):
        raise RuntimeError('boom')

    monkeypatch.setattr(repositories.PostRepository, 'list_with_authors', explode)
    r = client.get('/api/posts', headers={'X-Request-ID': 'req-500', 'Origin': 'http://localhost:3000'})
    assert r.status_code == 500
    assert r.headers['X-Request-ID'] == 'req-500'
    assert r.headers['access-control-allow-origin'] == 'http://localhost:3000'
    error = r.json()['error']
    assert error['message'] == 'Internal server error'
    assert 'RuntimeError: boom' in error['stack']
