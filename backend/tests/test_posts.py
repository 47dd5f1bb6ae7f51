from fastapi.testclient import TestClient

from postboard.config import Settings
from postboard.main import create_app

from conftest import auth_headers, login, make_env, register


def _create(client, headers, title='Hello', content='World'):
    r = client.post('/api/posts', json={'title': title, 'content': content}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()['data']


def test_create_and_fetch(client, alice):
    user, headers = alice
    r = client.post('/api/posts', json={'title': '  Hello ', 'content': ' World '}, headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body['message'] == 'Post created successfully'
    assert set(body['data']) == {'id', 'title', 'content', 'created_at'}
    assert body['data']['title'] == 'Hello'

    got = client.get(f"/api/posts/{body['data']['id']}").json()
    assert got['success'] is True
    assert got['data']['content'] == 'World'
    assert got['data']['author_username'] == user['username']
    assert set(got['data']) == {'id', 'title', 'content', 'created_at', 'updated_at', 'author_username'}


def test_list_newest_first(client, alice):
    _, headers = alice
    first = _create(client, headers, title='first')
    second = _create(client, headers, title='second')
    data = client.get('/api/posts').json()['data']
    assert [p['id'] for p in data] == [second['id'], first['id']]


def test_list_empty(client):
    assert client.get('/api/posts').json() == {'success': True, 'data': []}


def test_get_missing_and_invalid_id(client):
    missing = client.get('/api/posts/999')
    assert missing.status_code == 404
    assert missing.json() == {'success': False, 'error': {'message': 'Post not found'}}
    invalid = client.get('/api/posts/abc')
    assert invalid.status_code == 400
    assert invalid.json()['error']['details'] == [{'field': 'params.id', 'message': 'Post ID must be a number'}]


def test_title_too_long(client, alice):
    _, headers = alice
    r = client.post('/api/posts', json={'title': 'x' * 256, 'content': 'c'}, headers=headers)
    assert r.status_code == 400
    assert r.json()['error']['details'] == [{'field': 'body.title', 'message': 'Title must be less than 255 characters'}]


def test_update_own_post(client, alice):
    _, headers = alice
    post = _create(client, headers)
    r = client.put(f"/api/posts/{post['id']}", json={'title': 'New', 'content': 'Body'}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body['message'] == 'Post updated successfully'
    assert set(body['data']) == {'id', 'title', 'content', 'updated_at'}
    assert client.get(f"/api/posts/{post['id']}").json()['data']['title'] == 'New'


def test_update_missing_post(client, alice):
    _, headers = alice
    r = client.put('/api/posts/404', json={'title': 'New', 'content': 'Body'}, headers=headers)
    assert r.status_code == 404
    assert r.json()['error']['message'] == 'Post not found or unauthorized'


def test_other_users_post_is_not_found(client, alice):
    _, headers = alice
    post = _create(client, headers)
    register(client, username='mallory', email='mallory@example.com')
    mallory = auth_headers(login(client, email='mallory@example.com'))

    r = client.put(f"/api/posts/{post['id']}", json={'title': 'pwned', 'content': 'x'}, headers=mallory)
    assert r.status_code == 404
    r = client.delete(f"/api/posts/{post['id']}", headers=mallory)
    assert r.status_code == 404
    assert client.get(f"/api/posts/{post['id']}").json()['data']['title'] == 'Hello'


def test_delete_is_not_repeatable(client, alice):
    _, headers = alice
    post = _create(client, headers)
    first = client.delete(f"/api/posts/{post['id']}", headers=headers)
    assert first.status_code == 200
    assert first.json() == {'success': True, 'message': 'Post deleted successfully'}
    second = client.delete(f"/api/posts/{post['id']}", headers=headers)
    assert second.status_code == 404
    assert client.get(f"/api/posts/{post['id']}").status_code == 404


def test_writes_require_auth(client):
    assert client.put('/api/posts/1', json={'title': 'a', 'content': 'b'}).status_code == 401
    assert client.delete('/api/posts/1').status_code == 401


def test_ids_beyond_integer_range_are_rejected(client, alice):
    _, headers = alice
    expected = [{'field': 'params.id', 'message': 'Post ID must be a number'}]
    for huge in ('99999999999999999999', '9223372036854775808', '1' * 5000):
        path = f'/api/posts/{huge}'
        responses = (
            client.get(path),
            client.put(path, json={'title': 'a', 'content': 'b'}, headers=headers),
            client.delete(path, headers=headers),
        )
        for r in responses:
            assert r.status_code == 400
            assert r.json()['error']['details'] == expected


def test_largest_integer_id_is_not_found(client):
    r = client.get('/api/posts/9223372036854775807')
    assert r.status_code == 404
    assert r.json()['error']['message'] == 'Post not found'


def test_oversized_body_rejected(tmp_path):
    app = create_app(Settings(environ=make_env(tmp_path, MAX_BODY_BYTES='1024')))
    with TestClient(app) as small:
        r = small.post('/api/auth/register', json={'username': 'x' * 2000, 'email': 'a@b.com', 'password': 'secret123'})
    assert r.status_code == 413
    assert r.json() == {'success': False, 'error': {'message': 'Request body too large'}}
