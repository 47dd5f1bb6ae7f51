from postboard import repositories

from conftest import register


def test_register_returns_user_without_hash(client):
    r = client.post('/api/auth/register', json={'username': '  carol ', 'email': 'Carol@Example.com', 'password': 'pass123'})
    assert r.status_code == 201
    body = r.json()
    assert body['success'] is True
    assert body['message'] == 'User created successfully'
    data = body['data']
    assert set(data) == {'id', 'username', 'email', 'created_at'}
    assert data['username'] == 'carol'
    assert data['email'] == 'carol@example.com'
    assert 'password' not in r.text.lower()


def test_register_conflict_on_email_or_username(client):
    register(client)
    same_email = client.post('/api/auth/register', json={'username': 'other', 'email': 'ALICE@example.com', 'password': 'different1'})
    assert same_email.status_code == 409
    assert same_email.json() == {'success': False, 'error': {'message': 'User already exists'}}
    same_name = client.post('/api/auth/register', json={'username': 'alice', 'email': 'new@example.com', 'password': 'different1'})
    assert same_name.status_code == 409


def test_register_conflict_from_database_constraint(client, monkeypatch):
    register(client)
    # skip the lookup so only the unique constraint can catch the duplicate
    monkeypatch.setattr(repositories.UserRepository, 'find_by_email_or_username', lambda self, email, username: None)
    r = client.post('/api/auth/register', json={'username': 'alice', 'email': 'alice@example.com', 'password': 'secret123'})
    assert r.status_code == 409
    assert r.json()['error']['message'] == 'User already exists'


def test_register_validation(client):
    r = client.post('/api/auth/register', json={'username': 'ab', 'email': 'nope', 'password': '123'})
    assert r.status_code == 400
    details = {d['field']: d['message'] for d in r.json()['error']['details']}
    assert details == {
        'body.username': 'Username must be at least 3 characters long',
        'body.email': 'Invalid email format',
        'body.password': 'Password must be at least 6 characters long',
    }


def test_login_success(client):
    user = register(client)
    r = client.post('/api/auth/login', json={'email': ' Alice@Example.com', 'password': 'secret123'})
    assert r.status_code == 200
    body = r.json()
    assert body['message'] == 'Login successful'
    assert body['data']['token']
    assert body['data']['user'] == {'id': user['id'], 'username': 'alice', 'email': 'alice@example.com'}


def test_login_invalid_credentials(client):
    register(client)
    wrong = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'wrong-pass'})
    unknown = client.post('/api/auth/login', json={'email': 'nobody@example.com', 'password': 'secret123'})
    for r in (wrong, unknown):
        assert r.status_code == 401
        assert r.json() == {'success': False, 'error': {'message': 'Invalid credentials'}}


def test_login_requires_password(client):
    r = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': ''})
    assert r.status_code == 400
    assert r.json()['error']['details'] == [{'field': 'body.password', 'message': 'Password is required'}]
