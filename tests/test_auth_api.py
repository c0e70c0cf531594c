import pytest

from models import User
from portal.tokens import verify_token
from conftest import PASSWORD


def register(client, path='/register', **overrides):
    body = {'username': 'carol', 'email': 'Carol@Uni.edu', 'password': 'hunter22'}
    body.update(overrides)
    return client.post(path, json=body)


@pytest.mark.parametrize('path', ['/register', '/users'])
def test_register_creates_student_with_token(client, path):
    response = register(client, path=path)
    assert response.status_code == 201
    data = response.get_json()
    assert data['user']['role'] == 'student'
    assert data['user']['email'] == 'carol@uni.edu'
    assert 'password_hash' not in data['user']
    assert verify_token(data['token']).role == 'student'


def test_register_ignores_requested_role(client):
    response = register(client, role='admin')
    assert response.status_code == 201
    assert User.query.filter_by(username='carol').one().role == 'student'


def test_register_duplicate_is_conflict(client, student):
    response = register(client, username='alice', email='other@uni.edu')
    assert response.status_code == 400
    assert 'already exists' in response.get_json()['message']

    response = register(client, username='someone', email='ALICE@uni.edu')
    assert response.status_code == 400


def test_register_validation_lists_fields(client):
    response = client.post('/register', json={'username': '', 'email': 'nope', 'password': '123'})
    assert response.status_code == 400
    fields = {error['field'] for error in response.get_json()['errors']}
    assert fields == {'username', 'email', 'password'}
    assert User.query.count() == 0


def test_login(client, student):
    response = client.post('/login', json={'email': 'ALICE@uni.edu', 'password': PASSWORD})
    assert response.status_code == 200
    assert verify_token(response.get_json()['token']).id == str(student.id)


def test_login_with_wrong_password(client, student):
    response = client.post('/login', json={'email': 'alice@uni.edu', 'password': 'wrong-pass'})
    assert response.status_code == 400
    assert response.get_json() == {'message': 'Invalid credentials'}


def test_me_requires_token(client):
    response = client.get('/me')
    assert response.status_code == 401
    assert response.get_json() == {'message': 'No token, authorization denied'}


def test_me_rejects_bad_token(client):
    response = client.get('/me', headers={'x-auth-token': 'not.a.token'})
    assert response.status_code == 401


def test_me_returns_profile(client, student, headers_for):
    response = client.get('/me', headers=headers_for(student))
    assert response.status_code == 200
    assert response.get_json()['username'] == 'alice'


def test_update_profile(client, student, other_student, headers_for):
    response = client.put('/me', json={'email': 'bob@uni.edu'}, headers=headers_for(student))
    assert response.status_code == 400

    response = client.put('/me', json={'username': 'alice2', 'email': 'Alice2@uni.edu'}, headers=headers_for(student))
    assert response.status_code == 200
    user = response.get_json()['user']
    assert (user['username'], user['email']) == ('alice2', 'alice2@uni.edu')


def test_unknown_route_is_json(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert 'message' in response.get_json()
