"""Test authentication endpoints."""
import json
from datetime import timedelta

from attendance_api import db
from attendance_api.models.user import User, UserRole
from attendance_api.utils.helpers import utcnow

def test_health_check(client):
    """Test auth health endpoint."""
    response = client.get('/api/auth/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Auth service is running'

def test_app_health_reports_detector(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['face_detector'] == 'client'

def test_register_success(client):
    """Test successful student registration."""
    response = client.post('/api/auth/register',
        json={
            'email': 'newuser@example.com',
            'password': 'password123',
            'name': 'New User',
            'roll_number': 'CS042',
            'department': 'Computer Science'
        })

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] is False
    assert data['data']['email'] == 'newuser@example.com'
    assert data['data']['role'] == 'student'
    assert data['data']['face_enrolled'] is False

def test_register_validation(client, student):
    """Test registration validation."""
    response = client.post('/api/auth/register', json={})
    assert response.status_code == 400

    response = client.post('/api/auth/register',
        json={
            'email': 'invalid-email',
            'password': 'password123',
            'name': 'Test User'
        })
    assert response.status_code == 400

    response = client.post('/api/auth/register',
        json={
            'email': student.email,
            'password': 'password123',
            'name': 'Duplicate'
        })
    assert response.status_code == 409

def test_login_success(client, make_user):
    make_user('test@example.com', UserRole.TEACHER)
    response = client.post('/api/auth/login',
        json={
            'email': 'test@example.com',
            'password': 'password123'
        })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['error'] is False
    assert 'access_token' in data['data']
    assert 'refresh_token' in data['data']
    assert data['data']['user']['role'] == 'teacher'

def test_login_invalid_credentials(client, student):
    response = client.post('/api/auth/login',
        json={
            'email': student.email,
            'password': 'wrongpassword'
        })

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid email or password'

def test_get_current_user(client, student):
    """Login, then read the profile with the issued token."""
    login_response = client.post('/api/auth/login',
        json={
            'email': student.email,
            'password': 'password123'
        })

    token = json.loads(login_response.data)['data']['access_token']

    response = client.get('/api/auth/me',
        headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['data']['email'] == student.email
    assert data['data']['roll_number'] == 'CS001'

def test_refresh_token(client, student):
    login = client.post('/api/auth/login',
        json={'email': student.email, 'password': 'password123'}).get_json()
    refresh = login['data']['refresh_token']

    response = client.post('/api/auth/refresh',
        headers={'Authorization': f'Bearer {refresh}'})
    assert response.status_code == 200
    assert 'access_token' in response.get_json()['data']

def test_missing_and_invalid_tokens_are_401(client):
    assert client.get('/api/auth/me').status_code == 401
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid token'

def test_deactivated_user_is_rejected(client, student, auth_headers):
    student.is_active = False
    student.save()
    response = client.get('/api/auth/me', headers=auth_headers(student))
    assert response.status_code == 401

def test_non_string_credentials_are_rejected(client, student):
    response = client.post('/api/auth/login', json={'email': 123, 'password': 'password123'})
    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['reason'] == 'validation_error'
    assert data['message'] == 'email must be a string'

    response = client.post('/api/auth/login', json={'email': student.email, 'password': ['x']})
    assert response.status_code == 400

    response = client.post('/api/auth/login', json=['not', 'an', 'object'])
    assert response.status_code == 400

def test_register_rejects_non_string_fields(client):
    base = {'email': 'new@example.com', 'password': 'password123', 'name': 'New User'}

    for field, value in (('email', 7), ('name', 42), ('password', 123456), ('roll_number', 99)):
        response = client.post('/api/auth/register', json={**base, field: value})
        assert response.status_code == 400
        assert json.loads(response.data)['message'] == f'{field} must be a string'

    assert User.query.filter_by(email='new@example.com').first() is None

def test_repeated_failures_lock_the_account(app, client, student):
    limit = app.config['MAX_FAILED_LOGIN_ATTEMPTS']
    for _ in range(limit):
        response = client.post('/api/auth/login',
            json={'email': student.email, 'password': 'wrongpassword'})
        assert response.status_code == 401

    db.session.refresh(student)
    assert student.locked_until is not None

    response = client.post('/api/auth/login',
        json={'email': student.email, 'password': 'password123'})
    assert response.status_code == 401
    assert json.loads(response.data)['message'] == 'Account is temporarily locked. Try again later'

def test_lock_expires_and_success_resets_counter(client, student):
    student.failed_login_attempts = 3
    student.locked_until = utcnow() - timedelta(seconds=1)
    student.save()

    response = client.post('/api/auth/login',
        json={'email': student.email, 'password': 'password123'})
    assert response.status_code == 200
    db.session.refresh(student)
    assert student.failed_login_attempts == 0
    assert student.locked_until is None
