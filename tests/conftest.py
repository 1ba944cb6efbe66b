"""Shared fixtures."""
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from attendance_api import create_app, db
from attendance_api.models.face_embedding import FaceEmbedding
from attendance_api.models.session import AttendanceSession
from attendance_api.models.user import User, UserRole
from attendance_api.utils.helpers import utcnow

ANCHOR = (12.9716, 77.5946)
ZEROS = [0.0] * 128

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def make_user(app):
    def _make_user(email, role=UserRole.STUDENT, password='password123', **extra):
        user = User(email=email, name=email.split('@')[0].title(), role=role, **extra)
        user.set_password(password)
        return user.save()
    return _make_user

@pytest.fixture
def teacher(make_user):
    return make_user('teacher@example.com', UserRole.TEACHER)

@pytest.fixture
def admin(make_user):
    return make_user('admin@example.com', UserRole.ADMIN)

@pytest.fixture
def student(make_user):
    return make_user('student@example.com', UserRole.STUDENT, roll_number='CS001')

@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id))
        return {'Authorization': f'Bearer {token}'}
    return _headers

@pytest.fixture
def make_session(teacher):
    def _make_session(token='abc123', expires_in=timedelta(minutes=10), anchor=ANCHOR,
                      radius=150, is_active=True):
        session = AttendanceSession(
            name='Data Structures',
            batch='CS-2024',
            teacher_id=teacher.id,
            session_date=utcnow().date(),
            qr_code=token,
            qr_expires_at=utcnow() + expires_in,
            is_active=is_active,
            latitude=anchor[0] if anchor else None,
            longitude=anchor[1] if anchor else None,
            allowed_radius_meters=radius
        )
        return session.save()
    return _make_session

@pytest.fixture
def enrolled_student(student, teacher):
    FaceEmbedding.store(student.id, ZEROS, 'client', enrolled_by=teacher.id)
    return student
