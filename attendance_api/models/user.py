"""User model for authentication and authorization."""
from datetime import datetime
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from attendance_api import db
from attendance_api.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    ADMIN = 'admin'
    TEACHER = 'teacher'
    STUDENT = 'student'

class User(BaseModel):
    """User model for all system users."""

    __tablename__ = 'users'

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    roll_number = db.Column(db.String(50), unique=True, nullable=True, index=True)

    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)

    # Academic metadata
    department = db.Column(db.String(100), nullable=True)
    program = db.Column(db.String(100), nullable=True)
    section = db.Column(db.String(20), nullable=True)
    year = db.Column(db.String(20), nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    failed_login_attempts = db.Column(db.Integer, default=0)
    locked_until = db.Column(db.DateTime, nullable=True)

    # Relationships
    sessions = db.relationship('AttendanceSession', backref='teacher', lazy='dynamic')
    attendance_records = db.relationship(
        'AttendanceRecord', backref='student', lazy='dynamic', cascade='all, delete-orphan',
        foreign_keys='AttendanceRecord.student_id'
    )
    face_embedding = db.relationship(
        'FaceEmbedding', backref='student', uselist=False, cascade='all, delete-orphan',
        foreign_keys='FaceEmbedding.student_id'
    )

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until

    def is_teacher(self) -> bool:
        """Teachers and admins can run sessions."""
        return self.role in (UserRole.TEACHER, UserRole.ADMIN)

    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash', 'failed_login_attempts', 'locked_until']
        exclude = (exclude or []) + default_exclude

        result = super().to_dict(exclude=exclude)
        result['role'] = self.role.value if self.role else None
        result['face_enrolled'] = self.face_embedding is not None

        return result

    def __repr__(self) -> str:
        return f'<User {self.email}>'
