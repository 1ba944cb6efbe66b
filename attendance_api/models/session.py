"""Attendance session with QR token and geofence anchor."""
from datetime import datetime
from typing import Optional
from attendance_api import db
from attendance_api.models.base import BaseModel
from attendance_api.utils.helpers import utcnow

class AttendanceSession(BaseModel):
    """One instructor-initiated attendance window."""

    __tablename__ = 'attendance_sessions'

    name = db.Column(db.String(255), nullable=False)
    batch = db.Column(db.String(100), nullable=True)
    course = db.Column(db.String(100), nullable=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Schedule
    session_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=True)
    end_time = db.Column(db.Time, nullable=True)

    # QR token
    qr_code = db.Column(db.String(64), unique=True, nullable=False, index=True)
    qr_expires_at = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Geofence anchor
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    location_name = db.Column(db.String(255), nullable=True)
    allowed_radius_meters = db.Column(db.Integer, nullable=False, default=150)

    records = db.relationship(
        'AttendanceRecord', backref='session', lazy='dynamic',
        cascade='all, delete-orphan', passive_deletes=True
    )

    @property
    def has_anchor(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Expiry is exclusive: the token is dead at qr_expires_at."""
        return (now or utcnow()) >= self.qr_expires_at

    def end(self) -> None:
        self.is_active = False
        db.session.commit()

    @classmethod
    def expire_stale(cls, now: Optional[datetime] = None) -> int:
        """Mark active sessions past their expiry as inactive."""
        now = now or utcnow()
        count = cls.query.filter(
            cls.is_active.is_(True),
            cls.qr_expires_at <= now
        ).update({'is_active': False, 'updated_at': now}, synchronize_session=False)
        db.session.commit()
        return count

    def to_dict(self, include_token: bool = False):
        """Convert to dictionary."""
        data = {
            'id': self.id,
            'name': self.name,
            'batch': self.batch,
            'course': self.course,
            'teacher_id': self.teacher_id,
            'session_date': self.session_date.isoformat(),
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'qr_expires_at': self.qr_expires_at.isoformat(),
            'is_active': self.is_active and not self.is_expired(),
            'location': {
                'latitude': self.latitude,
                'longitude': self.longitude,
                'name': self.location_name,
            } if self.has_anchor else None,
            'allowed_radius_meters': self.allowed_radius_meters,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_token:
            data['qr_code'] = self.qr_code
        return data
