"""Attendance record model with verification details."""
import enum
from typing import Dict, Any
from sqlalchemy.dialects import postgresql, sqlite
from attendance_api import db
from attendance_api.models.base import BaseModel
from attendance_api.utils.helpers import utcnow

class AttendanceStatus(enum.Enum):
    """Attendance statuses."""
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'
    EXCUSED = 'excused'
    ON_DUTY = 'od'
    MEDICAL_LEAVE = 'ml'

class AttendanceRecord(BaseModel):
    """One row per (session, student) pair."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )

    session_id = db.Column(
        db.Integer, db.ForeignKey('attendance_sessions.id', ondelete='CASCADE'),
        nullable=False, index=True
    )
    student_id = db.Column(
        db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False, index=True
    )
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, default=AttendanceStatus.PRESENT)
    marked_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Face verification
    face_verified = db.Column(db.Boolean, default=False, nullable=False)
    verification_confidence = db.Column(db.Float, nullable=True)

    # Location verification
    student_lat = db.Column(db.Float, nullable=True)
    student_lng = db.Column(db.Float, nullable=True)
    distance_meters = db.Column(db.Integer, nullable=True)
    location_verified = db.Column(db.Boolean, default=False, nullable=False)

    marked_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    UPSERT_FIELDS = (
        'status', 'marked_at', 'face_verified', 'verification_confidence',
        'student_lat', 'student_lng', 'distance_meters', 'location_verified',
        'marked_by', 'notes',
    )

    @classmethod
    def upsert(cls, session_id: int, student_id: int, **values) -> 'AttendanceRecord':
        """Insert or overwrite the record for (session_id, student_id).

        Last write wins: every field in UPSERT_FIELDS is replaced, missing
        ones are reset to their defaults. Does not commit.
        """
        now = utcnow()
        row = {field: values.get(field) for field in cls.UPSERT_FIELDS}
        row['status'] = row['status'] or AttendanceStatus.PRESENT
        row['marked_at'] = row['marked_at'] or now
        row['face_verified'] = bool(row['face_verified'])
        row['location_verified'] = bool(row['location_verified'])

        dialect = db.session.get_bind().dialect.name
        if dialect in ('postgresql', 'sqlite'):
            insert = postgresql.insert if dialect == 'postgresql' else sqlite.insert
            stmt = insert(cls.__table__).values(
                session_id=session_id, student_id=student_id,
                created_at=now, updated_at=now, **row
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=['session_id', 'student_id'],
                set_={**row, 'updated_at': now}
            )
            db.session.execute(stmt)
            db.session.expire_all()
        else:
            record = cls.query.filter_by(session_id=session_id, student_id=student_id).first()
            if record is None:
                record = cls(session_id=session_id, student_id=student_id)
                db.session.add(record)
            for key, value in row.items():
                setattr(record, key, value)
            db.session.flush()

        return cls.query.filter_by(session_id=session_id, student_id=student_id).one()

    def to_dict(self, exclude: list = None) -> Dict[str, Any]:
        result = super().to_dict(exclude=exclude)
        result['status'] = self.status.value if self.status else None
        return result

    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.student_id}>'
