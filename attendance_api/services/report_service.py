"""Attendance exports, absentee rosters and student summaries."""
from typing import Dict, List

import pandas as pd
from sqlalchemy import exists

from attendance_api.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_api.models.session import AttendanceSession
from attendance_api.models.user import User, UserRole

REPORT_COLUMNS = [
    'roll_number', 'name', 'email', 'status', 'marked_at',
    'face_verified', 'verification_confidence',
    'location_verified', 'distance_meters',
]

# Attendance percentage bands
ELIGIBLE_PERCENTAGE = 75
AT_RISK_PERCENTAGE = 65

class ReportService:

    @staticmethod
    def session_frame(session: AttendanceSession) -> pd.DataFrame:
        """One row per recorded student, ordered by roll number."""
        rows = (
            AttendanceRecord.query
            .join(User, AttendanceRecord.student_id == User.id)
            .filter(AttendanceRecord.session_id == session.id)
            .with_entities(
                User.roll_number, User.name, User.email,
                AttendanceRecord.status, AttendanceRecord.marked_at,
                AttendanceRecord.face_verified, AttendanceRecord.verification_confidence,
                AttendanceRecord.location_verified, AttendanceRecord.distance_meters
            )
            .all()
        )

        df = pd.DataFrame([tuple(row) for row in rows], columns=REPORT_COLUMNS)
        if not df.empty:
            df['status'] = df['status'].map(lambda s: s.value)
            df = df.sort_values(['roll_number', 'name'], na_position='last')
        return df

    @classmethod
    def session_csv(cls, session: AttendanceSession) -> str:
        return cls.session_frame(session).to_csv(index=False)

    @staticmethod
    def absent_students(session: AttendanceSession) -> List[User]:
        """Active students with no record of any status for ``session``."""
        recorded = exists().where(
            AttendanceRecord.student_id == User.id,
            AttendanceRecord.session_id == session.id
        )
        return (
            User.query
            .filter(User.role == UserRole.STUDENT, User.is_active.is_(True), ~recorded)
            .order_by(User.roll_number, User.name)
            .all()
        )

    @staticmethod
    def eligibility(percentage: int) -> str:
        if percentage >= ELIGIBLE_PERCENTAGE:
            return 'eligible'
        if percentage >= AT_RISK_PERCENTAGE:
            return 'at_risk'
        return 'not_eligible'

    @classmethod
    def student_summary(cls, student: User) -> Dict:
        """Per-status counts, attendance percentage and exam eligibility.

        The percentage counts ``present`` records only, rounded half up.
        ``classes_needed`` is how many further present sessions lift the
        student back to the eligible band.
        """
        rows = (
            AttendanceRecord.query
            .filter_by(student_id=student.id)
            .with_entities(AttendanceRecord.status, AttendanceRecord.marked_at)
            .all()
        )
        df = pd.DataFrame([tuple(row) for row in rows], columns=['status', 'marked_at'])
        counts = df['status'].map(lambda s: s.value).value_counts() if not df.empty else pd.Series(dtype=int)

        total = len(df)
        present = int(counts.get(AttendanceStatus.PRESENT.value, 0))
        percentage = int(present * 100 / total + 0.5) if total else 0

        return {
            'total_sessions': total,
            'present': present,
            'absent': int(counts.get(AttendanceStatus.ABSENT.value, 0)),
            'late': int(counts.get(AttendanceStatus.LATE.value, 0)),
            'excused': int(counts.get(AttendanceStatus.EXCUSED.value, 0)),
            'od': int(counts.get(AttendanceStatus.ON_DUTY.value, 0)),
            'ml': int(counts.get(AttendanceStatus.MEDICAL_LEAVE.value, 0)),
            'attendance_percentage': percentage,
            'eligibility': cls.eligibility(percentage),
            'classes_needed': max(0, 3 * total - 4 * present),
            'last_attendance': df['marked_at'].max().isoformat() if total else None,
        }
