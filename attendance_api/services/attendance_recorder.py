"""Attendance Recorder: QR token, geofence and face checks, then upsert."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from flask import current_app

from attendance_api import db
from attendance_api.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_api.models.face_embedding import FaceEmbedding
from attendance_api.models.session import AttendanceSession
from attendance_api.models.user import User
from attendance_api.services.face_service import FaceDetector, FaceMatchResult, FaceService
from attendance_api.services.location_service import LocationCheck, LocationService
from attendance_api.services.qr_service import QRService
from attendance_api.utils.errors import (
    AttendanceError, FaceNotEnrolledError, FaceNotRecognizedError,
    LocationUnavailableError, OutsideRangeError
)
from attendance_api.utils.helpers import utcnow

class VerificationStep(Enum):
    """Pipeline steps, in execution order."""
    QR_CODE = "qr_code"
    GPS_LOCATION = "gps_location"
    FACE_RECOGNITION = "face_recognition"
    RECORD = "record"

@dataclass(frozen=True)
class RecorderSettings:
    """Tunables injected into the recorder."""
    face_match_threshold: float = 0.6
    default_radius_meters: int = 150

    @classmethod
    def from_config(cls, config) -> 'RecorderSettings':
        return cls(
            face_match_threshold=config['FACE_MATCH_THRESHOLD'],
            default_radius_meters=config['DEFAULT_ALLOWED_RADIUS_METERS']
        )

@dataclass
class MarkResult:
    """Successful self-service check-in."""
    record: AttendanceRecord
    session: AttendanceSession
    location: LocationCheck
    face: FaceMatchResult
    detector: str

    def to_dict(self) -> Dict:
        return {
            'record': self.record.to_dict(),
            'session': self.session.to_dict(),
            'location': self.location.to_dict(),
            'face': self.face.to_dict(),
            'detector': self.detector
        }

class AttendanceRecorder:
    """
    Self-service attendance marking.

    Steps, each rejecting on failure:
    1. QR token must belong to exactly one active, unexpired session
    2. Student must be inside the session's geofence
    3. Captured face must match the student's enrolled embedding
    4. Upsert the (session, student) record as present

    Nothing is written unless all three checks pass.
    """

    def __init__(self, settings: RecorderSettings, detector: FaceDetector):
        self.settings = settings
        self.detector = detector

    @classmethod
    def from_app(cls, app=None) -> 'AttendanceRecorder':
        app = app or current_app
        return cls(
            RecorderSettings.from_config(app.config),
            app.extensions['face_detector']
        )

    def radius_for(self, session: AttendanceSession) -> int:
        return session.allowed_radius_meters or self.settings.default_radius_meters

    def check_location(self, session: AttendanceSession, latitude: float,
                       longitude: float) -> LocationCheck:
        """Compare coordinates with the session anchor without enforcing the result."""
        if not session.has_anchor:
            raise LocationUnavailableError()
        return LocationService.verify_location(
            latitude, longitude,
            session.latitude, session.longitude,
            self.radius_for(session)
        )

    def mark(
        self,
        student: User,
        token: str,
        latitude: float,
        longitude: float,
        capture: Dict,
        now: Optional[datetime] = None
    ) -> MarkResult:
        """Run the full pipeline for one scan."""
        now = now or utcnow()
        step = VerificationStep.QR_CODE
        session_id = None

        try:
            session = QRService.validate_token(token, now)
            session_id = session.id

            step = VerificationStep.GPS_LOCATION
            location = self.check_location(session, latitude, longitude)
            if not location.is_within_range:
                raise OutsideRangeError(location.distance, location.allowed_radius)

            step = VerificationStep.FACE_RECOGNITION
            reference = FaceEmbedding.for_student(student.id)
            if reference is None:
                raise FaceNotEnrolledError()

            captured = self.detector.extract(capture)
            match = FaceService.compare(
                reference.embedding, captured, self.settings.face_match_threshold
            )
            if not match.is_match:
                raise FaceNotRecognizedError(match.confidence)

            step = VerificationStep.RECORD
            record = AttendanceRecord.upsert(
                session.id, student.id,
                status=AttendanceStatus.PRESENT,
                marked_at=now,
                face_verified=True,
                verification_confidence=match.confidence,
                student_lat=latitude,
                student_lng=longitude,
                distance_meters=location.distance,
                location_verified=True
            )
            db.session.commit()

        except AttendanceError as e:
            db.session.rollback()
            current_app.logger.warning(
                'Attendance rejected at %s: session=%s student=%s reason=%s',
                step.value, session_id, student.id, e.reason
            )
            raise
        except Exception:
            db.session.rollback()
            current_app.logger.exception(
                'Attendance failed at %s: session=%s student=%s',
                step.value, session_id, student.id
            )
            raise

        current_app.logger.info(
            'Attendance marked: session=%s student=%s distance=%sm confidence=%.3f detector=%s',
            session.id, student.id, location.distance, match.confidence, self.detector.kind
        )

        return MarkResult(
            record=record,
            session=session,
            location=location,
            face=match,
            detector=self.detector.kind
        )

    @staticmethod
    def mark_manual(
        session: AttendanceSession,
        student: User,
        status: AttendanceStatus,
        marked_by: User,
        notes: str = None
    ) -> AttendanceRecord:
        """Instructor override through the same upsert path, no verification flags."""
        record = AttendanceRecord.upsert(
            session.id, student.id,
            status=status,
            marked_by=marked_by.id,
            notes=notes
        )
        db.session.commit()
        current_app.logger.info(
            'Manual attendance: session=%s student=%s status=%s by=%s',
            session.id, student.id, status.value, marked_by.id
        )
        return record
