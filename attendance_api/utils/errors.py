"""Attendance workflow errors.

Every rejection the verification pipeline can produce has its own class so
callers can tell them apart; ``reason`` is the stable machine-readable code
and ``details`` carries anything the client needs to act on (distance,
confidence).
"""
from typing import Any, Dict, Optional

class AttendanceError(Exception):
    """Base class for errors scoped to a single user action."""

    status_code = 400
    reason = 'error'
    default_message = 'Request could not be completed'

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

class ValidationError(AttendanceError):
    """Malformed input."""
    reason = 'validation_error'
    default_message = 'Invalid input'

class NoFaceDetectedError(ValidationError):
    reason = 'no_face_detected'
    default_message = 'No face detected. Please position your face in front of the camera.'

class MultipleFacesError(ValidationError):
    reason = 'multiple_faces'
    default_message = 'Multiple faces detected. Please ensure only one person is visible.'

class EmbeddingLengthMismatchError(ValidationError):
    reason = 'embedding_length_mismatch'
    default_message = 'Embedding dimensions do not match'

class SessionInvalidError(AttendanceError):
    status_code = 403
    reason = 'invalid_session'
    default_message = 'Invalid or expired session'

class LocationUnavailableError(AttendanceError):
    reason = 'location_unavailable'
    default_message = 'Session has no location anchor; ask your instructor to mark attendance'

class OutsideRangeError(AttendanceError):
    status_code = 403
    reason = 'outside_range'

    def __init__(self, distance: int, radius: int):
        super().__init__(
            f'Outside allowed range ({distance}m from session, limit {radius}m)',
            distance=distance,
            allowed_radius=radius
        )

class FaceNotEnrolledError(AttendanceError):
    reason = 'face_not_enrolled'
    default_message = 'Face not enrolled. Please complete face enrollment first.'

class FaceNotRecognizedError(AttendanceError):
    status_code = 401
    reason = 'face_not_recognized'

    def __init__(self, confidence: float):
        super().__init__('Face not recognized', confidence=round(confidence, 4))
