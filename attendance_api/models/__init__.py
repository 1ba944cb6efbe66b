"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .session import AttendanceSession
from .attendance import AttendanceRecord, AttendanceStatus
from .face_embedding import FaceEmbedding

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'AttendanceSession', 'AttendanceRecord', 'AttendanceStatus',
    'FaceEmbedding'
]
