"""Base configuration shared by every environment."""
import os
from datetime import timedelta

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # Login lockout
    MAX_FAILED_LOGIN_ATTEMPTS = 5
    LOGIN_LOCKOUT_MINUTES = 15

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Face matching
    FACE_MATCH_THRESHOLD = 0.6
    FACE_EMBEDDING_LENGTH = 128
    FACE_DETECTOR = os.environ.get('FACE_DETECTOR', 'client')  # client | mock
    ALLOW_MOCK_FACE_DETECTOR = True

    # Geofencing
    DEFAULT_ALLOWED_RADIUS_METERS = 150

    # QR codes
    QR_CODE_DEFAULT_EXPIRY = 300  # seconds
    QR_CODE_MIN_EXPIRY = 30
    QR_CODE_MAX_EXPIRY = 4 * 60 * 60

    # Pagination
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100
