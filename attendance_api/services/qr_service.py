"""QR token issuance, rendering and validation."""
import base64
import io
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

import qrcode
from qrcode.constants import ERROR_CORRECT_H

from attendance_api.models.session import AttendanceSession
from attendance_api.utils.errors import SessionInvalidError
from attendance_api.utils.helpers import utcnow

class QRService:
    """Service for QR code operations.

    The QR payload is the session's opaque token and nothing else; all
    session details stay server side.
    """

    TOKEN_BYTES = 24

    @classmethod
    def issue_token(
        cls,
        expires_in_seconds: int = None,
        expires_at: datetime = None,
        now: Optional[datetime] = None
    ) -> Tuple[str, datetime]:
        """Return a fresh (token, expires_at) pair."""
        now = now or utcnow()
        if expires_at is None:
            expires_at = now + timedelta(seconds=expires_in_seconds)
        return secrets.token_urlsafe(cls.TOKEN_BYTES), expires_at

    @staticmethod
    def render_qr_image(payload: str) -> str:
        """Render ``payload`` as a PNG data URL."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=ERROR_CORRECT_H,
            box_size=8,
            border=1,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"

    @staticmethod
    def validate_token(token: str, now: Optional[datetime] = None) -> AttendanceSession:
        """Resolve a scanned token to its active, unexpired session.

        Raises SessionInvalidError when the token is unknown, the session
        is inactive, or the current time is not strictly before expiry.
        """
        if not isinstance(token, str) or not token.strip():
            raise SessionInvalidError()

        matches = AttendanceSession.query.filter_by(qr_code=token.strip(), is_active=True).limit(2).all()
        if len(matches) != 1:
            raise SessionInvalidError()

        session = matches[0]
        if session.is_expired(now):
            raise SessionInvalidError('QR code has expired. Ask your instructor for a fresh code.')

        return session
