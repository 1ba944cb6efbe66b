"""Tests for QR token issuance and validation."""
import base64
from datetime import timedelta

import pytest

from attendance_api.services.qr_service import QRService
from attendance_api.utils.errors import SessionInvalidError
from attendance_api.utils.helpers import utcnow

def test_issue_token_is_opaque_and_unique():
    now = utcnow()
    token_a, expires_a = QRService.issue_token(expires_in_seconds=60, now=now)
    token_b, _ = QRService.issue_token(expires_in_seconds=60, now=now)
    assert token_a != token_b
    assert len(token_a) >= 32
    assert expires_a == now + timedelta(seconds=60)

def test_render_qr_image_is_png_data_url():
    image = QRService.render_qr_image('abc123')
    prefix = 'data:image/png;base64,'
    assert image.startswith(prefix)
    assert base64.b64decode(image[len(prefix):])[:8] == b'\x89PNG\r\n\x1a\n'

def test_valid_token_before_expiry(make_session):
    session = make_session(token='abc123')
    expires_at = session.qr_expires_at
    found = QRService.validate_token('abc123', now=expires_at - timedelta(seconds=1))
    assert found.id == session.id

def test_token_rejected_after_expiry(make_session):
    session = make_session(token='abc123')
    with pytest.raises(SessionInvalidError):
        QRService.validate_token('abc123', now=session.qr_expires_at + timedelta(seconds=1))

def test_token_rejected_at_exact_expiry(make_session):
    session = make_session(token='abc123')
    with pytest.raises(SessionInvalidError):
        QRService.validate_token('abc123', now=session.qr_expires_at)

def test_unknown_or_blank_token_rejected(make_session):
    make_session(token='abc123')
    for token in ('abc124', '', None, '   '):
        with pytest.raises(SessionInvalidError):
            QRService.validate_token(token)

def test_inactive_session_rejected(make_session):
    make_session(token='abc123', is_active=False)
    with pytest.raises(SessionInvalidError):
        QRService.validate_token('abc123')
