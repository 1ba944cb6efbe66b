"""Attendance session API: creation, QR codes, rosters and reports."""
from datetime import date, time, timedelta
from flask import Blueprint, Response, current_app, request
from attendance_api import db, limiter
from attendance_api.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_api.models.session import AttendanceSession
from attendance_api.models.user import User, UserRole
from attendance_api.services.attendance_recorder import AttendanceRecorder
from attendance_api.services.qr_service import QRService
from attendance_api.services.report_service import ReportService
from attendance_api.utils.decorators import login_required, teacher_required
from attendance_api.utils.errors import ValidationError
from attendance_api.utils.helpers import error_response, parse_datetime, success_response, utcnow
from attendance_api.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

def _owned_session(session_id: int, user: User) -> AttendanceSession:
    """Load a session the caller may manage, or abort."""
    session = AttendanceSession.get_or_404(session_id)
    if user.role != UserRole.ADMIN and session.teacher_id != user.id:
        raise PermissionError("You can only manage your own sessions")
    return session

def _parse_expiry(data: dict, now):
    """Return the QR expiry from expires_at or expires_in_seconds."""
    config = current_app.config

    if data.get('expires_at'):
        try:
            expires_at = parse_datetime(str(data['expires_at']))
        except ValueError:
            raise ValidationError("expires_at must be an ISO 8601 timestamp")
        if expires_at <= now:
            raise ValidationError("Expiration time must be in the future")
        return expires_at

    seconds = Validator.positive_int(
        data.get('expires_in_seconds', config['QR_CODE_DEFAULT_EXPIRY']),
        'expires_in_seconds',
        minimum=config['QR_CODE_MIN_EXPIRY'],
        maximum=config['QR_CODE_MAX_EXPIRY']
    )
    return now + timedelta(seconds=seconds)

def _parse_schedule(data: dict):
    try:
        session_date = date.fromisoformat(data['session_date']) if data.get('session_date') else utcnow().date()
        start_time = time.fromisoformat(data['start_time']) if data.get('start_time') else None
        end_time = time.fromisoformat(data['end_time']) if data.get('end_time') else None
    except (TypeError, ValueError):
        raise ValidationError("session_date must be YYYY-MM-DD and times HH:MM[:SS]")
    if start_time and end_time and end_time <= start_time:
        raise ValidationError("end_time must be after start_time")
    return session_date, start_time, end_time

@sessions_bp.errorhandler(PermissionError)
def forbidden(error):
    return error_response(str(error), 403)

@sessions_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Session service is running')

@sessions_bp.route('', methods=['POST'])
@teacher_required
@limiter.limit("30 per hour")
def create_session(current_user):
    """Open an attendance window and issue its QR code."""
    data = request.get_json(silent=True) or {}
    name = Validator.string(data, 'name')

    now = utcnow()
    expires_at = _parse_expiry(data, now)
    session_date, start_time, end_time = _parse_schedule(data)

    latitude = longitude = None
    if data.get('latitude') is not None or data.get('longitude') is not None:
        latitude, longitude = Validator.coordinates(data)

    radius = Validator.positive_int(
        data.get('allowed_radius_meters', current_app.config['DEFAULT_ALLOWED_RADIUS_METERS']),
        'allowed_radius_meters',
        maximum=100000
    )

    token, expires_at = QRService.issue_token(expires_at=expires_at, now=now)
    session = AttendanceSession(
        name=name,
        batch=Validator.string(data, 'batch', required=False, max_length=100),
        course=Validator.string(data, 'course', required=False, max_length=100),
        teacher_id=current_user.id,
        session_date=session_date,
        start_time=start_time,
        end_time=end_time,
        qr_code=token,
        qr_expires_at=expires_at,
        is_active=True,
        latitude=latitude,
        longitude=longitude,
        location_name=Validator.string(data, 'location_name', required=False),
        allowed_radius_meters=radius
    )
    db.session.add(session)
    db.session.commit()

    current_app.logger.info(
        'Session %s created by %s, expires %s, anchor=%s',
        session.id, current_user.id, expires_at.isoformat(), session.has_anchor
    )

    return success_response(
        data={
            'session': session.to_dict(include_token=True),
            'qr_image': QRService.render_qr_image(token)
        },
        message=f'Session "{session.name}" has been created successfully.',
        status_code=201
    )

@sessions_bp.route('', methods=['GET'])
@teacher_required
def list_sessions(current_user):
    """Sessions run by the caller; admins see every session."""
    AttendanceSession.expire_stale()

    query = AttendanceSession.query
    if current_user.role != UserRole.ADMIN:
        query = query.filter_by(teacher_id=current_user.id)
    if request.args.get('active') in ('1', 'true'):
        query = query.filter_by(is_active=True)

    page_size = min(
        request.args.get('limit', current_app.config['DEFAULT_PAGE_SIZE'], type=int),
        current_app.config['MAX_PAGE_SIZE']
    )
    sessions = query.order_by(AttendanceSession.created_at.desc()).limit(page_size).all()

    return success_response(data=[s.to_dict(include_token=True) for s in sessions])

@sessions_bp.route('/<int:session_id>', methods=['GET'])
@teacher_required
def get_session(session_id, current_user):
    session = _owned_session(session_id, current_user)
    return success_response(data=session.to_dict(include_token=True))

@sessions_bp.route('/<int:session_id>/qr', methods=['GET'])
@teacher_required
def session_qr(session_id, current_user):
    """Re-render the QR image of a session that is still open."""
    session = _owned_session(session_id, current_user)
    if not session.is_active or session.is_expired():
        return error_response("Session is no longer active", 410)

    return success_response(data={
        'qr_image': QRService.render_qr_image(session.qr_code),
        'expires_at': session.qr_expires_at.isoformat()
    })

@sessions_bp.route('/<int:session_id>/end', methods=['POST'])
@teacher_required
def end_session(session_id, current_user):
    session = _owned_session(session_id, current_user)
    session.end()
    current_app.logger.info('Session %s ended by %s', session.id, current_user.id)
    return success_response(data=session.to_dict(), message='Session ended')

@sessions_bp.route('/validate', methods=['POST'])
@login_required
def validate_qr(current_user):
    """Check a scanned token before the camera step."""
    data = request.get_json(silent=True) or {}
    session = QRService.validate_token(data.get('qr_token'))
    return success_response(data=session.to_dict(), message="QR code is valid")

@sessions_bp.route('/<int:session_id>/attendance', methods=['GET'])
@teacher_required
def session_attendance(session_id, current_user):
    session = _owned_session(session_id, current_user)
    records = session.records.order_by(AttendanceRecord.marked_at).all()
    absent = ReportService.absent_students(session)
    return success_response(data={
        'session': session.to_dict(),
        'records': [r.to_dict() for r in records],
        'total': len(records),
        'absent': [s.to_dict() for s in absent],
        'absent_total': len(absent)
    })

@sessions_bp.route('/<int:session_id>/absent', methods=['GET'])
@teacher_required
def absent_students(session_id, current_user):
    """Students with no record for the session, for manual marking."""
    session = _owned_session(session_id, current_user)
    absent = ReportService.absent_students(session)
    return success_response(data=[s.to_dict() for s in absent])

@sessions_bp.route('/<int:session_id>/attendance', methods=['POST'])
@teacher_required
def mark_manual(session_id, current_user):
    """Instructor marks a student with any status."""
    session = _owned_session(session_id, current_user)
    data = request.get_json(silent=True) or {}
    Validator.require_fields(data, ['student_id', 'status'])

    try:
        status = AttendanceStatus(str(data['status']).lower())
    except ValueError:
        allowed = ', '.join(s.value for s in AttendanceStatus)
        raise ValidationError(f"status must be one of: {allowed}")

    student = db.session.get(User, Validator.positive_int(data['student_id'], 'student_id'))
    if not student or not student.is_student():
        return error_response("Student not found", 404)

    record = AttendanceRecorder.mark_manual(
        session, student, status, current_user,
        notes=Validator.string(data, 'notes', required=False, max_length=1000)
    )
    return success_response(data=record.to_dict(), message='Attendance updated')

@sessions_bp.route('/<int:session_id>/report', methods=['GET'])
@teacher_required
def session_report(session_id, current_user):
    """CSV export of the session's records."""
    session = _owned_session(session_id, current_user)
    csv_data = ReportService.session_csv(session)
    filename = f"attendance-session-{session.id}-{session.session_date.isoformat()}.csv"
    return Response(
        csv_data,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )
