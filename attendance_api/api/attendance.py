"""Student self-service attendance API."""
from flask import Blueprint, request
from attendance_api.models.attendance import AttendanceRecord
from attendance_api.services.attendance_recorder import AttendanceRecorder
from attendance_api.services.qr_service import QRService
from attendance_api.services.report_service import ReportService
from attendance_api.utils.decorators import student_required
from attendance_api.utils.helpers import success_response
from attendance_api.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/verify-location', methods=['POST'])
@student_required
def verify_location(current_user):
    """Report distance to the session anchor; writes nothing."""
    data = request.get_json(silent=True) or {}
    Validator.require_fields(data, ['qr_token'])
    latitude, longitude = Validator.coordinates(data)

    session = QRService.validate_token(data['qr_token'])
    check = AttendanceRecorder.from_app().check_location(session, latitude, longitude)

    message = "Location verified" if check.is_within_range else "Outside allowed range"
    return success_response(data=check.to_dict(), message=message)

@attendance_bp.route('/mark', methods=['POST'])
@student_required
def mark_attendance(current_user):
    """QR token + location + face capture in one submission."""
    data = request.get_json(silent=True) or {}
    Validator.require_fields(data, ['qr_token'])
    latitude, longitude = Validator.coordinates(data)

    result = AttendanceRecorder.from_app().mark(
        current_user,
        data['qr_token'],
        latitude,
        longitude,
        capture=data
    )

    confidence_pct = round(result.face.confidence * 100)
    return success_response(
        data=result.to_dict(),
        message=f"Attendance marked successfully! ({confidence_pct}% match)"
    )

@attendance_bp.route('/history', methods=['GET'])
@student_required
def history(current_user):
    """The caller's own records, newest first."""
    records = (
        AttendanceRecord.query
        .filter_by(student_id=current_user.id)
        .order_by(AttendanceRecord.marked_at.desc())
        .all()
    )
    return success_response(data=[
        {**r.to_dict(), 'session_name': r.session.name} for r in records
    ])

@attendance_bp.route('/summary', methods=['GET'])
@student_required
def summary(current_user):
    """Status counts, attendance percentage and eligibility for the caller."""
    return success_response(data=ReportService.student_summary(current_user))
