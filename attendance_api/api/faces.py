"""Face enrollment API."""
from flask import Blueprint, current_app, request
from attendance_api import db
from attendance_api.models.face_embedding import FaceEmbedding
from attendance_api.models.user import User
from attendance_api.utils.decorators import teacher_required
from attendance_api.utils.helpers import error_response, success_response
from attendance_api.utils.validators import Validator

faces_bp = Blueprint('faces', __name__)

def _student_or_none(student_id: int) -> User:
    student = db.session.get(User, student_id)
    if student is None or not student.is_student():
        return None
    return student

@faces_bp.route('/enroll', methods=['POST'])
@teacher_required
def enroll(current_user):
    """Store or replace a student's reference embedding."""
    data = request.get_json(silent=True) or {}
    Validator.require_fields(data, ['student_id'])

    student = _student_or_none(Validator.positive_int(data['student_id'], 'student_id'))
    if student is None:
        return error_response("Student not found", 404)

    detector = current_app.extensions['face_detector']
    vector = detector.extract(data)

    record = FaceEmbedding.store(student.id, vector, detector.kind, enrolled_by=current_user.id)
    current_app.logger.info(
        'Face enrolled: student=%s by=%s detector=%s', student.id, current_user.id, detector.kind
    )

    return success_response(data=record.to_dict(), message="Face enrolled successfully", status_code=201)

@faces_bp.route('/<int:student_id>', methods=['GET'])
@teacher_required
def enrollment_status(student_id, current_user):
    student = _student_or_none(student_id)
    if student is None:
        return error_response("Student not found", 404)

    record = FaceEmbedding.for_student(student.id)
    return success_response(data={
        'student_id': student.id,
        'enrolled': record is not None,
        'enrollment': record.to_dict() if record else None
    })

@faces_bp.route('/<int:student_id>', methods=['DELETE'])
@teacher_required
def remove_enrollment(student_id, current_user):
    record = FaceEmbedding.for_student(student_id)
    if record is None:
        return error_response("No enrollment for this student", 404)

    record.delete()
    current_app.logger.info('Face enrollment removed: student=%s by=%s', student_id, current_user.id)
    return success_response(message="Enrollment removed")
