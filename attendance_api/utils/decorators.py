"""Custom decorators for authorization."""
from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from attendance_api import db
from attendance_api.models.user import User, UserRole
from attendance_api.utils.helpers import error_response

def roles_required(*roles: UserRole):
    """Require a JWT whose user has one of ``roles``.

    The resolved user is passed to the view as ``current_user``.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            user = db.session.get(User, int(get_jwt_identity()))

            if not user or not user.is_active:
                return error_response("User not found or inactive", 401)

            if roles and user.role not in roles:
                allowed = ', '.join(role.value for role in roles)
                return error_response(f"Access requires role: {allowed}", 403)

            return f(*args, current_user=user, **kwargs)
        return decorated_function
    return decorator

def login_required(f):
    """Any authenticated, active user."""
    return roles_required()(f)

def admin_required(f):
    return roles_required(UserRole.ADMIN)(f)

def teacher_required(f):
    """Teacher role or higher."""
    return roles_required(UserRole.TEACHER, UserRole.ADMIN)(f)

def student_required(f):
    return roles_required(UserRole.STUDENT)(f)
