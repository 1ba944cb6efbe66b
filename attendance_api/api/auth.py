"""Authentication API."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from attendance_api import limiter
from attendance_api.services.auth_service import AuthService
from attendance_api.utils.decorators import login_required
from attendance_api.utils.helpers import success_response, error_response
from attendance_api.utils.validators import Validator

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Email and password login for every role."""
    data = request.get_json(silent=True)

    if not data or not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    email = Validator.string(data, "email", required=False)
    password = Validator.string(data, "password", required=False, max_length=128, strip=False)

    if not email or not password:
        return error_response("Email and password are required", 400)

    result, error = AuthService.login(email, password)

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Login successful")

@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    """Student self-registration."""
    data = request.get_json(silent=True) or {}

    profile = {
        key: Validator.string(data, key, required=False, max_length=100)
        for key in ("roll_number", "department", "program", "section", "year")
    }

    result, error = AuthService.register(
        Validator.string(data, "email"),
        Validator.string(data, "password", max_length=128, strip=False),
        Validator.string(data, "name"),
        **profile
    )

    if error:
        status = 409 if error.endswith("already exists") else 400
        return error_response(error, status)

    return success_response(data=result, message="Registration successful", status_code=201)

@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    """Exchange a refresh token for a new access token."""
    result, error = AuthService.refresh_token(int(get_jwt_identity()))
    if error:
        return error_response(error, 401)
    return success_response(data=result, message="Token refreshed")

@auth_bp.route("/me", methods=["GET"])
@login_required
def me(current_user):
    """Current user profile."""
    return success_response(data=current_user.to_dict())
