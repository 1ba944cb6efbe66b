"""Authentication service for user management."""
from datetime import timedelta
from typing import Optional, Tuple
from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token
from attendance_api import db
from attendance_api.models.user import User, UserRole
from attendance_api.utils.helpers import utcnow
from attendance_api.utils.validators import Validator

class AuthService:

    @staticmethod
    def _tokens_for(user: User) -> dict:
        claims = {'role': user.role.value}
        return {
            "access_token": create_access_token(identity=str(user.id), additional_claims=claims),
            "refresh_token": create_refresh_token(identity=str(user.id)),
            "user": user.to_dict()
        }

    @staticmethod
    def _record_failed_login(user: User, now) -> None:
        """Count a bad password; lock the account once the limit is reached."""
        config = current_app.config
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        if user.failed_login_attempts >= config["MAX_FAILED_LOGIN_ATTEMPTS"]:
            user.locked_until = now + timedelta(minutes=config["LOGIN_LOCKOUT_MINUTES"])
            user.failed_login_attempts = 0
            current_app.logger.warning("Account %s locked until %s", user.id, user.locked_until.isoformat())
        db.session.commit()

    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user:
            return None, "Invalid email or password"

        now = utcnow()
        if user.is_locked(now):
            return None, "Account is temporarily locked. Try again later"

        if not user.check_password(password):
            AuthService._record_failed_login(user, now)
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login = now
        db.session.commit()

        return AuthService._tokens_for(user), None

    @staticmethod
    def register(email: str, password: str, name: str, **profile) -> Tuple[Optional[dict], Optional[str]]:
        """Register a new student account."""
        if not all([email, password, name]):
            return None, "Email, password and name are required"

        if not all(isinstance(value, str) for value in (email, password, name)):
            return None, "Email, password and name must be strings"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        password_check = Validator.validate_password(password)
        if not password_check["is_valid"]:
            return None, password_check["errors"][0]

        if len(name.strip()) < 2:
            return None, "Name must be at least 2 characters long"

        email = email.lower().strip()
        if User.query.filter_by(email=email).first():
            return None, "Email already exists"

        roll_number = (profile.get('roll_number') or '').strip() or None
        if roll_number and User.query.filter_by(roll_number=roll_number).first():
            return None, "Roll number already exists"

        user = User(
            email=email,
            name=name.strip(),
            role=UserRole.STUDENT,
            roll_number=roll_number,
            department=profile.get('department'),
            program=profile.get('program'),
            section=profile.get('section'),
            year=profile.get('year')
        )
        user.set_password(password)
        user.save()

        return user.to_dict(), None

    @staticmethod
    def refresh_token(user_id: int) -> Tuple[Optional[dict], Optional[str]]:
        """Generate new access token."""
        user = db.session.get(User, user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"

        access_token = create_access_token(
            identity=str(user.id), additional_claims={'role': user.role.value}
        )

        return {
            "access_token": access_token,
            "user": user.to_dict()
        }, None
