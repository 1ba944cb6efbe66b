"""Validation utilities for request payloads."""
import math
import re
from typing import Any, Dict, List, Sequence

from attendance_api.utils.errors import ValidationError

class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def require_fields(data: Dict, required_fields: List[str]) -> None:
        """Raise ValidationError naming the first missing field."""
        for field in required_fields:
            if data.get(field) in (None, ''):
                raise ValidationError(f"Missing required field: {field}")

    @staticmethod
    def coordinate(value: Any, name: str, limit: float) -> float:
        """Parse a finite coordinate within [-limit, limit]."""
        if isinstance(value, bool):
            raise ValidationError(f"{name} must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"{name} must be a number")
        if not math.isfinite(number):
            raise ValidationError(f"{name} must be finite")
        if abs(number) > limit:
            raise ValidationError(f"{name} must be between -{limit:g} and {limit:g}")
        return number

    @classmethod
    def coordinates(cls, data: Dict, lat_key: str = 'latitude', lng_key: str = 'longitude'):
        """Return a validated (latitude, longitude) pair."""
        cls.require_fields(data, [lat_key, lng_key])
        return (
            cls.coordinate(data[lat_key], lat_key, 90),
            cls.coordinate(data[lng_key], lng_key, 180),
        )

    @staticmethod
    def vector(value: Any, name: str = 'embedding') -> List[float]:
        """Parse a non-empty list of finite floats."""
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)) or not value:
            raise ValidationError(f"{name} must be a non-empty list of numbers")
        result = []
        for component in value:
            if isinstance(component, bool) or not isinstance(component, (int, float)):
                raise ValidationError(f"{name} must contain only numbers")
            try:
                number = float(component)
            except OverflowError:
                raise ValidationError(f"{name} must contain only finite numbers")
            if not math.isfinite(number):
                raise ValidationError(f"{name} must contain only finite numbers")
            result.append(number)
        return result

    @staticmethod
    def positive_int(value: Any, name: str, minimum: int = 1, maximum: int = None) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"{name} must be an integer")
        if number < minimum:
            raise ValidationError(f"{name} must be at least {minimum}")
        if maximum is not None and number > maximum:
            raise ValidationError(f"{name} must be at most {maximum}")
        return number

    @staticmethod
    def string(data: Dict, key: str, required: bool = True, max_length: int = 255,
               strip: bool = True) -> str:
        """Return ``data[key]`` as a string, or None when optional and absent."""
        value = data.get(key)
        if value is None or value == '':
            if required:
                raise ValidationError(f"Missing required field: {key}")
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{key} must be a string")
        if strip:
            value = value.strip()
        if not value:
            if required:
                raise ValidationError(f"Missing required field: {key}")
            return None
        if len(value) > max_length:
            raise ValidationError(f"{key} must be at most {max_length} characters")
        return value
