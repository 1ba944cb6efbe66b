"""Geofencing: great-circle distance and radius checks."""
import math
from dataclasses import dataclass
from typing import Dict

EARTH_RADIUS_METERS = 6371000

@dataclass(frozen=True)
class LocationCheck:
    """Outcome of a geofence comparison."""
    distance: int
    allowed_radius: int
    is_within_range: bool

    def to_dict(self) -> Dict:
        return {
            'distance': self.distance,
            'allowed_radius': self.allowed_radius,
            'is_within_range': self.is_within_range
        }

class LocationService:
    """Service for GPS and location verification."""

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
        """Haversine distance between two GPS points, rounded to whole meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return int(round(EARTH_RADIUS_METERS * c))

    @staticmethod
    def verify_location(
        student_lat: float,
        student_lng: float,
        anchor_lat: float,
        anchor_lng: float,
        allowed_radius: int = 150
    ) -> LocationCheck:
        """Check whether a student is within ``allowed_radius`` of the anchor (inclusive)."""
        distance = LocationService.calculate_distance(
            student_lat, student_lng, anchor_lat, anchor_lng
        )
        return LocationCheck(
            distance=distance,
            allowed_radius=allowed_radius,
            is_within_range=distance <= allowed_radius
        )

    @staticmethod
    def format_distance(meters: int) -> str:
        if meters < 1000:
            return f"{meters}m"
        return f"{meters / 1000:.2f}km"
