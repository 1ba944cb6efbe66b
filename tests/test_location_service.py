"""Tests for haversine distance and geofence checks."""
import pytest

from attendance_api.services.location_service import LocationService

ANCHOR = (12.9716, 77.5946)

@pytest.mark.parametrize('point', [
    (0.0, 0.0),
    ANCHOR,
    (-33.8688, 151.2093),
    (89.9, -179.9),
])
def test_distance_to_self_is_zero(point):
    assert LocationService.calculate_distance(*point, *point) == 0

def test_distance_is_symmetric():
    a = ANCHOR
    b = (13.0827, 80.2707)
    assert LocationService.calculate_distance(*a, *b) == LocationService.calculate_distance(*b, *a)

def test_distance_rounds_to_whole_meters():
    distance = LocationService.calculate_distance(*ANCHOR, 12.9816, 77.5946)
    assert isinstance(distance, int)
    assert abs(distance - 1112) <= 2

def test_student_at_anchor_is_within_range():
    check = LocationService.verify_location(*ANCHOR, *ANCHOR, 150)
    assert check.distance == 0
    assert check.is_within_range is True

def test_student_one_kilometre_away_is_outside_range():
    check = LocationService.verify_location(12.9816, 77.5946, *ANCHOR, 150)
    assert check.distance > 1100
    assert check.is_within_range is False

def test_radius_boundary_is_inclusive():
    distance = LocationService.calculate_distance(12.9726, 77.5946, *ANCHOR)
    assert LocationService.verify_location(12.9726, 77.5946, *ANCHOR, distance).is_within_range
    assert not LocationService.verify_location(12.9726, 77.5946, *ANCHOR, distance - 1).is_within_range

def test_default_radius_is_150():
    check = LocationService.verify_location(*ANCHOR, *ANCHOR)
    assert check.allowed_radius == 150

def test_format_distance():
    assert LocationService.format_distance(120) == '120m'
    assert LocationService.format_distance(1534) == '1.53km'
