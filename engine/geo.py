# 📦 engine/geo.py
# ─────────────────────────────
# Great-circle distance between two coordinates

from math import radians, sin, cos, sqrt, atan2

EARTH_RADIUS_KM = 6371.0


def haversine_km(a_lat: float, a_lon: float, b_lat: float, b_lon: float) -> float:
    """Calculate haversine distance between two lat/lon points, rounded to 100 m."""
    φ1, φ2 = map(radians, (a_lat, b_lat))
    dφ, dλ = radians(b_lat - a_lat), radians(b_lon - a_lon)
    a = sin(dφ / 2)**2 + cos(φ1) * cos(φ2) * sin(dλ / 2)**2
    return round(EARTH_RADIUS_KM * 2 * atan2(sqrt(a), sqrt(max(0.0, 1 - a))), 1)


def distance_between(preferences, candidate):
    """Distance client → therapist, or None when either side has no coordinates."""
    if not preferences.has_coordinates or not candidate.has_coordinates:
        return None
    return haversine_km(
        preferences.latitude, preferences.longitude,
        candidate.latitude, candidate.longitude,
    )
