"""
Great-circle distance helpers used to rank delivery candidates.
"""

import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Distance in kilometres between two (latitude, longitude) points in degrees.

    Symmetric in its arguments and zero for identical points.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Clamp rounding noise so asin stays in its domain
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def bounding_box(lat: float, lon: float, radius_km: float) -> tuple[float, float, float, float]:
    """
    Return (min_lat, max_lat, min_lon, max_lon) enclosing a circle of radius_km.

    Used as a cheap SQL prefilter; callers still rank with haversine_km.
    Near the poles the longitude span widens to the full range.
    """
    angular = radius_km / EARTH_RADIUS_KM
    d_lat = math.degrees(angular)
    ratio = math.sin(angular) / max(math.cos(math.radians(lat)), 1e-12)
    # Widest longitude reached by the circle; it wraps a pole when ratio >= 1
    d_lon = 180.0 if ratio >= 1.0 else math.degrees(math.asin(ratio))
    return lat - d_lat, lat + d_lat, lon - d_lon, lon + d_lon


def longitude_ranges(min_lon: float, max_lon: float) -> list[tuple[float, float]]:
    """
    Split a bounding-box longitude span into ranges inside [-180, 180].

    A span that crosses the antimeridian becomes two ranges; one that
    covers the whole circle becomes the full range.
    """
    if max_lon - min_lon >= 360.0:
        return [(-180.0, 180.0)]
    if min_lon < -180.0:
        return [(min_lon + 360.0, 180.0), (-180.0, max_lon)]
    if max_lon > 180.0:
        return [(min_lon, 180.0), (-180.0, max_lon - 360.0)]
    return [(min_lon, max_lon)]
