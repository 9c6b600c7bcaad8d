"""
Tests for great-circle distance helpers.
"""

import pytest
from hypothesis import given, settings, strategies as st

from shared.utils.geo import bounding_box, haversine_km, longitude_ranges


latitudes = st.floats(min_value=-89.0, max_value=89.0, allow_nan=False)
longitudes = st.floats(min_value=-179.0, max_value=179.0, allow_nan=False)


class TestHaversine:

    @given(lat1=latitudes, lon1=longitudes, lat2=latitudes, lon2=longitudes)
    @settings(max_examples=100)
    def test_distance_is_symmetric(self, lat1, lon1, lat2, lon2):
        assert haversine_km(lat1, lon1, lat2, lon2) == pytest.approx(
            haversine_km(lat2, lon2, lat1, lon1), abs=1e-9
        )

    @given(lat=latitudes, lon=longitudes)
    def test_distance_to_self_is_zero(self, lat, lon):
        assert haversine_km(lat, lon, lat, lon) == pytest.approx(0.0, abs=1e-9)

    @given(lat1=latitudes, lon1=longitudes, lat2=latitudes, lon2=longitudes)
    def test_distance_is_bounded_by_half_circumference(self, lat1, lon1, lat2, lon2):
        distance = haversine_km(lat1, lon1, lat2, lon2)
        assert 0.0 <= distance <= 20015.1

    def test_known_distance(self):
        """0.05 degrees of latitude is about 5.56 km."""
        assert haversine_km(12.0, 77.0, 12.05, 77.0) == pytest.approx(5.56, abs=0.01)

    def test_one_degree_of_latitude_is_outside_delivery_radius(self):
        assert haversine_km(12.0, 77.0, 13.0, 77.0) > 10.0


class TestBoundingBox:

    @given(
        lat=st.floats(min_value=-80.0, max_value=80.0, allow_nan=False),
        lon=longitudes,
        d_lat=st.floats(min_value=-0.2, max_value=0.2),
        d_lon=st.floats(min_value=-0.2, max_value=0.2),
    )
    @settings(max_examples=200)
    def test_box_contains_every_point_within_radius(self, lat, lon, d_lat, d_lon):
        """Points inside the radius are never cut by the SQL prefilter."""
        radius = 10.0
        min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, radius)
        point_lat, point_lon = lat + d_lat, lon + d_lon
        if haversine_km(lat, lon, point_lat, point_lon) <= radius - 1e-6:
            assert min_lat <= point_lat <= max_lat
            assert min_lon <= point_lon <= max_lon

    def test_box_is_centered(self):
        min_lat, max_lat, min_lon, max_lon = bounding_box(12.0, 77.0, 10.0)
        assert (min_lat + max_lat) / 2 == pytest.approx(12.0)
        assert (min_lon + max_lon) / 2 == pytest.approx(77.0)
        assert max_lat - 12.0 == pytest.approx(10.0 / 111.195, rel=1e-3)


def _normalize_lon(lon):
    return (lon + 180.0) % 360.0 - 180.0


class TestLongitudeRanges:

    def test_span_inside_the_map_is_kept(self):
        assert longitude_ranges(76.9, 77.1) == [(76.9, 77.1)]

    def test_span_past_east_edge_wraps(self):
        assert longitude_ranges(179.9, 180.1) == [(179.9, 180.0), (-180.0, pytest.approx(-179.9))]

    def test_span_past_west_edge_wraps(self):
        assert longitude_ranges(-180.1, -179.9) == [(pytest.approx(179.9), 180.0), (-180.0, -179.9)]

    def test_polar_box_covers_every_longitude(self):
        min_lat, max_lat, min_lon, max_lon = bounding_box(89.99, 45.0, 10.0)
        assert longitude_ranges(min_lon, max_lon) == [(-180.0, 180.0)]

    @given(
        lat=st.floats(min_value=-89.9, max_value=89.9, allow_nan=False),
        lon=st.floats(min_value=-180.0, max_value=180.0, allow_nan=False),
        d_lat=st.floats(min_value=-0.2, max_value=0.2),
        d_lon=st.floats(min_value=-0.5, max_value=0.5),
    )
    @settings(max_examples=300)
    def test_ranges_contain_every_normalized_point_within_radius(self, lat, lon, d_lat, d_lon):
        radius = 10.0
        min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, radius)
        point_lat, point_lon = lat + d_lat, _normalize_lon(lon + d_lon)
        if abs(point_lat) <= 90.0 and haversine_km(lat, lon, point_lat, point_lon) <= radius - 1e-6:
            assert min_lat <= point_lat <= max_lat
            assert any(lo <= point_lon <= hi for lo, hi in longitude_ranges(min_lon, max_lon))
