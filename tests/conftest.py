"""
Pytest configuration and fixtures for geofence-kit tests.

This module provides:
- Test environment variables (set before the package is imported)
- Sample GeoJSON documents
- A sample OSRM route response
"""

import os

import pytest

os.environ.setdefault("LOG_LEVEL", "DEBUG")


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


def _square(min_lng: float, min_lat: float, size: float) -> list:
    """Closed square ring starting at the south-west corner."""
    return [
        [min_lng, min_lat],
        [min_lng + size, min_lat],
        [min_lng + size, min_lat + size],
        [min_lng, min_lat + size],
        [min_lng, min_lat],
    ]


def _collection(*geometries: dict, properties: dict | None = None) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": dict(properties or {}), "geometry": geometry}
            for geometry in geometries
        ],
    }


@pytest.fixture
def square():
    """Factory for closed square rings."""
    return _square


# ============================================================================
# Sample GeoJSON Data Fixtures
# ============================================================================

@pytest.fixture
def sample_polygon():
    """Single-ring Polygon geometry near Tokyo."""
    return {
        "type": "Polygon",
        "coordinates": [_square(139.7, 35.7, 0.1)],
    }


@pytest.fixture
def sample_geofence(sample_polygon):
    """Valid single-feature geofence."""
    return _collection(sample_polygon, properties={"name": "Shinjuku"})


@pytest.fixture
def sample_polygon_with_hole():
    """FeatureCollection whose Polygon has one hole."""
    return _collection(
        {
            "type": "Polygon",
            "coordinates": [
                _square(139.7, 35.7, 0.2),
                _square(139.75, 35.75, 0.05),
            ],
        },
        properties={"name": "Donut"},
    )


@pytest.fixture
def sample_multipolygon():
    """FeatureCollection with a MultiPolygon of two polygons (the first has a hole)."""
    return _collection(
        {
            "type": "MultiPolygon",
            "coordinates": [
                [
                    _square(139.7, 35.7, 0.2),
                    _square(139.75, 35.75, 0.05),
                ],
                [
                    _square(140.0, 36.0, 0.1),
                ],
            ],
        },
        properties={"name": "Islands"},
    )


@pytest.fixture
def sample_three_polygons():
    """FeatureCollection with three single-ring Polygon features."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"zone": index},
                "geometry": {"type": "Polygon", "coordinates": [_square(10.0 + index, 50.0, 0.5)]},
            }
            for index in range(3)
        ],
    }


@pytest.fixture
def sample_z_geofence():
    """Single-ring geofence whose coordinates carry elevation."""
    ring = [[lng, lat, 12.5] for lng, lat in _square(139.7, 35.7, 0.1)]
    return _collection({"type": "Polygon", "coordinates": [ring]}, properties={"name": "Hill"})


# ============================================================================
# Routing Fixtures
# ============================================================================

OSRM_URL = (
    "https://maps.example.com/mapbox-osrm/route/v1/car/"
    "139.7671,35.6812;139.7454,35.6586;139.7010,35.6580"
    "?overview=full&steps=true&geometries=polyline6"
)


@pytest.fixture
def osrm_url():
    return OSRM_URL


@pytest.fixture
def osrm_response():
    """Two-leg OSRM response; the second leg has no geometry of its own."""
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": "_ibE_seK_seK_seK",
                "distance": 8123.4,
                "duration": 1260.2,
                "legs": [
                    {
                        "distance": 3500.0,
                        "duration": 540.0,
                        "geometry": "_ibE_seK",
                        "steps": [
                            {
                                "name": "Chuo-dori",
                                "maneuver": {"instruction": "Head south on Chuo-dori"},
                                "distance": 2000.0,
                                "duration": 300.0,
                                "geometry": "_ibE_seK",
                            },
                            {
                                "name": "",
                                "maneuver": {},
                                "distance": 1500.0,
                                "duration": 240.0,
                                "geometry": "_seK_seK",
                            },
                        ],
                    },
                    {
                        "distance": 4623.4,
                        "duration": 720.2,
                        "steps": [
                            {
                                "name": "Meiji-dori",
                                "maneuver": {"instruction": "Turn right onto Meiji-dori"},
                                "distance": 4623.4,
                                "duration": 720.2,
                                "geometry": "_seK_ibE",
                            },
                        ],
                    },
                ],
            }
        ],
        "waypoints": [
            {"name": "Tokyo Station", "location": [139.7671, 35.6812]},
            {"name": "", "location": [139.7454, 35.6586]},
            {"name": "Shibuya", "location": [139.7010, 35.6580]},
        ],
    }
