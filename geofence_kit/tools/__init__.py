"""
Tools for geofence-kit.

Modules:
    geometry: Area, classification and standardization helpers
    geofence: Geofence validation and repairs
    polyline: Encoded polyline codec and GeoJSON conversion
    routing: OSRM route extraction
    comparison: Geofence comparison
"""

from geofence_kit.tools.geofence import (
    validate_geofence,
    convert_to_single_ring,
    select_polygon,
    select_visible_polygons,
    remove_z_coordinates,
)

from geofence_kit.tools.polyline import (
    decode_polyline,
    encode_polyline,
    polyline_to_geojson,
    polyline_to_polygon,
    geojson_to_polyline,
    decode_to_geojson,
)

from geofence_kit.tools.routing import (
    extract_polyline_from_url,
    extract_parameters_from_url,
)

from geofence_kit.tools.comparison import (
    compare_geofences,
)

__all__ = [
    # Geofence
    "validate_geofence",
    "convert_to_single_ring",
    "select_polygon",
    "select_visible_polygons",
    "remove_z_coordinates",
    # Polyline
    "decode_polyline",
    "encode_polyline",
    "polyline_to_geojson",
    "polyline_to_polygon",
    "geojson_to_polyline",
    "decode_to_geojson",
    # Routing
    "extract_polyline_from_url",
    "extract_parameters_from_url",
    # Comparison
    "compare_geofences",
]
