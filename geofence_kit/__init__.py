"""
geofence-kit

Validation and repair of GeoJSON geofences, encoded polyline conversion
and OSRM route extraction.
"""

from geofence_kit.tools import (
    validate_geofence,
    convert_to_single_ring,
    select_polygon,
    select_visible_polygons,
    remove_z_coordinates,
    decode_polyline,
    encode_polyline,
    polyline_to_geojson,
    polyline_to_polygon,
    geojson_to_polyline,
    decode_to_geojson,
    extract_polyline_from_url,
    extract_parameters_from_url,
    compare_geofences,
)

__version__ = "0.1.0"

__all__ = [
    "validate_geofence",
    "convert_to_single_ring",
    "select_polygon",
    "select_visible_polygons",
    "remove_z_coordinates",
    "decode_polyline",
    "encode_polyline",
    "polyline_to_geojson",
    "polyline_to_polygon",
    "geojson_to_polyline",
    "decode_to_geojson",
    "extract_polyline_from_url",
    "extract_parameters_from_url",
    "compare_geofences",
]
