"""
Encoded polyline tools for geofence-kit.

Implements the Google encoded polyline algorithm at configurable precision
(6 decimal places by default, as returned by OSRM with
``geometries=polyline6``) and conversions between encoded strings and
GeoJSON. Coordinates are always [longitude, latitude]; the encoded form
stores latitude first.
"""

import math
from typing import Any

from geofence_kit.config import get_settings
from geofence_kit.errors import ErrorCode, ValidationError, create_error_response
from geofence_kit.logger import get_logger, OperationLogger

logger = get_logger(__name__)
settings = get_settings()

CHUNK_BITS = 5
CHUNK_MASK = 0x1F
CONTINUATION_BIT = 0x20
ASCII_OFFSET = 63

OUTPUT_LINESTRING = "linestring"
OUTPUT_POLYGON = "polygon"


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one zig-zag varint starting at `index`; returns (value, next_index)."""
    shift = 0
    result = 0
    length = len(encoded)

    while index < length:
        b = ord(encoded[index]) - ASCII_OFFSET
        index += 1
        result |= (b & CHUNK_MASK) << shift
        shift += CHUNK_BITS
        if b < CONTINUATION_BIT:
            break

    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(encoded: str, precision: int | None = None) -> list[list[float]]:
    """
    Decode an encoded polyline string.

    Truncated input never reads past the end of the string; a dangling
    latitude produces one final point with an unchanged longitude.

    Args:
        encoded: Encoded polyline string
        precision: Decimal places used when encoding (default: 6)

    Returns:
        List of [longitude, latitude] coordinates
    """
    if precision is None:
        precision = settings.polyline_precision
    factor = 10 ** precision

    coordinates = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        d_lat, index = _decode_value(encoded, index)
        d_lng, index = _decode_value(encoded, index)
        lat += d_lat
        lng += d_lng
        coordinates.append([lng / factor, lat / factor])

    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1

    chunks = []
    while value >= CONTINUATION_BIT:
        chunks.append(chr((CONTINUATION_BIT | (value & CHUNK_MASK)) + ASCII_OFFSET))
        value >>= CHUNK_BITS
    chunks.append(chr(value + ASCII_OFFSET))

    return "".join(chunks)


def _scale(value: float, factor: int) -> int:
    # Round half up, as JavaScript's Math.round does
    return math.floor(value * factor + 0.5)


def encode_polyline(coordinates: list, precision: int | None = None) -> str:
    """
    Encode [longitude, latitude] coordinates as a polyline string.

    Args:
        coordinates: List of [longitude, latitude] (extra components ignored)
        precision: Decimal places to keep (default: 6)

    Returns:
        Encoded polyline string ("" for no coordinates)
    """
    if precision is None:
        precision = settings.polyline_precision
    factor = 10 ** precision

    chunks = []
    prev_lat = 0
    prev_lng = 0

    for coord in coordinates:
        lng, lat = coord[0], coord[1]
        lat_int = _scale(lat, factor)
        lng_int = _scale(lng, factor)

        chunks.append(_encode_value(lat_int - prev_lat))
        chunks.append(_encode_value(lng_int - prev_lng))

        prev_lat = lat_int
        prev_lng = lng_int

    return "".join(chunks)


def _line_collection(coordinates: list) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {},
                "geometry": {
                    "type": "LineString",
                    "coordinates": coordinates,
                },
            },
        ],
    }


def polyline_to_geojson(encoded: str, precision: int | None = None) -> dict:
    """Decode a polyline into a single-feature LineString FeatureCollection."""
    return _line_collection(decode_polyline(encoded, precision))


def polyline_to_polygon(coordinates: list) -> dict:
    """
    Close a coordinate path into a single-ring Polygon FeatureCollection.

    The first coordinate is appended when the path is not already closed.
    The input list is not modified.

    Raises:
        ValidationError: If no coordinates are given
    """
    if not coordinates:
        raise ValidationError("Cannot build a polygon from an empty path", field="coordinates")

    ring = [list(coord) for coord in coordinates]
    first = ring[0]
    last = ring[-1]
    if first[0] != last[0] or first[1] != last[1]:
        ring.append(list(first))

    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [ring],
                },
            },
        ],
    }


def geojson_to_polyline(geojson: dict, precision: int | None = None) -> str:
    """
    Encode the first LineString of a document.

    Looks at the first LineString feature of a FeatureCollection, a
    LineString Feature, or a bare LineString. Documents without one encode
    to an empty string.
    """
    coordinates: list = []
    geojson_type = geojson.get("type")

    if geojson_type == "FeatureCollection":
        for feature in geojson.get("features") or []:
            geometry = feature.get("geometry") or {}
            if geometry.get("type") == "LineString":
                coordinates = geometry.get("coordinates") or []
                break
    elif geojson_type == "Feature":
        geometry = geojson.get("geometry") or {}
        if geometry.get("type") == "LineString":
            coordinates = geometry.get("coordinates") or []
    elif geojson_type == "LineString":
        coordinates = geojson.get("coordinates") or []

    return encode_polyline(coordinates, precision)


def decode_to_geojson(
    encoded: str,
    precision: int | None = None,
    output: str = OUTPUT_LINESTRING,
) -> dict[str, Any]:
    """
    Decode a user-supplied polyline into GeoJSON for display or export.

    Args:
        encoded: Encoded polyline; surrounding whitespace is ignored
        precision: Decimal places used when encoding (default: 6)
        output: "linestring" for the path or "polygon" for a closed ring

    Returns:
        Dictionary containing:
        - success: True
        - encoded_polyline: The trimmed input
        - coordinates: Decoded [longitude, latitude] list
        - geojson: FeatureCollection in the requested shape
        - output_type: The requested output
        or an error response with success=False
    """
    with OperationLogger(logger, "decode_to_geojson", precision=precision, output=output) as log:
        encoded = (encoded or "").strip()
        if not encoded:
            result = create_error_response(
                "Please enter an encoded polyline string.",
                ErrorCode.VALIDATION_ERROR,
                success=False,
            )
            log.set_result(result)
            return result

        if output not in (OUTPUT_LINESTRING, OUTPUT_POLYGON):
            result = create_error_response(
                f"Invalid output type '{output}'. Must be one of: {OUTPUT_LINESTRING}, {OUTPUT_POLYGON}",
                ErrorCode.INVALID_PARAMETER,
                success=False,
            )
            log.set_result(result)
            return result

        coordinates = decode_polyline(encoded, precision)
        if not coordinates:
            result = create_error_response(
                "No valid coordinates found in the encoded polyline.",
                ErrorCode.VALIDATION_ERROR,
                success=False,
            )
            log.set_result(result)
            return result

        if output == OUTPUT_POLYGON:
            geojson = polyline_to_polygon(coordinates)
        else:
            geojson = _line_collection(coordinates)

        result = {
            "success": True,
            "encoded_polyline": encoded,
            "coordinates": coordinates,
            "geojson": geojson,
            "output_type": output,
        }
        log.set_result(result)
        return result
