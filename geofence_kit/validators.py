"""
Input validation utilities for geofence-kit.

Provides:
- GeoJSON document shape validation
- Coordinate validation (latitude, longitude)
- A generic walker over nested GeoJSON coordinate arrays, used for
  range checks, elevation checks and elevation stripping

All shape validators return a ValidationResult with success status and error details.
"""

import copy
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from geofence_kit.errors import ErrorCode


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    valid: bool
    error: str | None = None
    code: str | None = None
    value: Any = None  # Parsed/normalized value


# ============================================================
# Coordinate Validation
# ============================================================

def _validate_degrees(value: float | str, field_name: str, limit: float) -> ValidationResult:
    try:
        degrees = float(value)
    except (ValueError, TypeError):
        return ValidationResult(
            valid=False,
            error=f"{field_name} must be a number",
            code=ErrorCode.VALIDATION_ERROR.value,
        )

    if not -limit <= degrees <= limit:
        return ValidationResult(
            valid=False,
            error=f"{field_name} must be between {-limit:g} and {limit:g} (got {degrees})",
            code=ErrorCode.VALIDATION_ERROR.value,
        )

    return ValidationResult(valid=True, value=degrees)


def validate_latitude(value: float | str, field_name: str = "latitude") -> ValidationResult:
    """Check a latitude in decimal degrees (-90 to 90); the float is in `value`."""
    return _validate_degrees(value, field_name, 90)


def validate_longitude(value: float | str, field_name: str = "longitude") -> ValidationResult:
    """Check a longitude in decimal degrees (-180 to 180); the float is in `value`."""
    return _validate_degrees(value, field_name, 180)


# ============================================================
# GeoJSON Document Validation
# ============================================================

VALID_GEOMETRY_TYPES = {
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "GeometryCollection",
}


def is_valid_geojson(geojson: Any) -> ValidationResult:
    """
    Check the top-level shape of a GeoJSON document.

    Only the container is inspected:
    - FeatureCollection must have a 'features' array
    - Feature must have a 'geometry'
    - Anything else must be a known geometry type

    Args:
        geojson: Parsed GeoJSON document

    Returns:
        ValidationResult with the document if valid
    """
    if not isinstance(geojson, dict):
        return ValidationResult(
            valid=False,
            error="GeoJSON must be an object.",
            code=ErrorCode.VALIDATION_ERROR.value,
        )

    geojson_type = geojson.get("type")

    if geojson_type == "FeatureCollection":
        if not isinstance(geojson.get("features"), list):
            return ValidationResult(
                valid=False,
                error='FeatureCollection must have a "features" array.',
                code=ErrorCode.VALIDATION_ERROR.value,
            )
    elif geojson_type == "Feature":
        if not isinstance(geojson.get("geometry"), dict):
            return ValidationResult(
                valid=False,
                error='Feature must have a "geometry" property.',
                code=ErrorCode.VALIDATION_ERROR.value,
            )
    elif geojson_type not in VALID_GEOMETRY_TYPES:
        return ValidationResult(
            valid=False,
            error=f'GeoJSON type "{geojson_type}" is not valid.',
            code=ErrorCode.VALIDATION_ERROR.value,
        )

    return ValidationResult(valid=True, value=geojson)


# ============================================================
# Coordinate Walking
# ============================================================

def _is_position(coords: Any) -> bool:
    """A position is a non-empty array whose first element is a number."""
    return (
        isinstance(coords, (list, tuple))
        and len(coords) > 0
        and isinstance(coords[0], (int, float))
        and not isinstance(coords[0], bool)
    )


def iter_positions(coords: Any) -> Iterator[list]:
    """Yield every position in an arbitrarily nested coordinate array."""
    if _is_position(coords):
        yield coords
        return
    if isinstance(coords, (list, tuple)):
        for child in coords:
            yield from iter_positions(child)


def map_positions(coords: Any, transform: Callable[[list], list]) -> Any:
    """Return a new nested coordinate array with `transform` applied to each position."""
    if _is_position(coords):
        return transform(coords)
    if isinstance(coords, (list, tuple)):
        return [map_positions(child, transform) for child in coords]
    return coords


def iter_geometries(geojson: dict) -> Iterator[dict]:
    """
    Yield every geometry reachable from a document.

    FeatureCollection -> features -> geometry, Feature -> geometry, or the
    document itself when it is a bare geometry. GeometryCollection members
    are expanded.
    """
    geojson_type = geojson.get("type")

    if geojson_type == "FeatureCollection":
        candidates = [feature.get("geometry") for feature in geojson.get("features") or [] if feature]
    elif geojson_type == "Feature":
        candidates = [geojson.get("geometry")]
    else:
        candidates = [geojson]

    for geometry in candidates:
        if not geometry:
            continue
        if geometry.get("type") == "GeometryCollection":
            for member in geometry.get("geometries") or []:
                yield from iter_geometries(member)
        else:
            yield geometry


def iter_document_positions(geojson: dict) -> Iterator[list]:
    """Yield every position of every geometry in a document."""
    for geometry in iter_geometries(geojson):
        coords = geometry.get("coordinates")
        if coords:
            yield from iter_positions(coords)


def any_position(geojson: dict, predicate: Callable[[list], bool]) -> bool:
    """True as soon as one position in the document satisfies `predicate`."""
    return any(predicate(position) for position in iter_document_positions(geojson))


def is_out_of_range(position: list) -> bool:
    """True when a position's longitude or latitude is outside the WGS84 range."""
    return (
        not validate_longitude(position[0]).valid
        or len(position) < 2
        or not validate_latitude(position[1]).valid
    )


def has_z_coordinate(position: list) -> bool:
    return len(position) > 2


def has_invalid_coordinates(geojson: dict) -> bool:
    """Check whether any coordinate falls outside longitude/latitude bounds."""
    return any_position(geojson, is_out_of_range)


def has_z_coordinates(geojson: dict) -> bool:
    """Check whether any coordinate carries an elevation component."""
    return any_position(geojson, has_z_coordinate)


def strip_z_coordinates(geojson: dict) -> dict:
    """
    Return a deep copy of the document with every position truncated to [lon, lat].

    The input document is never modified.
    """
    stripped = copy.deepcopy(geojson)
    for geometry in iter_geometries(stripped):
        if "coordinates" in geometry:
            geometry["coordinates"] = map_positions(
                geometry["coordinates"],
                lambda position: list(position[:2]),
            )
    return stripped
