"""
Geofence validation and repair tools for geofence-kit.

Checks a GeoJSON boundary document for problems that break geofence
consumers and offers deterministic repairs:
- Coordinates outside the longitude/latitude range (error, not fixable)
- Elevation (z) components (fix: removeZCoordinates)
- MultiPolygon geometries and polygons with holes (fix: convertToSingleRing)
- Several polygons in one document (fix: selectPolygon)

Repairs never modify the document they were computed from.
"""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from geofence_kit.logger import get_logger, OperationLogger
from geofence_kit.tools.geometry import (
    GeometryInfo,
    check_geometry_type,
    ensure_standard_format,
    extract_multipolygon_rings,
    extract_properties,
    first_feature_geometry,
    make_polygon_collection,
)
from geofence_kit.validators import (
    has_invalid_coordinates,
    has_z_coordinates,
    is_valid_geojson,
    strip_z_coordinates,
)

logger = get_logger(__name__)

FIX_REMOVE_Z = "removeZCoordinates"
FIX_SINGLE_RING = "convertToSingleRing"
FIX_SELECT_POLYGON = "selectPolygon"

INVALID_CRS_MESSAGE = (
    "Invalid CRS: Please change your coordinate system using QGIS or other GIS applications"
)


@dataclass
class Fix:
    """A repair offered for a validation warning."""

    description: str
    apply_fn: Callable[[Any], dict] = field(repr=False)
    rings: list[dict[str, Any]] | None = None
    polygons: list[dict[str, Any]] | None = None

    def apply(self, selection: Any = None) -> dict:
        """Return a repaired copy of the document.

        Args:
            selection: Ring index (convertToSingleRing) or polygon index
                (selectPolygon); ignored by removeZCoordinates
        """
        return self.apply_fn(selection)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"description": self.description}
        if self.rings is not None:
            result["rings"] = [
                {k: v for k, v in ring.items() if k != "coordinates"} for ring in self.rings
            ]
        if self.polygons is not None:
            result["polygons"] = [
                {"index": polygon["index"], "area": polygon["area"]} for polygon in self.polygons
            ]
        return result


@dataclass
class GeofenceValidationResult:
    """Outcome of validate_geofence."""

    is_valid: bool
    original_geojson: Any
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    fixes: dict[str, Fix] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary (the original document and fix callables are left out)."""
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "fixes": {key: fix.to_dict() for key, fix in self.fixes.items()},
        }


# ============================================================
# Validation stages
# ============================================================

def _ring_counts_message(info: GeometryInfo, prefix: str) -> str:
    return (
        f"{prefix} {len(info.rings)} rings "
        f"({info.exterior_count} exterior, {info.interior_count} interior/holes)."
    )


def _single_ring_fix(geojson: dict, rings: list[dict[str, Any]]) -> Fix:
    return Fix(
        description="Convert to Polygon with single ring",
        apply_fn=lambda selection: convert_to_single_ring(geojson, selection),
        rings=rings,
    )


def _check_coordinate_range(geojson: dict, result: GeofenceValidationResult) -> GeofenceValidationResult:
    if has_invalid_coordinates(geojson):
        result.add_error(INVALID_CRS_MESSAGE)
    return result


def _check_elevation(geojson: dict, result: GeofenceValidationResult) -> GeofenceValidationResult:
    if has_z_coordinates(geojson):
        result.warnings.append("Geofence has z-coordinates. This can cause compatibility issues.")
        result.fixes[FIX_REMOVE_Z] = Fix(
            description="Remove z-coordinates",
            apply_fn=lambda _selection: remove_z_coordinates(geojson),
        )
    return result


def _check_geometry(geojson: dict, result: GeofenceValidationResult) -> GeofenceValidationResult:
    info = check_geometry_type(geojson)

    if info.is_multi_polygon:
        result.warnings.append(
            "Geofence has MultiPolygon type. It is recommended to use a single Polygon type."
        )
        if info.rings:
            result.warnings.append(_ring_counts_message(info, "Found"))
            result.fixes[FIX_SINGLE_RING] = _single_ring_fix(geojson, info.rings)
    elif len(info.polygons) > 1:
        result.warnings.append(
            f"Geofence has {len(info.polygons)} polygons. It is recommended to use only one polygon."
        )
        result.fixes[FIX_SELECT_POLYGON] = Fix(
            description="Select one polygon",
            apply_fn=lambda selection: select_polygon(geojson, selection),
            polygons=info.polygons,
        )
    elif len(info.rings) > 1:
        result.warnings.append(_ring_counts_message(info, "Geofence has"))
        result.fixes[FIX_SINGLE_RING] = _single_ring_fix(geojson, info.rings)

    return result


def _check_multipolygon_fallback(geojson: dict, result: GeofenceValidationResult) -> GeofenceValidationResult:
    if FIX_SINGLE_RING in result.fixes:
        return result

    rings = extract_multipolygon_rings(geojson)
    if rings:
        result.warnings.append(
            f"Geofence has MultiPolygon type with {len(rings)} rings. "
            "It is recommended to convert to a single Polygon."
        )
        result.fixes[FIX_SINGLE_RING] = _single_ring_fix(geojson, rings)
    return result


_STAGES = (
    _check_coordinate_range,
    _check_elevation,
    _check_geometry,
    _check_multipolygon_fallback,
)


def validate_geofence(geojson: Any) -> GeofenceValidationResult:
    """
    Validate a geofence document and collect the repairs that apply.

    Never raises: unexpected failures become an "Error during validation"
    entry in `errors`.

    Args:
        geojson: Parsed GeoJSON (FeatureCollection, Feature or geometry)

    Returns:
        GeofenceValidationResult with errors, warnings and fixes keyed by
        removeZCoordinates, convertToSingleRing or selectPolygon
    """
    with OperationLogger(logger, "validate_geofence") as log:
        result = GeofenceValidationResult(is_valid=True, original_geojson=geojson)

        if not isinstance(geojson, dict):
            result.add_error("Invalid GeoJSON: Data is incomplete or not a valid object")
            log.set_result(result)
            return result

        shape = is_valid_geojson(geojson)
        if not shape.valid:
            result.add_error(f"Invalid GeoJSON: {shape.error}")
            log.set_result(result)
            return result

        try:
            for stage in _STAGES:
                result = stage(geojson, result)
        except Exception as e:
            logger.error(f"Error during validation: {e}", exc_info=True)
            result.add_error(f"Error during validation: {e}")

        log.set_result(result)
        return result


# ============================================================
# Repairs
# ============================================================

def _is_valid_index(index: Any, size: int) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < size


def remove_z_coordinates(geojson: dict) -> dict:
    """Drop elevation from every coordinate and standardize the result."""
    return ensure_standard_format(strip_z_coordinates(geojson))


def _manual_ring(geojson: dict) -> list | None:
    rings = extract_multipolygon_rings(geojson)
    if rings:
        return rings[0]["coordinates"]

    geometry = first_feature_geometry(geojson)
    if geometry and geometry.get("type") == "Polygon" and geometry.get("coordinates"):
        return geometry["coordinates"][0]
    return None


def convert_to_single_ring(geojson: dict, selected_ring_index: int | None = None) -> dict:
    """
    Reduce a document to a Polygon with exactly one ring.

    Ring choice: `selected_ring_index` when it is a valid index into the
    classified rings, otherwise the first exterior ring, otherwise ring 0.
    When classification finds no rings, the first ring of the first
    feature's MultiPolygon or Polygon is used; failing that, an empty ring.

    Args:
        geojson: Document to convert (left untouched)
        selected_ring_index: Global ring index as reported by the fix

    Returns:
        Single-feature FeatureCollection with a one-ring Polygon
    """
    working = copy.deepcopy(geojson)
    properties = extract_properties(working)
    info = check_geometry_type(geojson)

    selected_ring = None
    if info.rings:
        if _is_valid_index(selected_ring_index, len(info.rings)):
            selected_ring = info.rings[selected_ring_index]["coordinates"]
            logger.debug(f"Using selected ring {selected_ring_index}")
        else:
            exterior = next((ring for ring in info.rings if ring["is_exterior"]), None)
            selected_ring = (exterior or info.rings[0])["coordinates"]
    else:
        logger.warning("No rings found in geometry info, attempting manual extraction")
        selected_ring = _manual_ring(working)

    if not isinstance(selected_ring, list):
        logger.warning("No valid ring found, using empty ring")
        selected_ring = []

    return make_polygon_collection([copy.deepcopy(selected_ring)], properties)


def select_polygon(geojson: dict, selected_index: int | None = None) -> dict:
    """
    Keep one polygon (holes included) out of a multi-polygon document.

    Args:
        geojson: Document to reduce (left untouched)
        selected_index: Polygon index as reported by the fix; invalid or
            missing indices select polygon 0

    Returns:
        Single-feature FeatureCollection with the chosen Polygon
    """
    properties = extract_properties(geojson)
    info = check_geometry_type(geojson)

    if info.polygons:
        polygon_index = selected_index if _is_valid_index(selected_index, len(info.polygons)) else 0
        polygon_coords = copy.deepcopy(info.polygons[polygon_index]["coordinates"])
        logger.debug(f"Using polygon {polygon_index}")
    else:
        logger.warning("No valid polygon found, using empty polygon")
        polygon_coords = [[]]

    return make_polygon_collection(polygon_coords, properties)


def select_visible_polygons(geojson: dict, visible_layers: dict[Any, Any]) -> dict:
    """
    Keep the first polygon whose layer is marked visible.

    Args:
        geojson: Document to reduce
        visible_layers: Mapping of polygon index labels (e.g. "0", "1") to
            visibility flags

    Returns:
        Result of select_polygon for the first visible label
    """
    visible_key = next((key for key, visible in visible_layers.items() if visible), None)

    try:
        selected_index = int(visible_key) if visible_key is not None else None
    except (TypeError, ValueError):
        selected_index = None

    return select_polygon(geojson, selected_index)
