"""
Geofence comparison tools for geofence-kit.

Compares two boundary documents: their combined bounds, the area of
each, and the area they share.
"""

from typing import Any

from shapely.errors import GEOSException
from shapely.geometry import mapping, shape
from shapely.validation import make_valid

from geofence_kit.logger import get_logger, OperationLogger
from geofence_kit.tools.geometry import bounding_box, extract_polygon_coordinates, polygon_area
from geofence_kit.validators import map_positions

logger = get_logger(__name__)


def _polygon_coordinates(geojson: dict) -> list | None:
    """First polygon of a document; a lone ring is wrapped into a Polygon."""
    coordinates = extract_polygon_coordinates(geojson)
    if not coordinates or not isinstance(coordinates, list):
        return None

    first = coordinates[0]
    if isinstance(first, list) and first and isinstance(first[0], (int, float)):
        return [coordinates]
    if isinstance(first, list) and first and isinstance(first[0], list):
        return coordinates
    return None


def _shapely_area(geometry) -> float:
    """Spherical area in square meters of the polygonal parts of a shapely geometry."""
    if geometry.is_empty:
        return 0.0
    if geometry.geom_type == "Polygon":
        return polygon_area(mapping(geometry)["coordinates"])
    if hasattr(geometry, "geoms"):
        return sum(_shapely_area(part) for part in geometry.geoms)
    return 0.0


def _to_geojson(geometry) -> dict:
    """GeoJSON mapping of a shapely geometry with list positions."""
    geojson = dict(mapping(geometry))
    if "coordinates" in geojson:
        geojson["coordinates"] = map_positions(geojson["coordinates"], list)
    return geojson


def _combined_bounds(geojson1: dict, geojson2: dict) -> list[float] | None:
    boxes = [box for box in (bounding_box(geojson1), bounding_box(geojson2)) if box]
    if not boxes:
        return None
    return [
        min(box[0] for box in boxes),
        min(box[1] for box in boxes),
        max(box[2] for box in boxes),
        max(box[3] for box in boxes),
    ]


def compare_geofences(geojson1: dict, geojson2: dict) -> dict[str, Any]:
    """
    Compare the first polygon of two geofence documents.

    Args:
        geojson1: First document (FeatureCollection, Feature or geometry)
        geojson2: Second document

    Returns:
        Dictionary containing:
        - bounds: [min_lon, min_lat, max_lon, max_lat] over both documents
        - area1_m2, area2_m2: Area of each polygon in square meters
        - intersection: Shared area as a GeoJSON geometry, or None
        - intersection_area_m2: Area of the shared region in square meters
    """
    with OperationLogger(logger, "compare_geofences") as log:
        result: dict[str, Any] = {
            "bounds": _combined_bounds(geojson1, geojson2),
            "area1_m2": 0.0,
            "area2_m2": 0.0,
            "intersection": None,
            "intersection_area_m2": 0.0,
        }

        coords1 = _polygon_coordinates(geojson1)
        coords2 = _polygon_coordinates(geojson2)
        if coords1 is None or coords2 is None:
            logger.warning("Could not calculate intersection: Invalid polygon geometries")
            log.set_result(result)
            return result

        result["area1_m2"] = polygon_area(coords1)
        result["area2_m2"] = polygon_area(coords2)

        try:
            polygon1 = shape({"type": "Polygon", "coordinates": coords1})
            polygon2 = shape({"type": "Polygon", "coordinates": coords2})
            if not polygon1.is_valid:
                polygon1 = make_valid(polygon1)
            if not polygon2.is_valid:
                polygon2 = make_valid(polygon2)

            shared = polygon1.intersection(polygon2)
        except (GEOSException, ValueError, TypeError) as e:
            logger.warning(f"Error calculating intersection: {e}")
            log.set_result(result)
            return result

        intersection_area = _shapely_area(shared)
        if intersection_area > 0:
            result["intersection"] = _to_geojson(shared)
            result["intersection_area_m2"] = intersection_area

        log.set_result(result)
        return result
