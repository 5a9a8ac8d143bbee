"""
Geometry helpers for geofence-kit.

Provides:
- Geodesic polygon area on a spherical Earth (square meters)
- Polygon and ring classification of GeoJSON documents
- Standardization to a single-feature Polygon FeatureCollection
- Bounding boxes
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Any

from geofence_kit.logger import get_logger
from geofence_kit.validators import iter_document_positions

logger = get_logger(__name__)

# WGS84 semi-major axis, same radius turf.js uses for areas
EARTH_RADIUS = 6378137.0


def ring_area(ring: list) -> float:
    """
    Calculate the area of a ring on a sphere, in square meters.

    Uses the line-integral form from "Some Algorithms for Polygons on a Sphere"
    (Chamberlain & Duquette, JPL 2007): each vertex contributes
    (lon[i+1] - lon[i-1]) * sin(lat[i]). Closed and open rings give the
    same result.

    Args:
        ring: List of [lon, lat] positions in decimal degrees

    Returns:
        Unsigned area in square meters
    """
    n = len(ring)
    if n <= 2:
        return 0.0

    total = 0.0
    for i in range(n):
        lower = ring[i]
        middle = ring[(i + 1) % n]
        upper = ring[(i + 2) % n]
        total += (math.radians(upper[0]) - math.radians(lower[0])) * math.sin(math.radians(middle[1]))

    return abs(total * EARTH_RADIUS * EARTH_RADIUS / 2)


def polygon_area(polygon_coords: list) -> float:
    """
    Area of a Polygon coordinate group: outer ring minus its holes.

    Returns 0 when the coordinates cannot be measured.
    """
    if not polygon_coords:
        return 0.0

    try:
        area = ring_area(polygon_coords[0])
        for hole in polygon_coords[1:]:
            area -= ring_area(hole)
        return area
    except (TypeError, IndexError, KeyError, ValueError) as e:
        logger.warning(f"Error calculating area: {e}")
        return 0.0


# ============================================================
# Classification
# ============================================================

@dataclass
class GeometryInfo:
    """Polygons and rings found in a document."""

    is_multi_polygon: bool = False
    polygons: list[dict[str, Any]] = field(default_factory=list)
    rings: list[dict[str, Any]] = field(default_factory=list)

    @property
    def exterior_count(self) -> int:
        return sum(1 for ring in self.rings if ring["is_exterior"])

    @property
    def interior_count(self) -> int:
        return sum(1 for ring in self.rings if ring["is_interior"])

    def add_polygon(self, polygon_coords: list) -> None:
        polygon_index = len(self.polygons)
        self.polygons.append({
            "index": polygon_index,
            "coordinates": polygon_coords,
            "area": polygon_area(polygon_coords),
        })

        if isinstance(polygon_coords, list):
            for position, ring in enumerate(polygon_coords):
                self.rings.append(make_ring(polygon_index, len(self.rings), ring, position))


def make_ring(polygon_index: int, ring_index: int, coordinates: list, position: int) -> dict[str, Any]:
    """Describe one ring; the first ring of a polygon is its exterior."""
    return {
        "polygon_index": polygon_index,
        "ring_index": ring_index,
        "coordinates": coordinates,
        "num_points": len(coordinates) if isinstance(coordinates, list) else 0,
        "is_exterior": position == 0,
        "is_interior": position > 0,
    }


def _collect_polygons(geometry: Any, info: GeometryInfo) -> None:
    if not geometry or not geometry.get("type"):
        return

    geometry_type = geometry["type"]

    if geometry_type == "MultiPolygon":
        info.is_multi_polygon = True
        for polygon_coords in geometry["coordinates"]:
            info.add_polygon(polygon_coords)
    elif geometry_type == "Polygon":
        info.add_polygon(geometry["coordinates"])
    elif geometry_type == "GeometryCollection":
        for member in geometry["geometries"]:
            _collect_polygons(member, info)
    # Point and line geometries carry no rings


def check_geometry_type(geojson: dict) -> GeometryInfo:
    """
    Find every polygon and ring in a document.

    Polygon indices and ring indices are sequential across the whole
    document, in document order.

    Args:
        geojson: FeatureCollection, Feature or bare geometry

    Returns:
        GeometryInfo with MultiPolygon flag, polygons (with area) and rings
    """
    info = GeometryInfo()
    geojson_type = geojson.get("type")

    if geojson_type == "FeatureCollection":
        for feature in geojson["features"]:
            if feature.get("geometry"):
                _collect_polygons(feature["geometry"], info)
    elif geojson_type == "Feature":
        if geojson.get("geometry"):
            _collect_polygons(geojson["geometry"], info)
    elif geojson_type:
        _collect_polygons(geojson, info)

    return info


def first_feature_geometry(geojson: dict) -> dict | None:
    """Geometry of the first feature of a FeatureCollection, or of a bare Feature."""
    if geojson.get("type") == "FeatureCollection":
        features = geojson.get("features") or []
        feature = features[0] if features else None
    elif geojson.get("type") == "Feature":
        feature = geojson
    else:
        feature = None

    if not feature or not isinstance(feature.get("geometry"), dict):
        return None
    return feature["geometry"]


def extract_multipolygon_rings(geojson: dict) -> list[dict[str, Any]]:
    """
    Read rings straight from the first feature's MultiPolygon.

    Only the first polygon group is inspected. Returns an empty list when
    the first feature is not a MultiPolygon with a usable first group.
    """
    geometry = first_feature_geometry(geojson)
    if not geometry or geometry.get("type") != "MultiPolygon":
        return []

    coordinates = geometry.get("coordinates")
    if not coordinates or not isinstance(coordinates, list):
        return []

    first_polygon = coordinates[0]
    if not isinstance(first_polygon, list) or not first_polygon:
        return []

    logger.debug(f"Manual extraction: found polygon with {len(first_polygon)} rings")
    return [
        make_ring(0, ring_index, ring, ring_index)
        for ring_index, ring in enumerate(first_polygon)
    ]


# ============================================================
# Standardization
# ============================================================

def extract_properties(geojson: dict) -> dict:
    """Properties of the first feature (or the Feature itself), copied."""
    properties = None
    if geojson.get("type") == "FeatureCollection" and geojson.get("features"):
        properties = geojson["features"][0].get("properties")
    elif geojson.get("type") == "Feature":
        properties = geojson.get("properties")
    return copy.deepcopy(properties) if properties else {}


def extract_polygon_coordinates(geojson: dict) -> list | None:
    """
    Find the coordinates of the first polygon in a document.

    Precedence: first feature of a FeatureCollection, a Feature's geometry,
    then a bare Polygon or MultiPolygon. MultiPolygons yield their first
    polygon group.
    """
    geojson_type = geojson.get("type")

    if geojson_type in ("FeatureCollection", "Feature"):
        geometry = first_feature_geometry(geojson)
    elif geojson_type in ("Polygon", "MultiPolygon"):
        geometry = geojson
    else:
        geometry = None

    if not geometry:
        return None

    coordinates = geometry.get("coordinates")
    if geometry.get("type") == "Polygon":
        return coordinates
    if geometry.get("type") == "MultiPolygon" and coordinates:
        return coordinates[0]
    return None


def make_polygon_collection(polygon_coords: list, properties: dict | None = None) -> dict:
    """Wrap Polygon coordinates as a single-feature FeatureCollection."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": properties if properties is not None else {},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": polygon_coords,
                },
            },
        ],
    }


def ensure_standard_format(geojson: dict) -> dict:
    """
    Convert a document to a single-feature FeatureCollection holding one Polygon.

    Properties of the first feature are kept. When no polygon coordinates
    can be found the Polygon holds a single empty ring.
    """
    properties = extract_properties(geojson)
    polygon_coords = extract_polygon_coordinates(geojson)

    if not polygon_coords or not isinstance(polygon_coords, list):
        return make_polygon_collection([[]], properties)

    return make_polygon_collection(copy.deepcopy(polygon_coords), properties)


def bounding_box(geojson: dict) -> list[float] | None:
    """
    [min_lon, min_lat, max_lon, max_lat] over every position, or None if empty.

    Positions without both a longitude and a latitude are skipped.
    """
    positions = [
        position for position in iter_document_positions(geojson)
        if len(position) >= 2
    ]
    if not positions:
        return None

    lons = [position[0] for position in positions]
    lats = [position[1] for position in positions]
    return [min(lons), min(lats), max(lons), max(lats)]
