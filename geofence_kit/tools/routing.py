"""
Routing service tools for geofence-kit.

Fetches an OSRM route response and flattens it into a leg/step tree whose
entries each carry an encoded polyline, ready to be decoded with
geofence_kit.tools.polyline.

Features:
- URL check before any network call
- Single request by default (see Settings.routing_max_attempts)
- Errors returned as values, never raised
"""

from typing import Any
from urllib.parse import parse_qs, urlsplit

from geofence_kit.config import get_settings
from geofence_kit.errors import (
    ErrorCode,
    InvalidResponseError,
    ValidationError,
    create_error_response,
    handle_api_error,
)
from geofence_kit.logger import get_logger, OperationLogger
from geofence_kit.models import (
    RouteCoordinate,
    RouteLeg,
    RouteMetadata,
    RouteParameters,
    RouteStep,
)
from geofence_kit.retry import fetch_with_retry

logger = get_logger(__name__)
settings = get_settings()


def is_routing_url(url: str | None) -> bool:
    """True when the URL carries every configured routing service marker."""
    return bool(url) and all(marker in url for marker in settings.routing_url_markers)


def _waypoints(data: dict) -> list:
    waypoints = data.get("waypoints")
    return waypoints if isinstance(waypoints, list) else []


def _waypoint_label(waypoints: list, index: int) -> str:
    if not isinstance(waypoints, list) or index >= len(waypoints):
        return f"Waypoint {index}"
    waypoint = waypoints[index]
    name = waypoint.get("name") if isinstance(waypoint, dict) else None
    return name or f"Waypoint {index}"


def _leg_geometry(leg: dict, steps: list) -> str:
    # TODO: concatenate every step's polyline instead of using only the first
    if leg.get("geometry"):
        return leg["geometry"]
    if steps:
        return steps[0].get("geometry") or ""
    return ""


def build_route_segments(data: dict) -> list[RouteLeg]:
    """
    Flatten the first route of an OSRM response into legs and steps.

    Args:
        data: Parsed OSRM response body

    Returns:
        Legs in travel order, each with its steps
    """
    route = data["routes"][0]
    waypoints = _waypoints(data)
    segments = []

    for leg_index, leg in enumerate(route.get("legs") or []):
        steps = leg.get("steps") or []

        segments.append(RouteLeg(
            index=leg_index,
            start_waypoint_label=_waypoint_label(waypoints, leg_index),
            end_waypoint_label=_waypoint_label(waypoints, leg_index + 1),
            distance_meters=leg.get("distance"),
            duration_seconds=leg.get("duration"),
            encoded_path=_leg_geometry(leg, steps),
            steps=[
                RouteStep(
                    leg_index=leg_index,
                    index=step_index,
                    name=step.get("name") or f"Step {step_index + 1}",
                    instruction=(step.get("maneuver") or {}).get("instruction") or "",
                    distance_meters=step.get("distance"),
                    duration_seconds=step.get("duration"),
                    encoded_path=step.get("geometry") or "",
                )
                for step_index, step in enumerate(steps)
            ],
        ))

    return segments


async def extract_polyline_from_url(url: str) -> dict[str, Any]:
    """
    Fetch an OSRM route and extract its encoded polyline and segments.

    Args:
        url: OSRM route request URL
             Example: "https://example.com/mapbox-osrm/route/v1/car/139.7,35.6;139.8,35.7?steps=true"

    Returns:
        Dictionary containing:
        - success: True
        - encoded_polyline: Geometry of the first route
        - metadata: distance_meters, duration_seconds, waypoint_count
        - route_segments: Legs with their steps
        - response: The parsed response body
        or {"success": False, "error": ..., "code": ...}
    """
    with OperationLogger(logger, "extract_polyline_from_url", url=url) as log:
        try:
            if not is_routing_url(url):
                raise ValidationError("Invalid OSRM API URL", field="url")

            data = await fetch_with_retry(
                url,
                timeout=settings.http_timeout,
                max_attempts=settings.routing_max_attempts,
            )

            routes = data.get("routes") if isinstance(data, dict) else None
            if not routes or not isinstance(routes[0], dict) or not routes[0].get("geometry"):
                raise InvalidResponseError("Invalid API response: Missing route geometry")

            route = routes[0]
            metadata = RouteMetadata(
                distance_meters=route.get("distance"),
                duration_seconds=route.get("duration"),
                waypoint_count=len(_waypoints(data)),
            )
            segments = build_route_segments(data)

            logger.debug(
                f"Extracted {len(segments)} legs from routing response",
                extra={"waypoints": metadata.waypoint_count},
            )

            result = {
                "success": True,
                "encoded_polyline": route["geometry"],
                "metadata": metadata.model_dump(),
                "route_segments": [segment.model_dump() for segment in segments],
                "response": data,
            }
            log.set_result(result)
            return result

        except Exception as e:
            logger.warning(f"Error extracting polyline from URL: {e}", extra={"url": url})
            result = {"success": False, **handle_api_error(e)}
            log.set_result(result)
            return result


def extract_parameters_from_url(url: str) -> dict[str, Any]:
    """
    Parse the request parameters of an OSRM route URL.

    Coordinates are read from the path segment that follows the profile
    name (e.g. ``/route/v1/car/<lng,lat;lng,lat>``).

    Args:
        url: OSRM route request URL

    Returns:
        Dictionary containing coordinates, overview, steps, geometries,
        start_time and approaches, or an error response
    """
    parsed = urlsplit(url or "")
    if not parsed.scheme or not parsed.netloc:
        return create_error_response(
            f"Invalid URL: {url!r}",
            ErrorCode.VALIDATION_ERROR,
        )

    path_parts = parsed.path.split("/")
    coordinates_string = ""
    for i, part in enumerate(path_parts):
        if part in settings.routing_profiles and i + 1 < len(path_parts):
            coordinates_string = path_parts[i + 1]
            break

    try:
        coordinates = []
        for pair in filter(None, coordinates_string.split(";")):
            lng, lat = (float(value) for value in pair.split(",")[:2])
            coordinates.append(RouteCoordinate(lng=lng, lat=lat))
    except ValueError as e:
        logger.warning(f"Error extracting parameters from URL: {e}", extra={"url": url})
        return create_error_response(
            f"Invalid coordinates in URL: {coordinates_string}",
            ErrorCode.INVALID_PARAMETER,
        )

    query = parse_qs(parsed.query)

    def first(name: str) -> str | None:
        values = query.get(name)
        return values[0] if values else None

    approaches = first("approaches")
    parameters = RouteParameters(
        coordinates=coordinates,
        overview=first("overview") or "simplified",
        steps=first("steps") == "true",
        geometries=first("geometries") or "polyline",
        start_time=first("start_time"),
        approaches=approaches.split(";") if approaches else [],
    )
    return parameters.model_dump()
