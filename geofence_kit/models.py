"""
Pydantic models for routing service data.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class RouteStep(BaseModel):
    """One maneuver-level segment within a leg."""
    type: str = "step"
    leg_index: int = Field(..., description="Index of the owning leg")
    index: int = Field(..., description="Position of the step within its leg")
    name: str = Field(..., description="Road or step name")
    instruction: str = Field("", description="Maneuver instruction text")
    distance_meters: Optional[float] = Field(None, description="Step distance in meters")
    duration_seconds: Optional[float] = Field(None, description="Step duration in seconds")
    encoded_path: str = Field("", description="Encoded polyline of the step")


class RouteLeg(BaseModel):
    """Path between two consecutive waypoints."""
    type: str = "leg"
    index: int = Field(..., description="Position of the leg within the route")
    start_waypoint_label: str = Field(..., description="Name of the starting waypoint")
    end_waypoint_label: str = Field(..., description="Name of the ending waypoint")
    distance_meters: Optional[float] = Field(None, description="Leg distance in meters")
    duration_seconds: Optional[float] = Field(None, description="Leg duration in seconds")
    encoded_path: str = Field("", description="Encoded polyline of the leg")
    steps: List[RouteStep] = Field(default_factory=list, description="Steps in travel order")


class RouteMetadata(BaseModel):
    """Summary of the first route in a routing response."""
    distance_meters: Optional[float] = None
    duration_seconds: Optional[float] = None
    waypoint_count: int = 0


class RouteCoordinate(BaseModel):
    """A waypoint coordinate parsed from a routing URL."""
    lng: float
    lat: float


class RouteParameters(BaseModel):
    """Request parameters parsed from an OSRM route URL."""
    coordinates: List[RouteCoordinate] = Field(default_factory=list)
    overview: str = "simplified"
    steps: bool = False
    geometries: str = "polyline"
    start_time: Optional[str] = None
    approaches: List[str] = Field(default_factory=list)
