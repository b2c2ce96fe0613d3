"""
Core data types for the route construction engine.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Optional, Any
import logging

logger = logging.getLogger(__name__)

STATUS_SUCCESS = 'success'
STATUS_TOO_SMALL = 'too_small'
STATUS_NO_ROUTE = 'no_route'
STATUS_INVALID = 'invalid'
STATUS_ERROR = 'error'

VALID_STATUSES = (STATUS_SUCCESS, STATUS_TOO_SMALL, STATUS_NO_ROUTE, STATUS_INVALID, STATUS_ERROR)


@dataclass
class RouteSegment:
    """Shortest-path realization of one leg between two consecutive stops."""
    from_node: int
    to_node: int
    path: List[int]
    distance: float

    @property
    def edges(self) -> List[Tuple[int, int]]:
        return list(zip(self.path, self.path[1:]))


@dataclass
class ExpandedRoute:
    """A selected route turned into a contiguous edge path through the graph."""
    waypoints: List[int]
    stops: List[int] = field(default_factory=list)  # start depot, waypoints, end depot
    edges: List[Tuple[int, int]] = field(default_factory=list)
    segments: List[RouteSegment] = field(default_factory=list)
    skipped_segments: List[Tuple[int, int]] = field(default_factory=list)
    total_distance: float = 0.0
    origin: str = 'savings'

    @property
    def is_complete(self) -> bool:
        return not self.skipped_segments


@dataclass
class SolveResult:
    """Data Transfer Object representing the outcome of one solve call."""
    status: str
    routes: List[List[Tuple[int, int]]] = field(default_factory=list)  # edge pairs per route, depot -> depot
    waypoint_routes: List[List[int]] = field(default_factory=list)
    total_distance: float = 0.0
    detailed_routes: List[Dict[str, Any]] = field(default_factory=list)
    statistics: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    @staticmethod
    def empty(status: str, reason: str, **statistics) -> 'SolveResult':
        """Result without routes, carrying the reason in the statistics."""
        stats = {'reason': reason}
        stats.update(statistics)
        return SolveResult(status=status, statistics=stats)

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> 'SolveResult':
        """
        Creates a SolveResult instance from a dictionary.
        Handles None input and provides default values for missing keys.
        """
        if data is None:
            logger.warning("Attempted to create SolveResult from None data.")
            return SolveResult(
                status=STATUS_ERROR,
                statistics={'error': 'Input data for SolveResult was None'}
            )

        try:
            return SolveResult(
                status=data.get('status', STATUS_ERROR),
                routes=[[tuple(edge) for edge in route] for route in data.get('routes', [])],
                waypoint_routes=[list(route) for route in data.get('waypoint_routes', [])],
                total_distance=data.get('total_distance', 0.0),
                detailed_routes=data.get('detailed_routes', []),
                statistics=data.get('statistics', {})
            )
        except (AttributeError, TypeError) as e:
            logger.error(f"Failed to convert dictionary to SolveResult: {e}", exc_info=True)
            return SolveResult(
                status=STATUS_ERROR,
                statistics={'error': f"Conversion error from dict: {str(e)}"}
            )


def validate_solve_result(result: SolveResult) -> bool:
    """
    Validate the structure of a solve result.

    Returns:
        True if the result is valid.

    Raises:
        ValueError: If the result is invalid with a specific message
    """
    if result.status not in VALID_STATUSES:
        raise ValueError(f"Invalid status value: {result.status}")

    if result.status != STATUS_SUCCESS:
        if result.routes:
            raise ValueError(f"Result with status '{result.status}' must not carry routes")
        return True

    if len(result.routes) != len(result.waypoint_routes):
        raise ValueError("'routes' and 'waypoint_routes' must have the same length")

    for route_idx, edges in enumerate(result.routes):
        for edge_idx, edge in enumerate(edges):
            if len(edge) != 2:
                raise ValueError(f"Edge {edge_idx} of route {route_idx} must be a (u, v) pair")
        for (_, prev_to), (next_from, _) in zip(edges, edges[1:]):
            if prev_to != next_from:
                raise ValueError(f"Route {route_idx} is not contiguous at node {prev_to}")

    for route_idx, waypoints in enumerate(result.waypoint_routes):
        if len(set(waypoints)) != len(waypoints):
            raise ValueError(f"Route {route_idx} visits a waypoint twice")

    return True
