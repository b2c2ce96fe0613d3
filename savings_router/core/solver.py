"""
Common contract of the route solvers.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from savings_router.core.config import SolveConfig
from savings_router.core.types import STATUS_SUCCESS, ExpandedRoute, SolveResult
from savings_router.models import GraphInput

logger = logging.getLogger(__name__)


class RouteSolver(ABC):
    """
    Turns a graph into one or more start-to-end routes.
    """

    name = 'base'

    @abstractmethod
    def solve(
        self,
        graph: GraphInput,
        n_of_roads: Optional[int] = None,
        config: Optional[SolveConfig] = None
    ) -> SolveResult:
        """
        Args:
            graph: Input graph.
            n_of_roads: Number of routes wanted; falls back to ``config.n_of_roads``.
            config: Strategy values; defaults come from the project settings.

        Returns:
            SolveResult with one edge list per selected route.

        Raises:
            ValueError: If the graph or the config is malformed.
        """

    @staticmethod
    def build_result(expanded_routes: List[ExpandedRoute], statistics: Dict[str, Any]) -> SolveResult:
        """Assemble a successful result from expanded routes."""
        detailed_routes = []
        for expanded in expanded_routes:
            detailed_routes.append({
                'waypoints': list(expanded.waypoints),
                'stops': list(expanded.stops),
                'segments': [vars(segment) for segment in expanded.segments],
                'skipped_segments': list(expanded.skipped_segments),
                'total_distance': expanded.total_distance,
                'origin': expanded.origin,
            })

        statistics = dict(statistics)
        statistics['skipped_segments'] = sum(len(e.skipped_segments) for e in expanded_routes)

        return SolveResult(
            status=STATUS_SUCCESS,
            routes=[list(expanded.edges) for expanded in expanded_routes],
            waypoint_routes=[list(expanded.waypoints) for expanded in expanded_routes],
            total_distance=sum(expanded.total_distance for expanded in expanded_routes),
            detailed_routes=detailed_routes,
            statistics=statistics
        )
