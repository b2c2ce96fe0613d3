import logging
from typing import FrozenSet, Tuple

from savings_router.core.dijkstra import DistanceOracle
from savings_router.core.types import ExpandedRoute, RouteSegment
from savings_router.models import Route

logger = logging.getLogger(__name__)


class RouteExpander:
    """
    Turns waypoint sequences into contiguous paths of graph edges.
    """

    def __init__(self, oracle: DistanceOracle):
        self.oracle = oracle

    def expand(self, route: Route, start: int, end: int) -> ExpandedRoute:
        """
        Reconstruct the shortest path of every leg of start -> waypoints -> end.

        A leg without a reconstructable path is recorded in
        ``skipped_segments`` and left out. The next leg then starts from the
        last node actually reached, so the emitted edges stay contiguous.

        Args:
            route: Route to expand.
            start: Start depot index.
            end: End depot index.

        Returns:
            The expanded route.
        """
        stops = [start] + list(route.waypoints) + [end]
        expanded = ExpandedRoute(waypoints=list(route.waypoints), stops=stops, origin=route.origin)

        previous = start
        for current in stops[1:]:
            path = self.oracle.reconstruct_path(previous, current)
            if not path:
                logger.warning(f"Skipping segment {previous} -> {current}: no path")
                expanded.skipped_segments.append((previous, current))
                continue

            segment = RouteSegment(
                from_node=previous,
                to_node=current,
                path=path,
                distance=self.oracle.distance(previous, current)
            )
            expanded.segments.append(segment)
            expanded.edges.extend(segment.edges)
            expanded.total_distance += segment.distance
            previous = current

        return expanded

    def edge_set(self, route: Route, start: int, end: int) -> FrozenSet[Tuple[int, int]]:
        """Undirected set of the graph edges the expanded route runs over."""
        expanded = self.expand(route, start, end)
        return frozenset((min(u, v), max(u, v)) for u, v in expanded.edges)
