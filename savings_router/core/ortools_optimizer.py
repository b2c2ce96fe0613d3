"""
Route construction using Google OR-Tools.

This module provides the exact-search alternative to the savings heuristic:
a single vehicle travels from the start depot to the end depot and every
waypoint may be dropped at a large penalty, so the search maximizes coverage
first and minimizes distance second.
"""
import logging
from typing import List, Optional

import numpy as np
from ortools.constraint_solver import pywrapcp, routing_enums_pb2

from savings_router.core.config import SolveConfig
from savings_router.core.constants import (
    DISTANCE_SCALING_FACTOR, DROP_PENALTY, MAX_SAFE_DISTANCE, MIN_SAFE_DISTANCE, ORIGIN_ORTOOLS
)
from savings_router.core.dijkstra import DistanceOracle
from savings_router.core.expander import RouteExpander
from savings_router.core.solver import RouteSolver
from savings_router.core.types import STATUS_NO_ROUTE, STATUS_TOO_SMALL, SolveResult
from savings_router.models import GraphInput, Route
from savings_router.utils.helpers import format_route_for_display
from savings_router import settings as router_settings

# Set up logging
logger = logging.getLogger(__name__)


class ORToolsRouteSolver(RouteSolver):
    """
    Start-to-end routing solver using Google OR-Tools. Returns at most one route.
    """

    name = 'ortools'

    def __init__(self, time_limit_seconds: int = router_settings.ORTOOLS_TIME_LIMIT_SECONDS):
        """
        Initialize the solver.

        Args:
            time_limit_seconds: Time limit for the search in seconds.
        """
        self.time_limit_seconds = time_limit_seconds

    @staticmethod
    def scale_distance(raw_distance: float) -> int:
        """Integer arc cost for OR-Tools; unreachable pairs get the capped maximum."""
        if np.isinf(raw_distance) or np.isnan(raw_distance):
            return int(MAX_SAFE_DISTANCE * DISTANCE_SCALING_FACTOR)
        return int(max(min(raw_distance, MAX_SAFE_DISTANCE), MIN_SAFE_DISTANCE) * DISTANCE_SCALING_FACTOR)

    def find_route(self, oracle: DistanceOracle, start: int, end: int) -> Optional[List[int]]:
        """
        Run the routing search on the shortest-path distances.

        Returns:
            The visited waypoints in order, or None if no solution was found.
        """
        num_nodes = oracle.node_count
        manager = pywrapcp.RoutingIndexManager(num_nodes, 1, [start], [end])

        # Create Routing Model
        routing = pywrapcp.RoutingModel(manager)

        def distance_callback(from_index, to_index):
            """Returns the scaled distance between the two nodes."""
            from_node = manager.IndexToNode(from_index)
            to_node = manager.IndexToNode(to_index)
            return self.scale_distance(oracle.distance_matrix[from_node, to_node])

        transit_callback_index = routing.RegisterTransitCallback(distance_callback)
        routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

        # Every waypoint is optional; dropping one costs more than any detour
        for node in range(num_nodes):
            if node in (start, end):
                continue
            routing.AddDisjunction([manager.NodeToIndex(node)], DROP_PENALTY)

        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        search_parameters.first_solution_strategy = (
            routing_enums_pb2.FirstSolutionStrategy.PATH_CHEAPEST_ARC
        )
        search_parameters.local_search_metaheuristic = (
            routing_enums_pb2.LocalSearchMetaheuristic.GUIDED_LOCAL_SEARCH
        )
        search_parameters.time_limit.seconds = self.time_limit_seconds

        solution = routing.SolveWithParameters(search_parameters)
        if not solution:
            return None

        waypoints = []
        index = solution.Value(routing.NextVar(routing.Start(0)))
        while not routing.IsEnd(index):
            waypoints.append(manager.IndexToNode(index))
            index = solution.Value(routing.NextVar(index))
        return waypoints

    def solve(
        self,
        graph: GraphInput,
        n_of_roads: Optional[int] = None,
        config: Optional[SolveConfig] = None
    ) -> SolveResult:
        graph.validate()
        if graph.is_too_small:
            logger.error(f"Graph has {graph.node_count} nodes; at least two depots and one waypoint are needed")
            return SolveResult.empty(STATUS_TOO_SMALL, 'Not enough nodes', node_count=graph.node_count)

        start, end = graph.start_depot, graph.end_depot
        oracle = DistanceOracle.from_graph(graph)
        statistics = {'solver': self.name, 'time_limit_seconds': self.time_limit_seconds}

        if not oracle.is_reachable(start, end):
            logger.error(f"End depot {end} is unreachable from start depot {start}")
            return SolveResult.empty(STATUS_NO_ROUTE, 'Depots are not connected', **statistics)

        waypoints = self.find_route(oracle, start, end)
        if waypoints is None:
            logger.error("OR-Tools found no solution")
            return SolveResult.empty(STATUS_NO_ROUTE, 'No solution found!', **statistics)

        # Waypoints the search kept although they can't be reached carry the capped cost
        reachable = [node for node in waypoints if oracle.is_reachable(start, node)]
        if not reachable:
            logger.error("OR-Tools route contains no reachable waypoint")
            return SolveResult.empty(STATUS_NO_ROUTE, 'No reachable waypoint', **statistics)

        route = Route(reachable, oracle.route_distance(reachable, start, end), ORIGIN_ORTOOLS)
        logger.info(
            f"OR-Tools route {format_route_for_display(route.waypoints, start, end)} covers "
            f"{route.coverage} waypoints, distance {route.total_distance:.2f}"
        )

        statistics['dropped_waypoints'] = [node for node in graph.waypoints if node not in set(reachable)]
        statistics['selection_origins'] = [route.origin]
        expanded = RouteExpander(oracle).expand(route, start, end)
        return self.build_result([expanded], statistics)
