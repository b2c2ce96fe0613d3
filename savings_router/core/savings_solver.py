"""
Clarke-Wright savings pipeline with separate start and end depots.

distances -> savings -> randomized variants -> selection -> expansion
"""
import logging
import math
import random
from collections import Counter
from typing import Dict, List, Optional

from savings_router.core.config import SolveConfig
from savings_router.core.dijkstra import DistanceOracle
from savings_router.core.expander import RouteExpander
from savings_router.core.route_builder import RouteBuilder
from savings_router.core.savings import SavingsComputer, SavingsFormula
from savings_router.core.selector import RouteSelector
from savings_router.core.solver import RouteSolver
from savings_router.core.types import STATUS_NO_ROUTE, STATUS_TOO_SMALL, SolveResult
from savings_router.core.variants import RandomFactory, ShuffleMode, VariantGenerator
from savings_router.models import Edge, GraphInput, Route
from savings_router.utils.helpers import detect_isolated_nodes, format_route_for_display
from savings_router import settings as router_settings

logger = logging.getLogger(__name__)


class SavingsRouteSolver(RouteSolver):
    """
    Heuristic solver: every waypoint starts as its own route, routes are merged
    greedily by saving, and the build is repeated with shuffled savings to
    collect a pool of candidates to select from.
    """

    name = 'savings'

    def __init__(
        self,
        rng_factory: RandomFactory = random.Random,
        node_reuse_penalty: float = router_settings.NODE_REUSE_PENALTY,
        max_penalty_factor: float = router_settings.MAX_PENALTY_FACTOR
    ):
        """
        Args:
            rng_factory: Creates the generator for a seed; shared by variant
                generation and route perturbation.
            node_reuse_penalty: Cost multiplier on edges touching a waypoint
                already used by an accepted route, per use.
            max_penalty_factor: Upper bound on that multiplier.
        """
        self.rng_factory = rng_factory
        self.node_reuse_penalty = node_reuse_penalty
        self.max_penalty_factor = max_penalty_factor

    def _savings_computer(self, graph: GraphInput, oracle: DistanceOracle, config: SolveConfig) -> SavingsComputer:
        euclidean = config.savings_formula == SavingsFormula.EUCLIDEAN
        return SavingsComputer(
            oracle,
            graph.start_depot,
            graph.end_depot,
            formula=config.savings_formula,
            coordinates=graph.coordinates,
            edge_costs=graph.edge_costs() if euclidean else None
        )

    def _generator(self, oracle: DistanceOracle, graph: GraphInput, config: SolveConfig, seed: int) -> VariantGenerator:
        return VariantGenerator(
            RouteBuilder(oracle, graph.start_depot, graph.end_depot),
            seed=seed,
            rng_factory=self.rng_factory,
            partial_fraction=config.partial_fraction,
            tie_shuffle_only=config.tie_shuffle_only
        )

    def penalize_graph(self, graph: GraphInput, uses: Dict[int, int]) -> GraphInput:
        """
        Copy of ``graph`` with every edge touching a used waypoint made more expensive.

        A node used ``k`` times gets the factor ``node_reuse_penalty ** k``,
        capped at ``max_penalty_factor``; an edge takes the larger factor of
        its two endpoints.
        """
        def node_factor(node):
            count = uses.get(node, 0)
            if count <= 0:
                return 1.0
            return min(max(self.node_reuse_penalty ** count, 1.0), self.max_penalty_factor)

        edges = [
            Edge(edge.u, edge.v, edge.cost * max(node_factor(edge.u), node_factor(edge.v)))
            for edge in graph.edges
        ]
        return GraphInput(node_count=graph.node_count, edges=edges, coordinates=graph.coordinates)

    def alternative_routes(
        self,
        graph: GraphInput,
        oracle: DistanceOracle,
        config: SolveConfig,
        num_variants: int,
        accepted: List[Route]
    ) -> List[Route]:
        """
        Build candidates on a graph that penalizes the waypoints of ``accepted``.

        The candidates are re-costed on the unpenalized distances; routes with
        an unreachable leg are dropped.
        """
        uses = Counter(node for route in accepted for node in route.waypoints)
        penalized = self.penalize_graph(graph, uses)
        penalized_oracle = DistanceOracle.from_graph(penalized)
        savings = self._savings_computer(penalized, penalized_oracle, config).compute(
            graph.waypoints, positive_only=config.resolve_positive_only()
        )
        generator = self._generator(penalized_oracle, penalized, config, config.seed + num_variants)
        candidates = generator.generate(
            graph.waypoints, savings, num_variants, ShuffleMode.PARTIAL, config.max_attempts
        )

        routes = []
        for candidate in candidates:
            distance = oracle.route_distance(candidate.waypoints, graph.start_depot, graph.end_depot)
            if not math.isinf(distance):
                routes.append(Route(list(candidate.waypoints), distance))
        logger.info(f"Alternative path search produced {len(routes)} candidates for {len(uses)} used waypoints")
        return routes

    def solve(
        self,
        graph: GraphInput,
        n_of_roads: Optional[int] = None,
        config: Optional[SolveConfig] = None
    ) -> SolveResult:
        graph.validate()
        config = config or SolveConfig.from_settings()
        config.validate()
        n_of_roads = n_of_roads if n_of_roads is not None else config.n_of_roads

        if graph.is_too_small:
            logger.error(f"Graph has {graph.node_count} nodes; at least two depots and one waypoint are needed")
            return SolveResult.empty(STATUS_TOO_SMALL, 'Not enough nodes', node_count=graph.node_count)

        start, end = graph.start_depot, graph.end_depot
        customers = graph.waypoints

        oracle = DistanceOracle.from_graph(graph)
        isolated = [node for node in detect_isolated_nodes(graph) if start < node < end]
        if isolated:
            logger.warning(f"Isolated waypoints will not be routed: {isolated}")

        savings = self._savings_computer(graph, oracle, config).compute(
            customers, positive_only=config.resolve_positive_only()
        )
        num_variants = config.resolve_num_variants(len(customers))
        generator = self._generator(oracle, graph, config, config.seed)
        pool = generator.generate(customers, savings, num_variants, config.shuffle_mode, config.max_attempts)

        statistics = {
            'solver': self.name,
            'shuffle_mode': config.shuffle_mode.value,
            'savings_formula': config.savings_formula.value,
            'savings_count': len(savings),
            'variants': num_variants,
            'pool_size': len(pool),
            'isolated_waypoints': isolated,
        }

        if not pool:
            logger.error(f"No feasible route found among {num_variants} variants")
            return SolveResult.empty(STATUS_NO_ROUTE, 'No feasible route found', **statistics)

        expander = RouteExpander(oracle)
        selector = RouteSelector(
            start,
            end,
            rng=self.rng_factory(config.seed),
            allow_relaxation=config.allow_relaxation,
            edge_set_fn=lambda route: expander.edge_set(route, start, end)
        )

        if config.min_difference_threshold > 0:
            selected = selector.select_diverse(
                pool,
                n_of_roads,
                config.min_difference_threshold,
                alternatives=lambda accepted: self.alternative_routes(graph, oracle, config, num_variants, accepted),
                route_distance=lambda waypoints: oracle.route_distance(waypoints, start, end)
            )
        else:
            selected = selector.top(pool, n_of_roads)

        for rank, route in enumerate(selected, start=1):
            logger.info(
                f"Route #{rank} ({route.origin}): {format_route_for_display(route.waypoints, start, end)}, "
                f"distance {route.total_distance:.2f}"
            )

        statistics['selection_origins'] = [route.origin for route in selected]
        expanded = [expander.expand(route, start, end) for route in selected]
        return self.build_result(expanded, statistics)
