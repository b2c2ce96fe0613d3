import math
import random
import unittest
from itertools import combinations

from savings_router.core.config import SolveConfig
from savings_router.core.dijkstra import DistanceOracle
from savings_router.core.savings_solver import SavingsRouteSolver
from savings_router.core.selector import RouteSelector
from savings_router.core.types import (
    STATUS_NO_ROUTE, STATUS_SUCCESS, STATUS_TOO_SMALL, validate_solve_result
)
from savings_router.core.variants import ShuffleMode
from savings_router.models import Edge, GraphInput, Route


def ladder_graph() -> GraphInput:
    """Depot 0, depot 7 and three rungs of waypoints in between."""
    return GraphInput.from_tuples(8, [
        (0, 1, 1), (0, 2, 1),
        (1, 2, 1), (1, 3, 2), (2, 4, 2),
        (3, 4, 1), (3, 5, 2), (4, 6, 2),
        (5, 6, 1), (5, 7, 1), (6, 7, 1),
        (1, 4, 3), (2, 3, 3), (3, 6, 3), (4, 5, 3),
    ])


class TestSavingsRouteSolver(unittest.TestCase):

    def setUp(self):
        self.solver = SavingsRouteSolver()
        self.example = GraphInput.from_tuples(4, [(0, 1, 2), (1, 2, 1), (2, 3, 2), (0, 2, 5), (1, 3, 5)])

    def test_example_scenario(self):
        result = self.solver.solve(self.example, n_of_roads=1, config=SolveConfig())

        self.assertEqual(result.status, STATUS_SUCCESS)
        self.assertEqual(result.waypoint_routes, [[1, 2]])
        self.assertEqual(result.routes, [[(0, 1), (1, 2), (2, 3)]])
        self.assertEqual(result.total_distance, 5.0)
        self.assertEqual(result.statistics['savings_count'], 2)
        self.assertEqual(result.statistics['variants'], 20)
        self.assertTrue(validate_solve_result(result))

    def test_selected_routes_are_logged(self):
        with self.assertLogs('savings_router.core.savings_solver', level='INFO') as logs:
            self.solver.solve(self.example, n_of_roads=1, config=SolveConfig())

        self.assertTrue(any('0 -> 1 -> 2 -> 3' in line for line in logs.output))

    def test_too_small_graph(self):
        with self.assertLogs('savings_router.core.savings_solver', level='ERROR'):
            result = self.solver.solve(GraphInput.from_tuples(2, [(0, 1, 1)]), config=SolveConfig())

        self.assertEqual(result.status, STATUS_TOO_SMALL)
        self.assertEqual(result.routes, [])

    def test_no_feasible_route(self):
        graph = GraphInput.from_tuples(4, [(0, 3, 1)])
        result = self.solver.solve(graph, config=SolveConfig())

        self.assertEqual(result.status, STATUS_NO_ROUTE)
        self.assertEqual(result.routes, [])
        self.assertEqual(result.statistics['isolated_waypoints'], [1, 2])

    def test_fixed_seed_is_reproducible(self):
        config = SolveConfig(seed=3, tie_shuffle_only=False)
        first = self.solver.solve(ladder_graph(), n_of_roads=3, config=config)
        second = self.solver.solve(ladder_graph(), n_of_roads=3, config=config)

        self.assertEqual(first.waypoint_routes, second.waypoint_routes)
        self.assertEqual(first.routes, second.routes)

    def test_routes_are_valid(self):
        graph = ladder_graph()
        result = self.solver.solve(graph, n_of_roads=3, config=SolveConfig(tie_shuffle_only=False))
        oracle = DistanceOracle.from_graph(graph)

        self.assertEqual(result.status, STATUS_SUCCESS)
        for waypoints, detailed in zip(result.waypoint_routes, result.detailed_routes):
            self.assertEqual(len(set(waypoints)), len(waypoints))
            self.assertNotIn(0, waypoints)
            self.assertNotIn(7, waypoints)
            segment_sum = sum(segment['distance'] for segment in detailed['segments'])
            self.assertAlmostEqual(segment_sum, oracle.route_distance(waypoints, 0, 7))
            self.assertAlmostEqual(segment_sum, detailed['total_distance'])

    def test_routes_are_ranked_by_coverage(self):
        result = self.solver.solve(ladder_graph(), n_of_roads=3, config=SolveConfig(tie_shuffle_only=False))
        coverage = [len(w) for w in result.waypoint_routes]
        self.assertEqual(coverage, sorted(coverage, reverse=True))

    def test_diverse_selection_without_relaxation(self):
        threshold = 0.3
        config = SolveConfig(min_difference_threshold=threshold, allow_relaxation=False, tie_shuffle_only=False)
        result = self.solver.solve(ladder_graph(), n_of_roads=3, config=config)

        self.assertEqual(result.status, STATUS_SUCCESS)
        edge_sets = [frozenset((min(u, v), max(u, v)) for u, v in edges) for edges in result.routes]
        for a, b in combinations(edge_sets, 2):
            self.assertLessEqual(RouteSelector.jaccard_similarity(a, b), 1 - threshold)

    def test_diverse_selection_fills_request_with_fallbacks(self):
        config = SolveConfig(min_difference_threshold=0.9, shuffle_mode=ShuffleMode.EXHAUSTIVE)
        result = self.solver.solve(ladder_graph(), n_of_roads=3, config=config)

        self.assertEqual(result.status, STATUS_SUCCESS)
        self.assertEqual(len(result.routes), 3)
        self.assertEqual(len(result.statistics['selection_origins']), 3)
        self.assertTrue(validate_solve_result(result))

    def test_partial_and_exhaustive_modes(self):
        for mode in (ShuffleMode.PARTIAL, ShuffleMode.EXHAUSTIVE):
            result = self.solver.solve(ladder_graph(), n_of_roads=2, config=SolveConfig(shuffle_mode=mode))
            self.assertEqual(result.status, STATUS_SUCCESS, mode)
            self.assertEqual(result.statistics['shuffle_mode'], mode.value)

    def test_exhaustive_mode_uses_every_saving(self):
        result = self.solver.solve(
            ladder_graph(), n_of_roads=1, config=SolveConfig(shuffle_mode=ShuffleMode.EXHAUSTIVE)
        )
        # 6 waypoints, all pairs reachable
        self.assertEqual(result.statistics['savings_count'], 30)

    def test_out_of_range_edge_is_rejected(self):
        graph = GraphInput(4, [Edge(0, 1, 1), Edge(1, 2, 1), Edge(2, -1, 1)])
        with self.assertRaises(ValueError):
            self.solver.solve(graph, config=SolveConfig())

    def test_negative_cost_is_rejected(self):
        with self.assertRaises(ValueError):
            self.solver.solve(GraphInput.from_tuples(4, [(0, 1, -1), (1, 3, 1)]), config=SolveConfig())

    def test_euclidean_formula_needs_coordinates(self):
        with self.assertRaises(ValueError):
            self.solver.solve(self.example, config=SolveConfig(savings_formula='euclidean'))

    def test_euclidean_formula(self):
        graph = GraphInput.from_tuples(
            4,
            [(0, 1, 3), (1, 2, 5), (2, 3, 1), (0, 2, 4), (1, 3, 8)],
            coordinates=[(0, 0), (3, 0), (0, 4), (1, 6)]
        )
        config = SolveConfig(savings_formula='euclidean', shuffle_mode=ShuffleMode.EXHAUSTIVE)
        result = self.solver.solve(graph, n_of_roads=1, config=config)

        self.assertEqual(result.status, STATUS_SUCCESS)
        self.assertEqual(result.statistics['savings_formula'], 'euclidean')
        self.assertEqual(result.waypoint_routes, [[1, 2]])

    def test_n_of_roads_defaults_to_config(self):
        result = self.solver.solve(ladder_graph(), config=SolveConfig(n_of_roads=2, tie_shuffle_only=False))
        self.assertLessEqual(len(result.routes), 2)

    def test_penalize_graph(self):
        graph = GraphInput.from_tuples(4, [(0, 1, 2), (1, 2, 1), (2, 3, 2)])
        penalized = self.solver.penalize_graph(graph, {1: 1, 2: 2})

        costs = [edge.cost for edge in penalized.edges]
        # 0-1: factor 3; 1-2: max(3, min(9, 5)); 2-3: min(9, 5)
        self.assertEqual(costs, [6.0, 5.0, 10.0])
        self.assertEqual([edge.cost for edge in graph.edges], [2.0, 1.0, 2.0])

    def test_alternative_routes_are_costed_on_true_distances(self):
        graph = ladder_graph()
        oracle = DistanceOracle.from_graph(graph)
        accepted = [Route([1, 3, 5], oracle.route_distance([1, 3, 5], 0, 7))]

        routes = self.solver.alternative_routes(graph, oracle, SolveConfig(), 5, accepted)

        self.assertTrue(routes)
        for route in routes:
            self.assertFalse(math.isinf(route.total_distance))
            self.assertAlmostEqual(route.total_distance, oracle.route_distance(route.waypoints, 0, 7))

    def test_injected_random_factory(self):
        seeds = []

        def factory(seed):
            seeds.append(seed)
            return random.Random(seed)

        SavingsRouteSolver(rng_factory=factory).solve(
            self.example, config=SolveConfig(seed=100, num_variants=2)
        )
        self.assertEqual(seeds[:2], [100, 101])


if __name__ == '__main__':
    unittest.main()
