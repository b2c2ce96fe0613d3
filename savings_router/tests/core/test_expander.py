import unittest

from savings_router.core.dijkstra import DistanceOracle
from savings_router.core.expander import RouteExpander
from savings_router.core.constants import ORIGIN_RELAXED
from savings_router.models import GraphInput, Route


class TestRouteExpander(unittest.TestCase):

    def setUp(self):
        self.graph = GraphInput.from_tuples(4, [(0, 1, 2), (1, 2, 1), (2, 3, 2), (0, 2, 5), (1, 3, 5)])
        self.oracle = DistanceOracle.from_graph(self.graph)
        self.expander = RouteExpander(self.oracle)

    def test_example_scenario(self):
        expanded = self.expander.expand(Route([1, 2], 5.0), 0, 3)

        self.assertEqual(expanded.edges, [(0, 1), (1, 2), (2, 3)])
        self.assertEqual(expanded.stops, [0, 1, 2, 3])
        self.assertEqual(expanded.total_distance, 5.0)
        self.assertTrue(expanded.is_complete)

    def test_segments_follow_shortest_paths(self):
        expanded = self.expander.expand(Route([2, 1], 7.0), 0, 3)

        self.assertEqual([s.path for s in expanded.segments], [[0, 1, 2], [2, 1], [1, 2, 3]])
        self.assertEqual(expanded.edges, [(0, 1), (1, 2), (2, 1), (1, 2), (2, 3)])
        self.assertEqual(expanded.total_distance, 7.0)

    def test_distance_matches_route_distance(self):
        route = Route([2, 1], self.oracle.route_distance([2, 1], 0, 3))
        expanded = self.expander.expand(route, 0, 3)
        self.assertEqual(expanded.total_distance, route.total_distance)
        self.assertEqual(sum(s.distance for s in expanded.segments), route.total_distance)

    def test_edges_are_contiguous(self):
        expanded = self.expander.expand(Route([2, 1], 7.0), 0, 3)
        for (_, prev_to), (next_from, _) in zip(expanded.edges, expanded.edges[1:]):
            self.assertEqual(prev_to, next_from)

    def test_unreachable_segment_is_skipped(self):
        # Waypoint 2 is cut off; 0 - 1 - 4 is a path
        graph = GraphInput.from_tuples(5, [(0, 1, 1), (1, 4, 1), (2, 3, 1)])
        expander = RouteExpander(DistanceOracle.from_graph(graph))

        with self.assertLogs('savings_router.core.expander', level='WARNING'):
            expanded = expander.expand(Route([2, 1]), 0, 4)

        self.assertEqual(expanded.skipped_segments, [(0, 2)])
        self.assertEqual(expanded.edges, [(0, 1), (1, 4)])
        self.assertEqual(expanded.total_distance, 2.0)
        self.assertFalse(expanded.is_complete)

    def test_origin_is_kept(self):
        expanded = self.expander.expand(Route([1], 3.0, ORIGIN_RELAXED), 0, 3)
        self.assertEqual(expanded.origin, ORIGIN_RELAXED)

    def test_edge_set_is_undirected(self):
        edges = self.expander.edge_set(Route([2, 1]), 0, 3)
        self.assertEqual(edges, frozenset({(0, 1), (1, 2), (2, 3)}))


if __name__ == '__main__':
    unittest.main()
