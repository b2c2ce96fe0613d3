from itertools import combinations

from savings_router.core.selector import RouteSelector
from savings_router.core.types import SolveResult


class RouteStatsService:
    """
    Service for calculating statistics about planned routes.
    """

    @staticmethod
    def add_statistics(result: SolveResult) -> SolveResult:
        """
        Add summary statistics to the result.

        Args:
            result: The solve result to enrich

        Returns:
            The same result, with ``statistics`` updated in place
        """
        if result.statistics is None:
            result.statistics = {}

        coverage = [len(waypoints) for waypoints in result.waypoint_routes]
        edge_sets = [
            frozenset((min(u, v), max(u, v)) for u, v in edges)
            for edges in result.routes
        ]

        similarities = [
            RouteSelector.jaccard_similarity(a, b) for a, b in combinations(edge_sets, 2)
        ]

        result.statistics.update({
            'total_routes': len(result.routes),
            'total_distance': result.total_distance,
            'coverage': coverage,
            'max_coverage': max(coverage, default=0),
            'mean_pairwise_similarity': sum(similarities) / len(similarities) if similarities else None,
        })
        result.statistics.setdefault(
            'skipped_segments',
            sum(len(route.get('skipped_segments', [])) for route in result.detailed_routes)
        )
        return result
