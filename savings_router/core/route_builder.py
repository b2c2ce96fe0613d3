"""
Greedy chain merging for the separate-depot savings heuristic.
"""
import logging
from typing import Dict, List, Sequence

from savings_router.core.dijkstra import DistanceOracle
from savings_router.core.savings import sort_savings
from savings_router.models import DirectedSaving, Route

logger = logging.getLogger(__name__)


class RouteBuilder:
    """
    Merges singleton routes end-to-start following the savings list.

    Each chain is addressed by an integer handle. Three maps point at handles:
    the chain that ends with a node, the chain that starts with a node and the
    chain that owns a node. A merge rewrites all three before the next saving
    is looked at, and the absorbed handle is never reused.
    """

    def __init__(self, oracle: DistanceOracle, start: int, end: int):
        self.oracle = oracle
        self.start = start
        self.end = end

    def build(
        self,
        customers: Sequence[int],
        savings: Sequence[DirectedSaving],
        sort_savings_first: bool = True
    ) -> List[Route]:
        """
        Build routes from singleton stubs.

        Args:
            customers: Waypoints to route, one singleton chain each.
            savings: Savings to process.
            sort_savings_first: Stable-sort the savings by value before merging,
                so a shuffled input only reorders savings of equal value.

        Returns:
            Surviving non-empty routes in handle order, with total distances.
            Routes with an unreachable leg have an infinite distance.
        """
        if not customers:
            return []

        chains: Dict[int, List[int]] = {}
        head_of: Dict[int, int] = {}
        tail_of: Dict[int, int] = {}
        owner: Dict[int, int] = {}

        for handle, customer in enumerate(customers):
            chains[handle] = [customer]
            head_of[customer] = handle
            tail_of[customer] = handle
            owner[customer] = handle

        ordered = sort_savings(savings) if sort_savings_first else savings
        merges = 0

        for saving in ordered:
            first = tail_of.get(saving.from_idx)
            second = head_of.get(saving.to_idx)
            if first is None or second is None or first == second:
                continue

            first_nodes = chains[first]
            second_nodes = chains[second]
            if any(owner[node] == first for node in second_nodes):
                continue

            del tail_of[saving.from_idx]
            del head_of[saving.to_idx]
            tail_of[second_nodes[-1]] = first
            for node in second_nodes:
                owner[node] = first
            first_nodes.extend(second_nodes)
            del chains[second]
            merges += 1

        routes = []
        for handle in sorted(chains):
            waypoints = chains[handle]
            routes.append(Route(
                waypoints=list(waypoints),
                total_distance=self.oracle.route_distance(waypoints, self.start, self.end)
            ))

        logger.debug(f"Built {len(routes)} routes from {len(customers)} waypoints with {merges} merges")
        return routes
