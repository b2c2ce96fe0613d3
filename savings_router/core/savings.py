"""
Directed savings for the separate-depot Clarke-Wright heuristic.

A saving ``(i, j)`` scores how much is gained by visiting ``j`` directly after
``i`` instead of routing both waypoints through the depots on their own.
"""
import enum
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from savings_router.core.dijkstra import DistanceOracle
from savings_router.models import DirectedSaving

logger = logging.getLogger(__name__)


class SavingsFormula(str, enum.Enum):
    # dist(i, end) + dist(start, j) - dist(i, j)
    SEPARATE_DEPOT = 'separate_depot'
    # dist(start, i) + dist(j, end) - dist(i, j)
    SWAPPED_DEPOT = 'swapped_depot'
    # euclid(start, i) + euclid(start, j) - edge_cost(i, j)
    EUCLIDEAN = 'euclidean'


def sort_savings(savings: Sequence[DirectedSaving]) -> List[DirectedSaving]:
    """Stable sort by value, largest first. Ties keep their current order."""
    return sorted(savings, key=DirectedSaving.descending)


class SavingsComputer:
    """
    Computes the directed savings list for every ordered pair of waypoints.
    """

    def __init__(
        self,
        oracle: DistanceOracle,
        start: int,
        end: int,
        formula: SavingsFormula = SavingsFormula.SEPARATE_DEPOT,
        coordinates: Optional[Sequence[Tuple[float, float]]] = None,
        edge_costs: Optional[Dict[Tuple[int, int], float]] = None
    ):
        """
        Args:
            oracle: Shortest-path distances of the input graph.
            start: Start depot index.
            end: End depot index.
            formula: Which savings formula to apply.
            coordinates: Node positions, required by ``SavingsFormula.EUCLIDEAN``.
            edge_costs: Direct edge cost per unordered pair, required by
                ``SavingsFormula.EUCLIDEAN``.
        """
        self.oracle = oracle
        self.start = start
        self.end = end
        self.formula = SavingsFormula(formula)
        self.coordinates = coordinates
        self.edge_costs = edge_costs

        if self.formula == SavingsFormula.EUCLIDEAN and (coordinates is None or edge_costs is None):
            raise ValueError("The euclidean savings formula needs node coordinates and direct edge costs")

    def _euclidean(self, a: int, b: int) -> float:
        (ax, ay), (bx, by) = self.coordinates[a], self.coordinates[b]
        return math.hypot(ax - bx, ay - by)

    def saving_value(self, i: int, j: int) -> Optional[float]:
        """
        Saving for visiting ``j`` right after ``i``.

        Returns:
            The saving, or None if any term is unreachable or undefined.
        """
        if self.formula == SavingsFormula.EUCLIDEAN:
            link = self.edge_costs.get((min(i, j), max(i, j)))
            if link is None:
                return None
            return self._euclidean(self.start, i) + self._euclidean(self.start, j) - link

        d = self.oracle.distance_matrix
        link = d[i, j]
        if self.formula == SavingsFormula.SEPARATE_DEPOT:
            tail, head = d[i, self.end], d[self.start, j]
        else:
            tail, head = d[self.start, i], d[j, self.end]

        if math.isinf(link) or math.isinf(tail) or math.isinf(head):
            return None
        return float(tail + head - link)

    def compute(self, customers: Sequence[int], positive_only: bool = True) -> List[DirectedSaving]:
        """
        Savings for all ordered pairs of distinct customers.

        Args:
            customers: Waypoint indices, in the order used to break ties.
            positive_only: Keep only beneficial merges (``value > 0``). Disable it
                to get every finite pair, e.g. when one full-coverage tour is wanted.

        Returns:
            Savings sorted by value, largest first.
        """
        savings = []
        skipped = 0
        for i in customers:
            for j in customers:
                if i == j:
                    continue
                value = self.saving_value(i, j)
                if value is None:
                    skipped += 1
                    continue
                if positive_only and value <= 0:
                    continue
                savings.append(DirectedSaving(i, j, value))

        if skipped:
            logger.debug(f"Skipped {skipped} pairs with undefined savings ({self.formula.value})")
        logger.info(
            f"Computed {len(savings)} savings for {len(customers)} waypoints "
            f"(formula={self.formula.value}, positive_only={positive_only})"
        )
        return sort_savings(savings)
