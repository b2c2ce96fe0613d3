"""
Ranking and diversity filtering of candidate routes.
"""
import logging
import random
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from savings_router.core.constants import ORIGIN_ALTERNATIVE, ORIGIN_PERTURBED, ORIGIN_RELAXED
from savings_router.core.variants import route_rank_key
from savings_router.models import Route
from savings_router import settings as router_settings

logger = logging.getLogger(__name__)

EdgeSet = FrozenSet[Tuple[int, int]]
EdgeSetFn = Callable[[Route], EdgeSet]
AlternativesFn = Callable[[List[Route]], List[Route]]
RouteDistanceFn = Callable[[Sequence[int]], float]


class RouteSelector:
    """
    Picks the routes to return from a candidate pool.

    Routes are ranked by coverage (descending) and total distance (ascending).
    ``select_diverse`` additionally rejects candidates too similar to a route
    that was already accepted, and falls back step by step when the pool does
    not contain enough different routes.
    """

    def __init__(
        self,
        start: int,
        end: int,
        rng: Optional[random.Random] = None,
        max_attempts: int = router_settings.MAX_DIVERSITY_ATTEMPTS,
        relaxation_factors: Sequence[float] = router_settings.RELAXATION_FACTORS,
        allow_relaxation: bool = True,
        edge_set_fn: Optional[EdgeSetFn] = None
    ):
        """
        Args:
            start: Start depot index.
            end: End depot index.
            rng: Generator used to pick the waypoint dropped by a perturbation.
            max_attempts: Upper bound on candidates examined per pass.
            relaxation_factors: Multipliers applied to the threshold, in order,
                when the strict pass comes up short.
            allow_relaxation: Run the fallback chain at all.
            edge_set_fn: Replaces the default depot-to-depot leg set.
        """
        self.start = start
        self.end = end
        self.rng = rng if rng is not None else random.Random(router_settings.DEFAULT_RANDOM_SEED)
        self.max_attempts = max_attempts
        self.relaxation_factors = tuple(relaxation_factors)
        self.allow_relaxation = allow_relaxation
        self.edge_set_fn = edge_set_fn

    @staticmethod
    def rank(routes: Sequence[Route]) -> List[Route]:
        return sorted(routes, key=route_rank_key)

    def top(self, routes: Sequence[Route], n: int) -> List[Route]:
        return self.rank(routes)[:max(n, 0)]

    def edge_set(self, route: Route) -> EdgeSet:
        """Undirected legs of start -> waypoints -> end, or ``edge_set_fn(route)``."""
        if self.edge_set_fn is not None:
            return frozenset(self.edge_set_fn(route))
        stops = [self.start] + list(route.waypoints) + [self.end]
        return frozenset((min(a, b), max(a, b)) for a, b in zip(stops, stops[1:]))

    @staticmethod
    def jaccard_similarity(a: EdgeSet, b: EdgeSet) -> float:
        """Intersection over union. Two empty sets are identical."""
        union = a | b
        if not union:
            return 1.0
        return len(a & b) / len(union)

    def _scan(self, candidates, accepted, accepted_sets, n, max_similarity, origin=None) -> int:
        """
        Accept candidates in order while they stay below ``max_similarity``.

        Only distinct waypoint sequences count toward ``max_attempts``.
        """
        added = 0
        examined = 0
        seen = set()
        taken = {tuple(route.waypoints) for route in accepted}
        for candidate in candidates:
            if len(accepted) >= n or examined >= self.max_attempts:
                break
            key = tuple(candidate.waypoints)
            if key in seen:
                continue
            seen.add(key)
            examined += 1
            if key in taken:
                continue

            edges = self.edge_set(candidate)
            if any(self.jaccard_similarity(edges, other) > max_similarity for other in accepted_sets):
                continue

            if origin is not None:
                candidate = Route(list(candidate.waypoints), candidate.total_distance, origin)
            accepted.append(candidate)
            accepted_sets.append(edges)
            taken.add(tuple(candidate.waypoints))
            added += 1
        return added

    def _perturb(self, accepted, accepted_sets, n, route_distance) -> int:
        added = 0
        taken = {tuple(route.waypoints) for route in accepted}
        for attempt in range(self.max_attempts):
            if len(accepted) >= n:
                break
            bases = [route for route in accepted if route.coverage >= 2]
            if not bases:
                logger.warning("No accepted route has enough waypoints to perturb")
                break

            base = bases[attempt % len(bases)]
            dropped = self.rng.randrange(base.coverage)
            waypoints = base.waypoints[:dropped] + base.waypoints[dropped + 1:]
            if tuple(waypoints) in taken:
                continue

            # Without a distance callback the base distance is kept
            distance = route_distance(waypoints) if route_distance is not None else base.total_distance
            perturbed = Route(waypoints, distance, ORIGIN_PERTURBED)
            accepted.append(perturbed)
            accepted_sets.append(self.edge_set(perturbed))
            taken.add(tuple(waypoints))
            added += 1
        return added

    def select_diverse(
        self,
        candidates: Sequence[Route],
        n: int,
        min_difference_threshold: float,
        alternatives: Optional[AlternativesFn] = None,
        route_distance: Optional[RouteDistanceFn] = None
    ) -> List[Route]:
        """
        Select up to ``n`` structurally different routes.

        A candidate is accepted when its Jaccard similarity to every accepted
        route is at most ``1 - min_difference_threshold``. When fewer than ``n``
        routes pass and relaxation is allowed, the following run in order until
        ``n`` routes are collected: weaker thresholds, candidates returned by
        ``alternatives(accepted)``, and copies of accepted routes with one
        waypoint dropped.

        Args:
            candidates: Candidate pool.
            n: Number of routes wanted.
            min_difference_threshold: Required difference in ``[0, 1]``.
            alternatives: Produces additional candidates given the accepted routes.
            route_distance: Distance of a waypoint sequence, used for perturbed routes.

        Returns:
            Accepted routes; ``origin`` tells which step produced each one.
        """
        if n <= 0 or not candidates:
            return []

        ranked = self.rank(candidates)
        accepted: List[Route] = []
        accepted_sets: List[EdgeSet] = []

        self._scan(ranked, accepted, accepted_sets, n, 1.0 - min_difference_threshold)
        if len(accepted) >= n or not self.allow_relaxation:
            return accepted

        weakest = min_difference_threshold
        for factor in self.relaxation_factors:
            weakest = min_difference_threshold * factor
            added = self._scan(ranked, accepted, accepted_sets, n, 1.0 - weakest, ORIGIN_RELAXED)
            logger.info(f"Relaxed threshold {weakest:.3f} accepted {added} more routes")
            if len(accepted) >= n:
                return accepted

        if alternatives is not None:
            extra = self.rank(alternatives(list(accepted)))
            added = self._scan(extra, accepted, accepted_sets, n, 1.0 - weakest, ORIGIN_ALTERNATIVE)
            logger.info(f"Alternative path search accepted {added} of {len(extra)} routes")
            if len(accepted) >= n:
                return accepted

        added = self._perturb(accepted, accepted_sets, n, route_distance)
        if len(accepted) < n:
            logger.warning(f"Only {len(accepted)} of {n} requested routes could be selected")
        elif added:
            logger.info(f"Perturbation added {added} routes")
        return accepted
