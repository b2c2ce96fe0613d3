"""
Randomized re-runs of the route builder.

Every variant gets its own pseudo-random generator seeded with
``seed + variant_index``; generators are never shared between variants.
"""
import enum
import logging
import math
import random
from typing import Callable, List, Optional, Sequence

from savings_router.core.route_builder import RouteBuilder
from savings_router.models import DirectedSaving, Route
from savings_router import settings as router_settings

logger = logging.getLogger(__name__)

RandomFactory = Callable[[int], random.Random]


class ShuffleMode(str, enum.Enum):
    FULL = 'full'              # shuffle the whole savings list, keep every route
    PARTIAL = 'partial'        # shuffle the strongest fraction, keep the best route per variant
    EXHAUSTIVE = 'exhaustive'  # one deterministic pass


def route_rank_key(route: Route):
    """More waypoints first, then the shorter route."""
    return (-route.coverage, route.total_distance)


def is_feasible(route: Route) -> bool:
    return not route.is_empty and not math.isinf(route.total_distance)


class VariantGenerator:
    """
    Produces a pool of candidate routes from differently ordered savings lists.
    """

    def __init__(
        self,
        builder: RouteBuilder,
        seed: int = router_settings.DEFAULT_RANDOM_SEED,
        rng_factory: RandomFactory = random.Random,
        partial_fraction: float = router_settings.PARTIAL_SHUFFLE_FRACTION,
        tie_shuffle_only: bool = True
    ):
        """
        Args:
            builder: Route builder bound to the graph's distances and depots.
            seed: Base seed; variant ``k`` uses ``seed + k``.
            rng_factory: Creates a generator from a seed.
            partial_fraction: Share of the savings list shuffled in partial mode.
            tie_shuffle_only: Let the builder re-sort each shuffled list by value,
                which leaves only the order of equal savings randomized.
        """
        self.builder = builder
        self.seed = seed
        self.rng_factory = rng_factory
        self.partial_fraction = partial_fraction
        self.tie_shuffle_only = tie_shuffle_only

    def _build(self, customers: Sequence[int], savings: Sequence[DirectedSaving]) -> List[Route]:
        return self.builder.build(customers, savings, sort_savings_first=self.tie_shuffle_only)

    def generate(
        self,
        customers: Sequence[int],
        savings: Sequence[DirectedSaving],
        num_variants: int,
        mode: ShuffleMode = ShuffleMode.FULL,
        max_attempts: Optional[int] = None
    ) -> List[Route]:
        """
        Generate the candidate pool.

        Args:
            customers: Waypoints to route.
            savings: Base savings list, sorted by value.
            num_variants: Number of variants (full) or routes to collect (partial).
            mode: Shuffle strategy.
            max_attempts: Partial mode only, upper bound on variants tried.

        Returns:
            Non-empty routes with a finite distance, in generation order.
        """
        mode = ShuffleMode(mode)
        if mode == ShuffleMode.EXHAUSTIVE:
            pool = [route for route in self._build(customers, savings) if is_feasible(route)]
        elif mode == ShuffleMode.PARTIAL:
            pool = self._generate_partial(customers, savings, num_variants, max_attempts)
        else:
            pool = self._generate_full(customers, savings, num_variants)

        logger.info(f"Generated {len(pool)} candidate routes ({mode.value}, variants={num_variants})")
        return pool

    def _generate_full(self, customers, savings, num_variants) -> List[Route]:
        pool = []
        for k in range(num_variants):
            variant = list(savings)
            self.rng_factory(self.seed + k).shuffle(variant)
            pool.extend(route for route in self._build(customers, variant) if is_feasible(route))
        return pool

    def _generate_partial(self, customers, savings, num_variants, max_attempts) -> List[Route]:
        attempts = max(max_attempts or num_variants, num_variants)
        part_to_shuffle = int(len(savings) * self.partial_fraction)
        pool = []

        for k in range(attempts):
            if len(pool) >= num_variants:
                break

            variant = list(savings)
            if part_to_shuffle > 1:
                head = variant[:part_to_shuffle]
                self.rng_factory(self.seed + k).shuffle(head)
                variant[:part_to_shuffle] = head

            feasible = [route for route in self._build(customers, variant) if is_feasible(route)]
            if not feasible:
                logger.debug(f"Partial variant {k} produced no feasible route")
                continue
            pool.append(min(feasible, key=route_rank_key))

        return pool
