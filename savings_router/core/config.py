"""
Strategy configuration for one solve call.
"""
from dataclasses import dataclass, fields
from typing import Optional
import logging

from django.conf import settings

from savings_router.core.savings import SavingsFormula
from savings_router.core.variants import ShuffleMode
from savings_router import settings as router_settings

logger = logging.getLogger(__name__)


@dataclass
class SolveConfig:
    """
    Explicit strategy values for the savings pipeline.

    ``num_variants`` and ``positive_only`` are resolved against the graph when
    left as None: the variant count becomes ``waypoints * VARIANTS_PER_WAYPOINT``
    and only exhaustive mode keeps non-positive savings.
    """
    shuffle_mode: ShuffleMode = ShuffleMode.FULL
    savings_formula: SavingsFormula = SavingsFormula.SEPARATE_DEPOT
    positive_only: Optional[bool] = None
    num_variants: Optional[int] = None
    max_attempts: Optional[int] = None
    seed: int = router_settings.DEFAULT_RANDOM_SEED
    partial_fraction: float = router_settings.PARTIAL_SHUFFLE_FRACTION
    tie_shuffle_only: bool = True
    min_difference_threshold: float = router_settings.MIN_DIFFERENCE_THRESHOLD
    allow_relaxation: bool = True
    n_of_roads: int = router_settings.DEFAULT_N_OF_ROADS

    def __post_init__(self):
        self.shuffle_mode = ShuffleMode(self.shuffle_mode)
        self.savings_formula = SavingsFormula(self.savings_formula)

    @classmethod
    def from_settings(cls, **overrides) -> 'SolveConfig':
        """
        Build a config from project settings, then apply ``overrides``.

        Django settings named ``SAVINGS_ROUTER_<FIELD>`` win over the module
        defaults when Django is configured.
        """
        values = {}
        if settings.configured:
            for f in fields(cls):
                name = f"SAVINGS_ROUTER_{f.name.upper()}"
                if hasattr(settings, name):
                    values[f.name] = getattr(settings, name)

        values.update({key: value for key, value in overrides.items() if value is not None})
        unknown = set(values) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown config options: {', '.join(sorted(unknown))}")
        return cls(**values)

    def resolve_num_variants(self, waypoint_count: int) -> int:
        if self.num_variants is not None:
            return self.num_variants
        return max(waypoint_count * router_settings.VARIANTS_PER_WAYPOINT, 1)

    def resolve_positive_only(self) -> bool:
        if self.positive_only is not None:
            return self.positive_only
        return self.shuffle_mode != ShuffleMode.EXHAUSTIVE

    def validate(self) -> None:
        """
        Raises:
            ValueError: If a value is out of range.
        """
        if not 0.0 <= self.min_difference_threshold <= 1.0:
            raise ValueError(f"min_difference_threshold must be in [0, 1], got {self.min_difference_threshold}")
        if not 0.0 <= self.partial_fraction <= 1.0:
            raise ValueError(f"partial_fraction must be in [0, 1], got {self.partial_fraction}")
        if self.num_variants is not None and self.num_variants < 1:
            raise ValueError(f"num_variants must be positive, got {self.num_variants}")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.n_of_roads < 1:
            raise ValueError(f"n_of_roads must be positive, got {self.n_of_roads}")
