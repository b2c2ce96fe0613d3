import dataclasses
import hashlib
import json
import logging
import time
from typing import Dict, Optional

from django.conf import settings
from django.core.cache import cache

from savings_router.core.config import SolveConfig
from savings_router.core.ortools_optimizer import ORToolsRouteSolver
from savings_router.core.savings_solver import SavingsRouteSolver
from savings_router.core.solver import RouteSolver
from savings_router.core.types import STATUS_ERROR, STATUS_INVALID, STATUS_SUCCESS, SolveResult, validate_solve_result
from savings_router.models import GraphInput
from savings_router.services.route_stats_service import RouteStatsService
from savings_router.utils.helpers import format_duration, safe_json_dumps
from savings_router import settings as router_settings

logger = logging.getLogger(__name__)


class RoutePlanningService:
    def __init__(
        self,
        solver: Optional[RouteSolver] = None,
        solvers: Optional[Dict[str, RouteSolver]] = None,
        use_cache: bool = True
    ):
        """
        Initialize the route planning service.

        Args:
            solver: Solver used when no solver name is given. If None, the solver
                named by ``DEFAULT_SOLVER`` is used.
            solvers: Solvers selectable by name. Defaults to ``savings`` and ``ortools``.
            use_cache: Store successful results in the Django cache.
        """
        self.solvers = solvers or {
            SavingsRouteSolver.name: SavingsRouteSolver(),
            ORToolsRouteSolver.name: ORToolsRouteSolver(),
        }
        self.default_solver = solver
        self.use_cache = use_cache

    def get_solver(self, solver_name: Optional[str] = None) -> RouteSolver:
        """
        Raises:
            ValueError: If no solver is registered under ``solver_name``.
        """
        if solver_name is None and self.default_solver is not None:
            return self.default_solver
        name = solver_name or router_settings.DEFAULT_SOLVER
        if name not in self.solvers:
            raise ValueError(f"Unknown solver '{name}'. Available: {', '.join(sorted(self.solvers))}")
        return self.solvers[name]

    def _generate_cache_key(self, graph: GraphInput, n_of_roads: int, config: SolveConfig, solver_name: str) -> str:
        """Generates a deterministic cache key from the input parameters."""
        key_parts = {
            "node_count": graph.node_count,
            "edges": [[edge.u, edge.v, edge.cost] for edge in graph.edges],
            "coordinates": graph.coordinates,
            "n_of_roads": n_of_roads,
            "config": {k: getattr(v, 'value', v) for k, v in dataclasses.asdict(config).items()},
            "solver": solver_name,
        }
        serialized_params = json.dumps(key_parts, sort_keys=True)
        return "savings_route_" + hashlib.md5(serialized_params.encode('utf-8')).hexdigest()

    def plan_routes(
        self,
        graph: GraphInput,
        n_of_roads: Optional[int] = None,
        config: Optional[SolveConfig] = None,
        solver_name: Optional[str] = None
    ) -> SolveResult:
        """
        Plan up to ``n_of_roads`` routes from the start depot to the end depot.

        Args:
            graph: Input graph; node 0 is the start depot, the last node the end depot.
            n_of_roads: Number of routes wanted. Defaults to ``config.n_of_roads``.
            config: Strategy values. Defaults to the project settings.
            solver_name: ``savings`` or ``ortools``.

        Returns:
            SolveResult with status ``success``, ``too_small``, ``no_route``,
            ``invalid`` (malformed input) or ``error`` (unexpected failure).
        """
        started = time.monotonic()
        try:
            graph.validate()
            config = config or SolveConfig.from_settings()
            config.validate()
            n_of_roads = n_of_roads if n_of_roads is not None else config.n_of_roads
            if n_of_roads < 1:
                raise ValueError(f"n_of_roads must be positive, got {n_of_roads}")
            solver = self.get_solver(solver_name)
        except ValueError as e:
            logger.warning(f"Rejected route planning request: {e}")
            return SolveResult.empty(STATUS_INVALID, 'Invalid input', error=str(e))

        cache_key = None
        if self.use_cache and settings.configured:
            cache_key = self._generate_cache_key(graph, n_of_roads, config, solver.name)
            cached_result_dict = cache.get(cache_key)
            if cached_result_dict:
                logger.info(f"Returning cached SolveResult for key: {cache_key}")
                return SolveResult.from_dict(cached_result_dict)

        logger.info(
            f"Planning {n_of_roads} routes over {graph.node_count} nodes and "
            f"{len(graph.edges)} edges with the '{solver.name}' solver"
        )

        try:
            result = solver.solve(graph, n_of_roads, config)
        except ValueError as e:
            logger.warning(f"Invalid route planning input: {e}")
            return SolveResult.empty(STATUS_INVALID, 'Invalid input', error=str(e))
        except Exception as e:
            logger.error(f"Error planning routes: {str(e)}", exc_info=True)
            return SolveResult.empty(STATUS_ERROR, 'Route planning failed', error=f"Route planning failed: {str(e)}")

        RouteStatsService.add_statistics(result)
        try:
            validate_solve_result(result)
        except ValueError as e:
            logger.error(f"Solver '{solver.name}' returned a malformed result: {e}")
            return SolveResult.empty(STATUS_ERROR, 'Malformed solver result', error=str(e))

        elapsed = time.monotonic() - started
        result.statistics['elapsed'] = format_duration(elapsed)
        logger.info(f"Route planning finished with status '{result.status}' in {format_duration(elapsed)}")
        logger.debug(f"Route planning statistics: {safe_json_dumps(result.statistics)}")

        if cache_key is not None and result.status == STATUS_SUCCESS:
            cache_timeout_seconds = getattr(settings, 'SAVINGS_ROUTER_RESULT_CACHE_TIMEOUT', 3600)
            cache.set(cache_key, dataclasses.asdict(result), timeout=cache_timeout_seconds)
            logger.info(f"Cached SolveResult for key: {cache_key} for {cache_timeout_seconds}s")

        return result
