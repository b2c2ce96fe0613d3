import os
import logging

from savings_router.utils.env_loader import load_env_from_file

logger = logging.getLogger(__name__)

# Try different possible locations for the env file
env_paths = [
    os.path.join(os.path.dirname(os.path.dirname(__file__)), 'env_var.env'),  # Project root
    os.path.join(os.path.dirname(__file__), 'env_var.env'),  # App directory
]

for path in env_paths:
    if load_env_from_file(path):
        break


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}. Using default {default}.")
        return default


def _env_int(name, default):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}. Using default {default}.")
        return default


# --- Variant generation ---
DEFAULT_RANDOM_SEED = _env_int('SAVINGS_ROUTER_SEED', 42)
VARIANTS_PER_WAYPOINT = _env_int('SAVINGS_ROUTER_VARIANTS_PER_WAYPOINT', 10)  # num_variants = waypoints * this
PARTIAL_SHUFFLE_FRACTION = _env_float('SAVINGS_ROUTER_PARTIAL_FRACTION', 0.2)  # Top fifth of the savings list

# --- Route selection ---
DEFAULT_N_OF_ROADS = _env_int('SAVINGS_ROUTER_N_OF_ROADS', 3)
MIN_DIFFERENCE_THRESHOLD = _env_float('SAVINGS_ROUTER_MIN_DIFFERENCE_THRESHOLD', 0.0)  # 0 disables diversity filtering
MAX_DIVERSITY_ATTEMPTS = _env_int('SAVINGS_ROUTER_MAX_DIVERSITY_ATTEMPTS', 200)
RELAXATION_FACTORS = (0.5, 0.25)  # Multipliers applied to the threshold when too few routes are found

# --- Alternative path search ---
NODE_REUSE_PENALTY = _env_float('SAVINGS_ROUTER_NODE_REUSE_PENALTY', 3.0)
MAX_PENALTY_FACTOR = 5.0

# --- Solvers ---
DEFAULT_SOLVER = os.getenv('SAVINGS_ROUTER_DEFAULT_SOLVER', 'savings')
ORTOOLS_TIME_LIMIT_SECONDS = _env_int('SAVINGS_ROUTER_ORTOOLS_TIME_LIMIT_SECONDS', 5)
