"""
Constants used throughout the route construction core.
"""

# Sentinel for unreachable pairs in the distance matrix
INFINITY = float('inf')

# Parent matrix marker for "source" or "unreachable"
NO_PARENT = -1

# Start depot, at least one waypoint, end depot
MIN_NODE_COUNT = 3
START_DEPOT_INDEX = 0

# Scaling for OR-Tools, which only accepts integer arc costs
DISTANCE_SCALING_FACTOR = 100

# Bounds for valid distance values
MAX_SAFE_DISTANCE = 1e6
MIN_SAFE_DISTANCE = 0.0

# Penalty (scaled) for leaving a waypoint out of the OR-Tools route.
# Larger than any feasible detour, so coverage is maximized first.
DROP_PENALTY = int(MAX_SAFE_DISTANCE * DISTANCE_SCALING_FACTOR)

# Selection origins recorded on each returned route
ORIGIN_SAVINGS = 'savings'
ORIGIN_RELAXED = 'relaxed'
ORIGIN_ALTERNATIVE = 'alternative'
ORIGIN_PERTURBED = 'perturbed'
ORIGIN_ORTOOLS = 'ortools'
