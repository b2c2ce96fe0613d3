"""
Helper functions for the savings router.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence
import datetime
import json
import types

import numpy as np

from savings_router.models import GraphInput

# Set up logging
logger = logging.getLogger(__name__)


def format_route_for_display(
    waypoints: Sequence[int],
    start: int,
    end: int,
    node_names: Optional[Dict[int, str]] = None
) -> str:
    """
    Format a route as ``start -> waypoints -> end``.

    Args:
        waypoints: Ordered waypoint indices.
        start: Start depot index.
        end: End depot index.
        node_names: Optional display names per node index.

    Returns:
        Formatted route string.
    """
    names = node_names or {}
    stops = [start] + list(waypoints) + [end]
    return " -> ".join(str(names.get(node, node)) for node in stops)


def detect_isolated_nodes(graph: GraphInput) -> List[int]:
    """
    Nodes without any edge to another node. Self-loops don't count.
    """
    connected = set()
    for edge in graph.edges:
        if edge.u != edge.v:
            connected.add(edge.u)
            connected.add(edge.v)
    return [node for node in range(graph.node_count) if node not in connected]


def safe_json_dumps(obj: Any) -> str:
    """
    Safely convert an object to a JSON string, handling non-serializable types.

    Infinite and NaN floats are written as ``null``.
    """
    def handle_non_serializable(o):
        if isinstance(o, (datetime.datetime, datetime.date)):
            return o.isoformat()
        if isinstance(o, np.ndarray):
            return sanitize(o.tolist())
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return sanitize(float(o))
        if isinstance(o, (set, frozenset)):
            return sanitize(sorted(o))
        if isinstance(o, (types.FunctionType, types.MethodType, types.BuiltinFunctionType)):
            return str(o)
        if hasattr(o, '__dict__'):
            return sanitize(vars(o))
        return str(o)

    def sanitize(o):
        if isinstance(o, float) and (np.isinf(o) or np.isnan(o)):
            return None
        if isinstance(o, dict):
            return {k: sanitize(v) for k, v in o.items()}
        if isinstance(o, (list, tuple)):
            return [sanitize(v) for v in o]
        return o

    return json.dumps(sanitize(obj), default=handle_non_serializable)


def format_duration(seconds: float) -> str:
    """
    Format a duration in seconds to a human-readable string.

    Durations under a second are shown in milliseconds, e.g. ``"250ms"``;
    longer ones as ``"1h 2m 3s"`` or ``"0m 30s"``.
    """
    if 0 <= seconds < 1:
        return f"{seconds * 1000:.0f}ms"

    s_int = int(seconds)
    hours, remainder = divmod(s_int, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)
