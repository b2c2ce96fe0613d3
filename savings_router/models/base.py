from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from savings_router.core.constants import MIN_NODE_COUNT, ORIGIN_SAVINGS, START_DEPOT_INDEX


@dataclass(frozen=True)
class Edge:
    """Undirected edge between two node indices with a non-negative cost."""
    u: int
    v: int
    cost: float


@dataclass
class GraphInput:
    """
    Graph handed over by the geometry collaborator.

    Nodes are the dense indices ``0..node_count-1``. Index 0 is the start depot,
    ``node_count - 1`` the end depot and every other index is a waypoint with
    unit demand. Coordinates are optional and only used by the Euclidean
    savings formula.
    """
    node_count: int
    edges: List[Edge] = field(default_factory=list)
    coordinates: Optional[List[Tuple[float, float]]] = None

    @property
    def start_depot(self) -> int:
        return START_DEPOT_INDEX

    @property
    def end_depot(self) -> int:
        return self.node_count - 1

    @property
    def waypoints(self) -> List[int]:
        return list(range(1, self.node_count - 1))

    @property
    def is_too_small(self) -> bool:
        return self.node_count < MIN_NODE_COUNT

    def validate(self) -> None:
        """
        Reject malformed input before any computation begins.

        Raises:
            ValueError: On a negative node count or edge cost, an out-of-range
                node index or coordinates that don't match the node count.
        """
        if self.node_count < 0:
            raise ValueError(f"Node count must be non-negative, got {self.node_count}")

        for edge in self.edges:
            for endpoint in (edge.u, edge.v):
                if not 0 <= endpoint < self.node_count:
                    raise ValueError(
                        f"Edge ({edge.u}, {edge.v}) references node {endpoint} "
                        f"outside 0..{self.node_count - 1}"
                    )
            if edge.cost < 0:
                raise ValueError(f"Negative cost {edge.cost} on edge ({edge.u}, {edge.v})")

        if self.coordinates is not None:
            if len(self.coordinates) != self.node_count:
                raise ValueError(
                    f"Expected {self.node_count} coordinates, got {len(self.coordinates)}"
                )
            for idx, point in enumerate(self.coordinates):
                if len(point) != 2:
                    raise ValueError(f"Coordinate for node {idx} must be an (x, y) pair")

    def adjacency(self) -> List[List[Tuple[int, float]]]:
        """Adjacency list where ``adj[u]`` holds ``(v, cost)`` for every incident edge."""
        adj: List[List[Tuple[int, float]]] = [[] for _ in range(self.node_count)]
        for edge in self.edges:
            adj[edge.u].append((edge.v, float(edge.cost)))
            if edge.u != edge.v:
                adj[edge.v].append((edge.u, float(edge.cost)))
        return adj

    def edge_costs(self) -> Dict[Tuple[int, int], float]:
        """Cheapest direct cost per unordered node pair."""
        costs: Dict[Tuple[int, int], float] = {}
        for edge in self.edges:
            key = (min(edge.u, edge.v), max(edge.u, edge.v))
            if key not in costs or edge.cost < costs[key]:
                costs[key] = float(edge.cost)
        return costs

    def edge_cost(self, u: int, v: int) -> Optional[float]:
        return self.edge_costs().get((min(u, v), max(u, v)))

    @classmethod
    def from_tuples(cls, node_count: int, edges, coordinates=None) -> 'GraphInput':
        """Build a graph from ``(u, v, cost)`` tuples."""
        return cls(
            node_count=node_count,
            edges=[Edge(int(u), int(v), float(cost)) for u, v, cost in edges],
            coordinates=[(float(x), float(y)) for x, y in coordinates] if coordinates is not None else None
        )


@dataclass(frozen=True)
class DirectedSaving:
    """
    Benefit of visiting ``to_idx`` right after ``from_idx`` instead of serving
    both through the depots.
    """
    from_idx: int
    to_idx: int
    value: float

    @staticmethod
    def descending(saving: 'DirectedSaving') -> float:
        """Sort key putting the largest saving first."""
        return -saving.value


@dataclass
class Route:
    """Ordered, distinct waypoint indices between the two depots."""
    waypoints: List[int] = field(default_factory=list)
    total_distance: float = 0.0
    origin: str = ORIGIN_SAVINGS

    @property
    def coverage(self) -> int:
        return len(self.waypoints)

    @property
    def is_empty(self) -> bool:
        return not self.waypoints
