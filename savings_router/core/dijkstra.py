import heapq
from typing import List, Sequence, Tuple
import logging

import numpy as np

from savings_router.core.constants import INFINITY, NO_PARENT
from savings_router.models import GraphInput

# Set up logging
logger = logging.getLogger(__name__)

Adjacency = Sequence[Sequence[Tuple[int, float]]]


class DistanceOracle:
    """
    All-pairs shortest paths over an undirected graph with non-negative costs.

    Dijkstra is run once from every node. The resulting distance and parent
    matrices are read-only for the lifetime of the oracle.
    """

    def __init__(self, distance_matrix: np.ndarray, parent_matrix: np.ndarray):
        """
        Args:
            distance_matrix: ``n x n`` float array, ``inf`` for unreachable pairs.
            parent_matrix: ``n x n`` int array where ``parent_matrix[s][t]`` is the
                predecessor of ``t`` on the shortest path from ``s``, or ``NO_PARENT``.
        """
        self.distance_matrix = distance_matrix
        self.parent_matrix = parent_matrix
        self.distance_matrix.setflags(write=False)
        self.parent_matrix.setflags(write=False)

    @property
    def node_count(self) -> int:
        return self.distance_matrix.shape[0]

    @staticmethod
    def _validate_non_negative_weights(adjacency: Adjacency) -> None:
        """
        Ensure all weights in the graph are non-negative.

        Raises:
            ValueError: If a negative edge weight is found.
        """
        for src, neighbors in enumerate(adjacency):
            for dest, weight in neighbors:
                if weight < 0:
                    raise ValueError(f"Negative weight detected from '{src}' to '{dest}' with weight {weight}")

    @staticmethod
    def single_source(source: int, adjacency: Adjacency) -> Tuple[np.ndarray, np.ndarray]:
        """
        Run Dijkstra's algorithm from one source.

        Args:
            source: Index of the source node.
            adjacency: ``adjacency[u]`` lists ``(v, cost)`` pairs.

        Returns:
            Tuple of the distance row and the parent row for ``source``.
        """
        n = len(adjacency)
        dist = np.full(n, INFINITY, dtype=float)
        parent = np.full(n, NO_PARENT, dtype=np.int64)
        dist[source] = 0.0

        # Priority queue with (distance, node)
        queue = [(0.0, source)]

        while queue:
            current_distance, current_node = heapq.heappop(queue)

            # A shorter path to current_node was found after this entry was queued
            if current_distance > dist[current_node]:
                continue

            for neighbor, weight in adjacency[current_node]:
                distance = current_distance + weight
                if distance < dist[neighbor]:
                    dist[neighbor] = distance
                    parent[neighbor] = current_node
                    heapq.heappush(queue, (distance, neighbor))

        return dist, parent

    @classmethod
    def from_adjacency(cls, adjacency: Adjacency) -> 'DistanceOracle':
        """Build the oracle by running Dijkstra from every node of ``adjacency``."""
        cls._validate_non_negative_weights(adjacency)
        n = len(adjacency)
        distance_matrix = np.full((n, n), INFINITY, dtype=float)
        parent_matrix = np.full((n, n), NO_PARENT, dtype=np.int64)

        for source in range(n):
            dist, parent = cls.single_source(source, adjacency)
            distance_matrix[source] = dist
            parent_matrix[source] = parent

        unreachable = int(np.isinf(distance_matrix).sum())
        if unreachable:
            logger.info(f"Distance matrix for {n} nodes has {unreachable} unreachable ordered pairs")
        return cls(distance_matrix, parent_matrix)

    @classmethod
    def from_graph(cls, graph: GraphInput) -> 'DistanceOracle':
        return cls.from_adjacency(graph.adjacency())

    def distance(self, i: int, j: int) -> float:
        return float(self.distance_matrix[i, j])

    def is_reachable(self, i: int, j: int) -> bool:
        return not np.isinf(self.distance_matrix[i, j])

    def reconstruct_path(self, source: int, target: int) -> List[int]:
        """
        Walk the parent matrix backward from ``target`` to ``source``.

        Returns:
            The node sequence from ``source`` to ``target``, or an empty list if
            ``target`` is unreachable or the predecessor chain is broken.
        """
        if source == target:
            return [source]

        parents = self.parent_matrix[source]
        if parents[target] == NO_PARENT:
            logger.warning(f"No path found from '{source}' to '{target}'")
            return []

        path = [target]
        current = target
        # A valid chain never visits more than node_count nodes
        for _ in range(self.node_count):
            current = int(parents[current])
            if current == NO_PARENT:
                logger.warning(f"Path reconstruction error: broken predecessor chain from {source} to {target}")
                return []
            path.append(current)
            if current == source:
                path.reverse()
                return path

        logger.warning(f"Path reconstruction error: predecessor cycle from {source} to {target}")
        return []

    def path_cost(self, path: Sequence[int]) -> float:
        """Sum of shortest-path distances between consecutive nodes of ``path``."""
        return float(sum(self.distance_matrix[a, b] for a, b in zip(path, path[1:])))

    def route_distance(self, waypoints: Sequence[int], start: int, end: int) -> float:
        """
        Total distance of start -> waypoints -> end.

        Returns:
            ``inf`` as soon as one leg is unreachable, ``0.0`` for an empty route.
        """
        if not waypoints:
            return 0.0

        distance = 0.0
        previous = start
        for node in list(waypoints) + [end]:
            leg = self.distance_matrix[previous, node]
            if np.isinf(leg):
                return INFINITY
            distance += float(leg)
            previous = node
        return distance
