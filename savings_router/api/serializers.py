"""
Serializers for the savings router API.

This module provides serializers for converting between API requests/responses
and the internal data structures used by the route construction core.
"""
import logging
from rest_framework import serializers

from savings_router.core.savings import SavingsFormula
from savings_router.core.types import VALID_STATUSES
from savings_router.core.variants import ShuffleMode

logger = logging.getLogger(__name__)

SOLVER_CHOICES = ('savings', 'ortools')


class EdgeSerializer(serializers.Serializer):
    """Serializer for an undirected edge."""
    u = serializers.IntegerField(min_value=0, help_text="Index of the first endpoint.")
    v = serializers.IntegerField(min_value=0, help_text="Index of the second endpoint.")
    cost = serializers.FloatField(min_value=0.0, help_text="Non-negative cost of traversing the edge in either direction.")


class RoutePlanRequestSerializer(serializers.Serializer):
    """Serializer for route planning requests."""
    node_count = serializers.IntegerField(min_value=0, help_text="Number of nodes. Node 0 is the start depot, node_count - 1 the end depot.")
    edges = EdgeSerializer(many=True, help_text="Undirected edges of the graph.")
    coordinates = serializers.ListField(
        child=serializers.ListField(child=serializers.FloatField(), min_length=2, max_length=2),
        required=False, allow_null=True,
        help_text="Optional [x, y] per node. Required by the 'euclidean' savings formula."
    )
    n_of_roads = serializers.IntegerField(min_value=1, required=False, help_text="Number of routes to return. Defaults to the configured value.")
    solver = serializers.ChoiceField(choices=SOLVER_CHOICES, required=False, help_text="Solver to use. Defaults to the configured solver.")
    shuffle_mode = serializers.ChoiceField(choices=[m.value for m in ShuffleMode], required=False, help_text="How the savings list is randomized between variants.")
    savings_formula = serializers.ChoiceField(choices=[f.value for f in SavingsFormula], required=False, help_text="Savings formula.")
    min_difference_threshold = serializers.FloatField(min_value=0.0, max_value=1.0, required=False, help_text="Required structural difference between returned routes. 0 disables diversity filtering.")
    allow_relaxation = serializers.BooleanField(required=False, help_text="Fall back to weaker thresholds, alternative paths and perturbation when too few different routes exist.")
    num_variants = serializers.IntegerField(min_value=1, required=False, help_text="Number of randomized variants. Defaults to waypoints * 10.")
    seed = serializers.IntegerField(required=False, help_text="Base random seed.")

    def validate(self, data):
        """
        Check that edge endpoints and coordinates match the node count.
        """
        node_count = data['node_count']
        errors = {}

        bad_edges = [
            idx for idx, edge in enumerate(data['edges'])
            if edge['u'] >= node_count or edge['v'] >= node_count
        ]
        if bad_edges:
            errors['edges'] = f"Edges {bad_edges} reference nodes outside 0..{node_count - 1}."

        coordinates = data.get('coordinates')
        if coordinates is not None and len(coordinates) != node_count:
            errors['coordinates'] = f"Expected {node_count} coordinates, got {len(coordinates)}."

        if data.get('savings_formula') == SavingsFormula.EUCLIDEAN.value and coordinates is None:
            errors['savings_formula'] = "The 'euclidean' formula requires coordinates."

        if errors:
            raise serializers.ValidationError(errors)
        return data


class RouteSegmentSerializer(serializers.Serializer):
    """Serializer for one leg of a route (shortest path between two consecutive stops)."""
    from_node = serializers.IntegerField(help_text="Stop the segment starts at.")
    to_node = serializers.IntegerField(help_text="Stop the segment ends at.")
    path = serializers.ListField(child=serializers.IntegerField(), help_text="Node sequence of the shortest path.")
    distance = serializers.FloatField(help_text="Length of the shortest path.")


class PlannedRouteSerializer(serializers.Serializer):
    """Serializer for a single selected route."""
    waypoints = serializers.ListField(child=serializers.IntegerField(), help_text="Ordered waypoints, depots excluded.")
    stops = serializers.ListField(child=serializers.IntegerField(), help_text="Start depot, waypoints, end depot.")
    segments = RouteSegmentSerializer(many=True, help_text="Expanded legs of the route.")
    skipped_segments = serializers.ListField(
        child=serializers.ListField(child=serializers.IntegerField(), min_length=2, max_length=2),
        default=list,
        help_text="Legs without a path, left out of the edge list."
    )
    total_distance = serializers.FloatField(help_text="Sum of the segment distances.")
    origin = serializers.CharField(max_length=20, help_text="Selection step that produced the route ('savings', 'relaxed', 'alternative', 'perturbed', 'ortools').")


class RoutePlanResponseSerializer(serializers.Serializer):
    """Serializer for the route planning response."""
    status = serializers.ChoiceField(choices=VALID_STATUSES, help_text="Outcome of the request.")
    total_distance = serializers.FloatField(help_text="Sum of the distances of all returned routes.")
    routes = serializers.ListField(
        child=serializers.ListField(
            child=serializers.ListField(child=serializers.IntegerField(), min_length=2, max_length=2)
        ),
        default=list,
        help_text="One list of [u, v] edge pairs per route, in depot-to-depot order."
    )
    waypoint_routes = serializers.ListField(
        child=serializers.ListField(child=serializers.IntegerField()),
        default=list,
        help_text="Waypoint sequence of every route."
    )
    detailed_routes = PlannedRouteSerializer(many=True, required=False, help_text="Expanded routes with their segments.")
    statistics = serializers.DictField(required=False, help_text="Statistics about the planning run.")
