"""
API views for the savings router.

This module provides the API endpoints for planning start-to-end routes.
"""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.decorators import api_view
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
import logging

from savings_router.core.config import SolveConfig
from savings_router.core.types import STATUS_ERROR, STATUS_INVALID
from savings_router.models import Edge, GraphInput
from savings_router.services.route_planning_service import RoutePlanningService
from savings_router.api.serializers import RoutePlanRequestSerializer, RoutePlanResponseSerializer

# Set up logging
logger = logging.getLogger(__name__)

CONFIG_FIELDS = (
    'shuffle_mode', 'savings_formula', 'min_difference_threshold',
    'allow_relaxation', 'num_variants', 'seed',
)


class PlanRoutesView(APIView):
    """
    API view for planning routes between the start and end depot.
    """

    @swagger_auto_schema(
        request_body=RoutePlanRequestSerializer,
        responses={
            200: RoutePlanResponseSerializer,
            400: "Bad Request - Invalid input data",
            500: "Internal Server Error - Route planning failed"
        },
        operation_id="plan_routes_post",
        operation_description="""Builds up to `n_of_roads` routes from node 0 to the last node with the
        Clarke-Wright savings heuristic (or OR-Tools), each route given as a list of graph edges.""",
        tags=['Route Planning']
    )
    def post(self, request, format=None):
        """
        POST endpoint for route planning.

        Args:
            request: HTTP request object containing the graph and strategy options.
            format: Format of the response.

        Returns:
            Response object with the planned routes.
        """
        serializer = RoutePlanRequestSerializer(data=request.data)

        if not serializer.is_valid():
            logger.error(f"PlanRoutesView validation error: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        graph = GraphInput(
            node_count=data['node_count'],
            edges=[Edge(**edge) for edge in data['edges']],
            coordinates=[tuple(point) for point in data['coordinates']] if data.get('coordinates') is not None else None
        )

        try:
            config = SolveConfig.from_settings(**{name: data.get(name) for name in CONFIG_FIELDS})
        except ValueError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        result = RoutePlanningService().plan_routes(
            graph,
            n_of_roads=data.get('n_of_roads'),
            config=config,
            solver_name=data.get('solver')
        )

        if result.status == STATUS_INVALID:
            return Response(
                {"status": result.status, "error": result.statistics.get('error')},
                status=status.HTTP_400_BAD_REQUEST
            )
        if result.status == STATUS_ERROR:
            return Response(
                {"status": result.status, "error": "An unexpected error occurred during route planning."},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        response_serializer = RoutePlanResponseSerializer(data={
            "status": result.status,
            "total_distance": result.total_distance,
            "routes": result.routes,
            "waypoint_routes": result.waypoint_routes,
            "detailed_routes": result.detailed_routes,
            "statistics": result.statistics,
        })
        if not response_serializer.is_valid():
            logger.error(f"PlanRoutesView response serialization error: {response_serializer.errors}")
            return Response(response_serializer.errors, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(response_serializer.data, status=status.HTTP_200_OK)


@swagger_auto_schema(
    method='get',
    operation_id="health_check_get",
    operation_description="Performs a health check of the API. Returns the operational status of the service.",
    responses={
        200: openapi.Response(
            description="API is healthy and operational.",
            examples={"application/json": {"status": "healthy"}}
        )
    },
    tags=['Health Check']
)
@api_view(['GET'])
def health_check(request):
    """
    Health check endpoint to verify the API is running.
    """
    return Response({"status": "healthy"}, status=status.HTTP_200_OK)
