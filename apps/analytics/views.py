from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.permissions import IsEventAdmin
from .analytics import EventStatsQueries
from .serializers import (
    SlotBreakdownQuerySerializer,
    AdminStatsSerializer,
    MealSlotStatsSerializer,
    ErrorSerializer,
)


@extend_schema(
    responses={200: AdminStatsSerializer, 403: ErrorSerializer},
    description="Headline coupon and allocation numbers for the admin dashboard.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEventAdmin])
def admin_stats(request):
    """Event statistics - thin HTTP handler."""
    data = EventStatsQueries.admin_stats(now=timezone.now())
    return Response(AdminStatsSerializer(data).data)


@extend_schema(
    parameters=[
        OpenApiParameter('day', OpenApiTypes.INT, description='Event day (1, 2, ...)'),
    ],
    responses={200: MealSlotStatsSerializer(many=True), 400: ErrorSerializer},
    description="Coupon states and exhibitor meals per meal slot.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEventAdmin])
def meal_slot_stats(request):
    """Per-slot statistics - thin HTTP handler."""
    query_serializer = SlotBreakdownQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    data = EventStatsQueries.meal_slot_breakdown(
        now=timezone.now(),
        day=query_serializer.validated_data.get('day'),
    )
    return Response(MealSlotStatsSerializer(data, many=True).data)
