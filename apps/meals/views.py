from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from .models import MealSlot
from .serializers import MealSlotSerializer


class MealSlotViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only meal slot catalog.

    list: All meal slots in event order
    retrieve: One meal slot by its slot id
    """

    queryset = MealSlot.objects.all()
    serializer_class = MealSlotSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = 'slot_id'
