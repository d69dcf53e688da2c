from rest_framework import serializers
from .models import MealSlot


class MealSlotSerializer(serializers.ModelSerializer):
    """Meal slot with its current time-window status."""

    time_status = serializers.SerializerMethodField()

    class Meta:
        model = MealSlot
        fields = [
            'slot_id',
            'name',
            'day',
            'meal_type',
            'start_time',
            'end_time',
            'event_date',
            'time_status',
        ]
        read_only_fields = fields

    def get_time_status(self, obj):
        return obj.time_status(now=self.context.get('now'))


class MealSlotMinimalSerializer(serializers.ModelSerializer):
    """Minimal slot info for nested serialization."""

    class Meta:
        model = MealSlot
        fields = ['slot_id', 'name', 'day', 'meal_type', 'event_date']
        read_only_fields = fields
