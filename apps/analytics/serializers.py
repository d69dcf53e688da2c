"""
Serializers for analytics app.

Input Serializers:
    SlotBreakdownQuerySerializer - Validates slot breakdown parameters

Response Serializers:
    AdminStatsSerializer - Event headline numbers
    MealSlotStatsSerializer - Per-slot statistics
"""

from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class SlotBreakdownQuerySerializer(serializers.Serializer):
    """
    Query Parameters:
        day (int): Only include slots of this event day
    """

    day = serializers.IntegerField(min_value=1, required=False)


# =============================================================================
# Response Serializers
# =============================================================================

class AdminStatsSerializer(serializers.Serializer):
    total_participants = serializers.IntegerField()
    family_participants = serializers.IntegerField()
    total_exhibitors = serializers.IntegerField()
    total_admins = serializers.IntegerField()
    total_coupons = serializers.IntegerField()
    available_coupons = serializers.IntegerField()
    active_coupons = serializers.IntegerField()
    used_coupons = serializers.IntegerField()
    total_meal_claims = serializers.IntegerField()
    lunch_meals_claimed = serializers.IntegerField()
    dinner_meals_claimed = serializers.IntegerField()
    generated_at = serializers.DateTimeField()


class MealSlotStatsSerializer(serializers.Serializer):
    slot_id = serializers.CharField()
    name = serializers.CharField()
    day = serializers.IntegerField()
    meal_type = serializers.CharField()
    time_status = serializers.CharField()
    total_coupons = serializers.IntegerField()
    available_coupons = serializers.IntegerField()
    active_coupons = serializers.IntegerField()
    used_coupons = serializers.IntegerField()
    exhibitor_meals = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    """Error response format."""

    error = serializers.CharField()
