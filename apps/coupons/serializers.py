from rest_framework import serializers

from apps.meals.serializers import MealSlotMinimalSerializer
from .models import Coupon, CouponStatus, Participant, MAX_FAMILY_SIZE
from .services import display_status, format_time_remaining


class ParticipantSerializer(serializers.ModelSerializer):
    """Participant profile with login email."""

    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Participant
        fields = [
            'id',
            'email',
            'name',
            'phone_number',
            'is_family',
            'family_size',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ParticipantCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, required=False, min_length=8)
    name = serializers.CharField(max_length=200)
    phone_number = serializers.CharField(max_length=20)
    family_size = serializers.IntegerField(min_value=1, max_value=MAX_FAMILY_SIZE, default=1)
    is_family = serializers.BooleanField(required=False)


class ParticipantUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    phone_number = serializers.CharField(max_length=20, required=False)
    family_size = serializers.IntegerField(min_value=1, max_value=MAX_FAMILY_SIZE, required=False)
    is_family = serializers.BooleanField(required=False)


class CouponSerializer(serializers.ModelSerializer):
    """Stored coupon state, used by the admin endpoints."""

    meal_slot = MealSlotMinimalSerializer(read_only=True)
    participant_name = serializers.CharField(source='participant.name', read_only=True)

    class Meta:
        model = Coupon
        fields = [
            'id',
            'unique_id',
            'participant',
            'participant_name',
            'meal_slot',
            'family_member_index',
            'status',
            'claimed_at',
            'expires_at',
            'updated_at',
        ]
        read_only_fields = fields


class HolderCouponSerializer(serializers.Serializer):
    """
    A holder's coupon after reconciliation.

    Expects ``{'coupon': Coupon, 'view': CouponView}`` items and ``now``
    in the context.
    """

    unique_id = serializers.CharField(source='view.unique_id')
    meal_slot = MealSlotMinimalSerializer(source='coupon.meal_slot')
    family_member_index = serializers.IntegerField(source='coupon.family_member_index')
    status = serializers.CharField(source='view.status')
    display_status = serializers.SerializerMethodField()
    claimed_at = serializers.DateTimeField(source='view.claimed_at', allow_null=True)
    expires_at = serializers.DateTimeField(source='view.expires_at', allow_null=True)
    remaining_seconds = serializers.SerializerMethodField()
    time_remaining = serializers.SerializerMethodField()
    source = serializers.CharField(source='view.source')

    def get_display_status(self, obj):
        return display_status(obj['coupon'], status=obj['view'].status, now=self.context.get('now'))

    def get_remaining_seconds(self, obj):
        return obj['view'].remaining_seconds(self.context.get('now'))

    def get_time_remaining(self, obj):
        if obj['view'].status != CouponStatus.ACTIVE:
            return None
        return format_time_remaining(self.get_remaining_seconds(obj))


class ClaimCouponSerializer(serializers.Serializer):
    meal_slot_id = serializers.CharField(max_length=32)
    family_member_index = serializers.IntegerField(min_value=0, default=0)


class ClaimFamilySerializer(serializers.Serializer):
    meal_slot_id = serializers.CharField(max_length=32)


class CouponFilterSerializer(serializers.Serializer):
    """Query parameters for the admin coupon list."""

    status = serializers.ChoiceField(choices=CouponStatus.choices, required=False)
    meal_slot_id = serializers.CharField(required=False)
    participant_id = serializers.UUIDField(required=False)
