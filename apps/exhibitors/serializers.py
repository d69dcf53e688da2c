from django.utils import timezone
from rest_framework import serializers

from apps.meals.models import MealType
from apps.meals.serializers import MealSlotMinimalSerializer
from .models import AllocationClaim, ExhibitorCompany, ExhibitorEmployee, ExhibitorPlan


class ExhibitorEmployeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExhibitorEmployee
        fields = ['id', 'employee_name', 'employee_phone', 'is_active', 'created_at']
        read_only_fields = ['id', 'is_active', 'created_at']


class ExhibitorEmployeeUpdateSerializer(serializers.Serializer):
    employee_name = serializers.CharField(max_length=200, required=False)
    employee_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)


class ExhibitorCompanySerializer(serializers.ModelSerializer):
    """Company profile with its allocation summary (``summary`` in context)."""

    email = serializers.EmailField(source='user.email', read_only=True)
    allocation = serializers.SerializerMethodField()

    class Meta:
        model = ExhibitorCompany
        fields = [
            'id',
            'email',
            'company_code',
            'company_name',
            'phone_number',
            'plan',
            'allocation',
        ]
        read_only_fields = fields

    def get_allocation(self, obj):
        return self.context.get('summary')


class AllocationClaimSerializer(serializers.ModelSerializer):
    meal_slot = MealSlotMinimalSerializer(read_only=True)
    company_name = serializers.CharField(source='company.company_name', read_only=True)
    employee_name = serializers.CharField(source='employee.employee_name', read_only=True, default=None)
    status = serializers.SerializerMethodField()

    class Meta:
        model = AllocationClaim
        fields = [
            'id',
            'company_name',
            'meal_slot',
            'meal_type',
            'quantity',
            'employee',
            'employee_name',
            'claimed_at',
            'expires_at',
            'status',
        ]
        read_only_fields = fields

    def get_status(self, obj):
        now = self.context.get('now') or timezone.now()
        return 'active' if now < obj.expires_at else 'used'


class ClaimBulkSerializer(serializers.Serializer):
    meal_slot_id = serializers.CharField(max_length=32)
    meal_type = serializers.ChoiceField(choices=MealType.choices)
    # Range checks happen in the service so every failure has its own error
    quantity = serializers.IntegerField()
    employee_id = serializers.UUIDField(allow_null=True, default=None)


class SlotAvailabilitySerializer(serializers.Serializer):
    meal_slot_id = serializers.CharField()
    meal_type = serializers.CharField()
    is_available = serializers.BooleanField()
    max_quantity = serializers.IntegerField()
    claimed_quantity = serializers.IntegerField()


class ExhibitorCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    company_code = serializers.CharField(max_length=20)
    company_name = serializers.CharField(max_length=200)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    plan = serializers.ChoiceField(choices=ExhibitorPlan.choices)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={'input_type': 'password'}
    )


class ExhibitorUpdateSerializer(serializers.Serializer):
    company_name = serializers.CharField(max_length=200, required=False)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    plan = serializers.ChoiceField(choices=ExhibitorPlan.choices, required=False)
