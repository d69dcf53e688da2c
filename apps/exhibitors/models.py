from django.core.validators import MinValueValidator
from django.db import models
import uuid

from apps.meals.models import MealType


class ExhibitorPlan(models.TextChoices):
    DIAMOND = 'diamond', 'Diamond'
    PLATINUM = 'platinum', 'Platinum'
    GOLD = 'gold', 'Gold'
    SILVER = 'silver', 'Silver'


# Meals per slot (or per event under the pooled policy) by plan and meal type
PLAN_ALLOCATIONS = {
    ExhibitorPlan.DIAMOND: {MealType.LUNCH: 5, MealType.DINNER: 4},
    ExhibitorPlan.PLATINUM: {MealType.LUNCH: 3, MealType.DINNER: 2},
    ExhibitorPlan.GOLD: {MealType.LUNCH: 2, MealType.DINNER: 0},
    ExhibitorPlan.SILVER: {MealType.LUNCH: 1, MealType.DINNER: 0},
}


class ExhibitorCompany(models.Model):
    """Exhibiting company holding a plan-based meal allocation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='exhibitor'
    )
    company_code = models.CharField(max_length=20, unique=True, db_index=True)
    company_name = models.CharField(max_length=200)
    phone_number = models.CharField(max_length=20, blank=True)
    plan = models.CharField(max_length=20, choices=ExhibitorPlan.choices)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'exhibitor_companies'
        verbose_name_plural = 'exhibitor companies'
        ordering = ['company_name']

    def __str__(self):
        return f"{self.company_name} ({self.get_plan_display()})"

    def allocation_for(self, meal_type: str) -> int:
        return PLAN_ALLOCATIONS.get(self.plan, {}).get(meal_type, 0)


class ExhibitorEmployee(models.Model):
    """Staff member who collects meals for a company. Removal is soft."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(
        ExhibitorCompany,
        on_delete=models.CASCADE,
        related_name='employees'
    )
    employee_name = models.CharField(max_length=200)
    employee_phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'exhibitor_employees'
        indexes = [
            models.Index(fields=['company', 'is_active'], name='exh_employee_active_idx'),
        ]
        ordering = ['employee_name']

    def __str__(self):
        return f"{self.employee_name} @ {self.company.company_name}"


class AllocationClaim(models.Model):
    """
    Ledger record of one bulk meal claim.

    A company claims each meal slot at most once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(
        ExhibitorCompany,
        on_delete=models.CASCADE,
        related_name='claims'
    )
    meal_slot = models.ForeignKey(
        'meals.MealSlot',
        on_delete=models.CASCADE,
        related_name='allocation_claims'
    )
    meal_type = models.CharField(max_length=10, choices=MealType.choices)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    employee = models.ForeignKey(
        ExhibitorEmployee,
        on_delete=models.SET_NULL,
        null=True,
        related_name='claims'
    )

    claimed_at = models.DateTimeField()
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'allocation_claims'
        constraints = [
            models.UniqueConstraint(
                fields=['company', 'meal_slot'],
                name='uniq_company_meal_slot_claim',
            ),
        ]
        indexes = [
            models.Index(fields=['company', 'meal_type'], name='alloc_company_type_idx'),
        ]
        ordering = ['-claimed_at']

    def __str__(self):
        return f"{self.company.company_name}: {self.quantity} x {self.meal_slot.name}"
