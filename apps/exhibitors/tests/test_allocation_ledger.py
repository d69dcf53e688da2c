import pytest
import uuid
from unittest.mock import patch
from datetime import timedelta
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.utils import timezone
from apps.accounts.models import User
from apps.exhibitors.models import AllocationClaim, ExhibitorCompany
from apps.exhibitors.services import (
    claim_bulk,
    remaining_allocation,
    slot_availability,
    allocation_summary,
    get_company_claims,
    get_company_for_user,
    reset_allocation_claim,
    remove_employee,
    SlotAlreadyClaimedError,
    AllocationExceededError,
    InvalidQuantityError,
    EmployeeRequiredError,
    MealTypeMismatchError,
    MealSlotNotFoundError,
    ClaimNotFoundError,
    ConfigurationError,
    NetworkFailureError,
)
from apps.meals.models import MealType


def _claim(company, employee, slot_id='lunch_1', meal_type=MealType.LUNCH, quantity=2, **kwargs):
    return claim_bulk(
        company=company,
        meal_slot_id=slot_id,
        meal_type=meal_type,
        quantity=quantity,
        employee_id=employee.pk if employee else None,
        **kwargs
    )


@pytest.mark.django_db
class TestClaimBulk:
    """Tests for recording bulk claims"""

    def test_claim_records_ledger_entry(self, diamond_company, employee, meal_slots):
        now = timezone.now()
        claim = _claim(diamond_company, employee, quantity=3, now=now)

        assert claim.quantity == 3
        assert claim.employee == employee
        assert claim.meal_slot.slot_id == 'lunch_1'
        assert claim.expires_at - claim.claimed_at == timedelta(minutes=15)
        assert AllocationClaim.objects.count() == 1

    def test_zero_quantity(self, diamond_company, employee, meal_slots):
        with pytest.raises(InvalidQuantityError):
            _claim(diamond_company, employee, quantity=0)

    def test_negative_quantity(self, diamond_company, employee, meal_slots):
        with pytest.raises(InvalidQuantityError):
            _claim(diamond_company, employee, quantity=-1)

    def test_employee_required(self, diamond_company, meal_slots):
        with pytest.raises(EmployeeRequiredError):
            _claim(diamond_company, None)

    def test_unknown_employee(self, diamond_company, meal_slots):
        with pytest.raises(EmployeeRequiredError):
            claim_bulk(
                company=diamond_company,
                meal_slot_id='lunch_1',
                meal_type=MealType.LUNCH,
                quantity=1,
                employee_id=uuid.uuid4(),
            )

    def test_employee_of_other_company(self, diamond_company, gold_employee, meal_slots):
        with pytest.raises(EmployeeRequiredError):
            _claim(diamond_company, gold_employee)

    def test_removed_employee(self, diamond_company, employee, meal_slots):
        remove_employee(company=diamond_company, employee_id=employee.pk)

        with pytest.raises(EmployeeRequiredError):
            _claim(diamond_company, employee)

    def test_unknown_slot(self, diamond_company, employee, meal_slots):
        with pytest.raises(MealSlotNotFoundError):
            _claim(diamond_company, employee, slot_id='breakfast_1')

    def test_meal_type_mismatch(self, diamond_company, employee, meal_slots):
        with pytest.raises(MealTypeMismatchError):
            _claim(diamond_company, employee, slot_id='gala_1', meal_type=MealType.LUNCH)

    def test_slot_claimed_once(self, diamond_company, employee, meal_slots):
        _claim(diamond_company, employee, quantity=1)

        with pytest.raises(SlotAlreadyClaimedError):
            _claim(diamond_company, employee, quantity=1)

    def test_over_allowance(self, diamond_company, employee, meal_slots):
        with pytest.raises(AllocationExceededError) as exc_info:
            _claim(diamond_company, employee, quantity=6)

        assert exc_info.value.remaining == 5

    def test_plan_without_dinner(self, gold_company, gold_employee, meal_slots):
        with pytest.raises(AllocationExceededError) as exc_info:
            _claim(gold_company, gold_employee, slot_id='gala_1', meal_type=MealType.DINNER, quantity=1)

        assert exc_info.value.remaining == 0

    def test_companies_claim_independently(self, diamond_company, employee, gold_company, gold_employee, meal_slots):
        _claim(diamond_company, employee, quantity=5)
        _claim(gold_company, gold_employee, quantity=2)

        assert AllocationClaim.objects.filter(meal_slot__slot_id='lunch_1').count() == 2

    def test_store_failure_while_locking(self, diamond_company, employee, meal_slots):
        with patch.object(ExhibitorCompany.objects, 'select_for_update', side_effect=DatabaseError('timeout')):
            with pytest.raises(NetworkFailureError):
                _claim(diamond_company, employee)

        assert not AllocationClaim.objects.exists()


@pytest.mark.django_db
class TestAllocationPolicy:
    """Tests for per-slot versus pooled allowances"""

    def test_per_slot_allowance_renews_each_slot(self, diamond_company, employee, meal_slots):
        _claim(diamond_company, employee, quantity=5)
        claim = _claim(diamond_company, employee, slot_id='lunch_2', quantity=5)

        assert claim.quantity == 5

    def test_per_slot_remaining(self, diamond_company, employee, lunch_slot, second_lunch_slot):
        _claim(diamond_company, employee, quantity=2)

        assert remaining_allocation(
            company=diamond_company, meal_type=MealType.LUNCH, meal_slot=lunch_slot
        ) == 0
        assert remaining_allocation(
            company=diamond_company, meal_type=MealType.LUNCH, meal_slot=second_lunch_slot
        ) == 5

    def test_pooled_allowance_is_shared(self, pooled_policy, diamond_company, employee, meal_slots):
        _claim(diamond_company, employee, quantity=3)

        with pytest.raises(AllocationExceededError) as exc_info:
            _claim(diamond_company, employee, slot_id='lunch_2', quantity=3)

        assert exc_info.value.remaining == 2

    def test_pooled_remaining(self, pooled_policy, diamond_company, employee, meal_slots):
        _claim(diamond_company, employee, quantity=3)

        assert remaining_allocation(company=diamond_company, meal_type=MealType.LUNCH) == 2
        assert remaining_allocation(company=diamond_company, meal_type=MealType.DINNER) == 4

    def test_unknown_policy(self, settings, diamond_company):
        settings.MEAL_PASS = {**settings.MEAL_PASS, 'ALLOCATION_POLICY': 'greedy'}

        with pytest.raises(ImproperlyConfigured):
            remaining_allocation(company=diamond_company, meal_type=MealType.LUNCH)


@pytest.mark.django_db
class TestLedgerViews:
    """Tests for availability, summary and reset"""

    def test_slot_availability_before_claim(self, diamond_company, lunch_slot):
        row = slot_availability(company=diamond_company, meal_slot=lunch_slot)

        assert row == {
            'meal_slot_id': 'lunch_1',
            'meal_type': MealType.LUNCH,
            'is_available': True,
            'max_quantity': 5,
            'claimed_quantity': 0,
        }

    def test_slot_availability_after_claim(self, diamond_company, employee, lunch_slot):
        _claim(diamond_company, employee, quantity=2)

        row = slot_availability(company=diamond_company, meal_slot=lunch_slot)

        assert row['is_available'] is False
        assert row['claimed_quantity'] == 2
        assert row['max_quantity'] == 0

    def test_zero_allowance_slot_unavailable(self, gold_company, dinner_slot):
        row = slot_availability(company=gold_company, meal_slot=dinner_slot)

        assert row['is_available'] is False

    def test_summary(self, diamond_company, employee, meal_slots):
        _claim(diamond_company, employee, quantity=2)
        _claim(diamond_company, employee, slot_id='gala_1', meal_type=MealType.DINNER, quantity=4)

        summary = allocation_summary(company=diamond_company)

        assert summary[MealType.LUNCH] == {'allocated': 5, 'claimed': 2, 'remaining': 3}
        assert summary[MealType.DINNER] == {'allocated': 4, 'claimed': 4, 'remaining': 0}

    def test_reset_frees_slot(self, diamond_company, employee, lunch_slot):
        claim = _claim(diamond_company, employee, quantity=2)

        reset_allocation_claim(claim_id=claim.pk)

        assert get_company_claims(company=diamond_company) == []
        assert slot_availability(company=diamond_company, meal_slot=lunch_slot)['is_available'] is True

    def test_reset_unknown_claim(self, db):
        with pytest.raises(ClaimNotFoundError):
            reset_allocation_claim(claim_id=uuid.uuid4())

    def test_company_lookup(self, diamond_company, gold_company):
        assert get_company_for_user(diamond_company.user) == diamond_company

        stranger = User.objects.create_user(email='stranger@example.com', password='TestPass123!')
        with pytest.raises(ConfigurationError):
            get_company_for_user(stranger)
