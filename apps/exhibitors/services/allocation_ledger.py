"""
Exhibitor allocation ledger.

Every bulk claim is one ``AllocationClaim`` row. How much a company may
still claim depends on ``MEAL_PASS['ALLOCATION_POLICY']``:

    per_slot  - the plan allowance applies to each slot separately; a
                slot is exhausted once claimed
    pooled    - the plan allowance is shared by all slots of a meal type
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.db import transaction, IntegrityError, DatabaseError
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.exhibitors.models import AllocationClaim, ExhibitorCompany, ExhibitorEmployee
from apps.meals.models import MealSlot, MealType

from .exceptions import (
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

logger = logging.getLogger(__name__)

PER_SLOT = 'per_slot'
POOLED = 'pooled'


def allocation_policy() -> str:
    policy = settings.MEAL_PASS['ALLOCATION_POLICY']
    if policy not in (PER_SLOT, POOLED):
        raise ImproperlyConfigured(
            f"MEAL_PASS['ALLOCATION_POLICY'] must be '{PER_SLOT}' or '{POOLED}', got {policy!r}"
        )
    return policy


def get_company_for_user(user: User) -> ExhibitorCompany:
    """
    Raises:
        ConfigurationError: If the user has no exhibitor profile
    """
    try:
        return ExhibitorCompany.objects.get(user=user)
    except ExhibitorCompany.DoesNotExist:
        raise ConfigurationError("No exhibitor company is linked to this account")


def _claimed_quantity(company: ExhibitorCompany, meal_type: str) -> int:
    total = (
        AllocationClaim.objects
        .filter(company=company, meal_type=meal_type)
        .aggregate(total=Sum('quantity'))['total']
    )
    return total or 0


def remaining_allocation(
    *,
    company: ExhibitorCompany,
    meal_type: str,
    meal_slot: Optional[MealSlot] = None
) -> int:
    """
    Meals the company can still claim.

    Under the per-slot policy ``meal_slot`` narrows the answer to that
    slot (zero once claimed); without it the plan allowance is returned.
    """
    allowance = company.allocation_for(meal_type)

    if allocation_policy() == POOLED:
        return max(0, allowance - _claimed_quantity(company, meal_type))

    if meal_slot is not None and AllocationClaim.objects.filter(
        company=company, meal_slot=meal_slot
    ).exists():
        return 0
    return allowance


def slot_availability(*, company: ExhibitorCompany, meal_slot: MealSlot) -> dict:
    """Whether a slot can be claimed and the largest quantity allowed."""
    claim = AllocationClaim.objects.filter(company=company, meal_slot=meal_slot).first()
    if claim is not None:
        return {
            'meal_slot_id': meal_slot.slot_id,
            'meal_type': meal_slot.meal_type,
            'is_available': False,
            'max_quantity': 0,
            'claimed_quantity': claim.quantity,
        }

    remaining = remaining_allocation(
        company=company, meal_type=meal_slot.meal_type, meal_slot=meal_slot
    )
    return {
        'meal_slot_id': meal_slot.slot_id,
        'meal_type': meal_slot.meal_type,
        'is_available': remaining > 0,
        'max_quantity': remaining,
        'claimed_quantity': 0,
    }


def allocation_summary(*, company: ExhibitorCompany) -> dict:
    """
    Allocated, claimed and remaining meals per meal type.

    Always the pooled view: plan allowance minus everything claimed for
    that meal type, whatever the claim policy.
    """
    summary = {}
    for meal_type in MealType.values:
        allocated = company.allocation_for(meal_type)
        claimed = _claimed_quantity(company, meal_type)
        summary[meal_type] = {
            'allocated': allocated,
            'claimed': claimed,
            'remaining': max(0, allocated - claimed),
        }
    return summary


def _lock_for_claim(*, company, employee_id, meal_slot, meal_type):
    """Lock the company row and load what a claim is checked against."""
    company = ExhibitorCompany.objects.select_for_update().get(pk=company.pk)

    try:
        employee = company.employees.get(id=employee_id, is_active=True)
    except (ExhibitorEmployee.DoesNotExist, ValidationError, ValueError):
        raise EmployeeRequiredError("Selected employee is not an active member of this company")

    if AllocationClaim.objects.filter(company=company, meal_slot=meal_slot).exists():
        raise SlotAlreadyClaimedError(f"{meal_slot.name} has already been claimed")

    remaining = remaining_allocation(company=company, meal_type=meal_type, meal_slot=meal_slot)
    return company, employee, remaining


@transaction.atomic
def claim_bulk(
    *,
    company: ExhibitorCompany,
    meal_slot_id: str,
    meal_type: str,
    quantity: int,
    employee_id: Optional[UUID],
    now: Optional[datetime] = None
) -> AllocationClaim:
    """
    Record a bulk meal claim for a slot.

    The company row is locked for the duration so concurrent claims
    see each other's ledger entries; the unique (company, slot)
    constraint settles any remaining race.

    Raises:
        InvalidQuantityError: If quantity is not positive
        EmployeeRequiredError: If no active employee of the company is named
        MealSlotNotFoundError: If the slot id is unknown
        MealTypeMismatchError: If meal_type differs from the slot's
        SlotAlreadyClaimedError: If the company already claimed the slot
        AllocationExceededError: If quantity exceeds the remaining allocation
        NetworkFailureError: If the ledger cannot be read or written
    """
    now = now or timezone.now()

    if quantity is None or quantity <= 0:
        raise InvalidQuantityError("Quantity must be at least 1")
    if not employee_id:
        raise EmployeeRequiredError("Select an employee to collect the meals")

    try:
        meal_slot = MealSlot.objects.get(slot_id=meal_slot_id)
    except MealSlot.DoesNotExist:
        raise MealSlotNotFoundError(f"Meal slot {meal_slot_id} not found")

    if meal_type != meal_slot.meal_type:
        raise MealTypeMismatchError(
            f"{meal_slot.name} serves {meal_slot.meal_type}, not {meal_type}"
        )

    try:
        company, employee, remaining = _lock_for_claim(
            company=company,
            employee_id=employee_id,
            meal_slot=meal_slot,
            meal_type=meal_type,
        )
    except DatabaseError as exc:
        logger.error("Ledger read failed for company %s: %s", company.company_code, exc)
        raise NetworkFailureError("Could not check the allocation, please try again") from exc

    if quantity > remaining:
        raise AllocationExceededError(
            f"Only {remaining} {meal_type} meals remaining",
            remaining=remaining
        )

    try:
        with transaction.atomic():
            claim = AllocationClaim.objects.create(
                company=company,
                meal_slot=meal_slot,
                meal_type=meal_type,
                quantity=quantity,
                employee=employee,
                claimed_at=now,
                expires_at=now + timedelta(minutes=settings.MEAL_PASS['COUPON_VALIDITY_MINUTES']),
            )
    except IntegrityError:
        # Database constraint caught a concurrent claim of the same slot
        raise SlotAlreadyClaimedError(f"{meal_slot.name} has already been claimed")
    except DatabaseError as exc:
        logger.error("Ledger write failed for company %s: %s", company.company_code, exc)
        raise NetworkFailureError("Could not save the claim, please try again") from exc

    logger.info(
        "Company %s claimed %d %s meals for slot %s",
        company.company_code, quantity, meal_type, meal_slot.slot_id
    )
    return claim


def get_company_claims(*, company: ExhibitorCompany) -> List[AllocationClaim]:
    return list(
        AllocationClaim.objects
        .filter(company=company)
        .select_related('meal_slot', 'employee')
    )


@transaction.atomic
def reset_allocation_claim(*, claim_id: UUID) -> None:
    """
    Delete a ledger record, freeing the slot and its quantity.

    Raises:
        ClaimNotFoundError: If the claim does not exist
    """
    try:
        claim = AllocationClaim.objects.select_related('company', 'meal_slot').get(id=claim_id)
    except (AllocationClaim.DoesNotExist, ValidationError):
        raise ClaimNotFoundError(f"Allocation claim {claim_id} not found")

    claim.delete()
    logger.info(
        "Reset allocation claim of %s for slot %s",
        claim.company.company_code, claim.meal_slot.slot_id
    )
