"""
Participant management service.

Creates participants together with their login and provisions one
coupon per meal slot per family member.
"""

import logging
from typing import Iterable, Optional

from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet

from apps.accounts.models import User, UserRole
from apps.coupons.models import Coupon, Participant, MAX_FAMILY_SIZE
from apps.meals.models import MealSlot

from .coupon_keys import derive_key
from .exceptions import ConfigurationError, DuplicateParticipantError

logger = logging.getLogger(__name__)


def get_participant_for_user(user: User) -> Participant:
    """
    Resolve the participant profile behind a login.

    Raises:
        ConfigurationError: If the user has no participant profile
    """
    try:
        return Participant.objects.get(user=user)
    except Participant.DoesNotExist:
        raise ConfigurationError("No participant profile is linked to this account")


def provision_coupons(
    *,
    participant: Participant,
    meal_slots: Optional[Iterable[MealSlot]] = None
) -> int:
    """
    Create any missing coupons for the participant.

    Idempotent: existing coupons keep their state.

    Returns:
        Number of coupons created
    """
    if meal_slots is None:
        meal_slots = MealSlot.objects.all()

    existing = set(
        Coupon.objects
        .filter(participant=participant)
        .values_list('meal_slot_id', 'family_member_index')
    )

    to_create = []
    for slot in meal_slots:
        for index in range(participant.coupon_holder_count):
            if (slot.pk, index) in existing:
                continue
            to_create.append(Coupon(
                unique_id=derive_key(participant.pk, slot.slot_id, index),
                participant=participant,
                meal_slot=slot,
                family_member_index=index,
            ))

    Coupon.objects.bulk_create(to_create, ignore_conflicts=True)
    if to_create:
        logger.info("Provisioned %d coupons for participant %s", len(to_create), participant.pk)
    return len(to_create)


def provision_meal_slot(*, meal_slot: MealSlot) -> int:
    """Create coupons for a newly added slot across all participants."""
    created = 0
    for participant in Participant.objects.all():
        created += provision_coupons(participant=participant, meal_slots=[meal_slot])
    return created


@transaction.atomic
def create_participant(
    *,
    email: str,
    name: str,
    phone_number: str,
    family_size: int = 1,
    is_family: Optional[bool] = None,
    password: Optional[str] = None
) -> Participant:
    """
    Register a participant and provision their coupons.

    Raises:
        DuplicateParticipantError: If email or phone number is taken
        ValueError: If family_size is out of range
    """
    if not 1 <= family_size <= MAX_FAMILY_SIZE:
        raise ValueError(f"family_size must be between 1 and {MAX_FAMILY_SIZE}")
    if is_family is None:
        is_family = family_size > 1

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=name,
            role=UserRole.PARTICIPANT,
        )
        participant = Participant.objects.create(
            user=user,
            name=name,
            phone_number=phone_number,
            is_family=is_family,
            family_size=family_size,
        )
    except IntegrityError:
        raise DuplicateParticipantError(
            f"A participant with email {email} or phone {phone_number} already exists"
        )

    provision_coupons(participant=participant)
    logger.info("Created participant %s (family size %d)", participant.pk, family_size)
    return participant


@transaction.atomic
def update_participant(
    *,
    participant: Participant,
    name: Optional[str] = None,
    phone_number: Optional[str] = None,
    family_size: Optional[int] = None,
    is_family: Optional[bool] = None
) -> Participant:
    """
    Update participant details.

    Growing the family provisions coupons for the new members. Shrinking
    it keeps the extra coupons but they are no longer returned.
    """
    participant = Participant.objects.select_for_update().get(pk=participant.pk)

    if name is not None:
        participant.name = name
    if phone_number is not None:
        participant.phone_number = phone_number
    if family_size is not None:
        if not 1 <= family_size <= MAX_FAMILY_SIZE:
            raise ValueError(f"family_size must be between 1 and {MAX_FAMILY_SIZE}")
        participant.family_size = family_size
        if is_family is None:
            participant.is_family = family_size > 1
    if is_family is not None:
        participant.is_family = is_family

    try:
        participant.save()
    except IntegrityError:
        raise DuplicateParticipantError(f"Phone number {phone_number} is already registered")

    provision_coupons(participant=participant)
    return participant


def search_participants(*, search: Optional[str] = None) -> QuerySet[Participant]:
    """Participants whose name, phone number or email contains ``search``."""
    queryset = Participant.objects.select_related('user')

    if search:
        search = search.strip()
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(phone_number__icontains=search) |
            Q(user__email__icontains=search)
        )
    return queryset
