"""
Coupon claim state machine.

    available --claim--> active --expiry or redeem--> used
        ^                                               |
        +-------------------- admin reset --------------+

Claims are single conditional UPDATEs on ``status='available'`` so two
concurrent claims of one coupon cannot both succeed.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings
from django.db import transaction, DatabaseError
from django.utils import timezone

from apps.coupons.models import Coupon, CouponStatus, DisplayStatus, Participant
from apps.meals.models import MealSlot, MealTimeStatus

from .exceptions import (
    InvalidTransitionError,
    MealSlotLockedError,
    CouponNotFoundError,
    MealSlotNotFoundError,
    NotFamilyParticipantError,
    NetworkFailureError,
)
from .reconciliation import CouponReconciler, RemoteCouponRecord

logger = logging.getLogger(__name__)


def validity_window() -> timedelta:
    return timedelta(minutes=settings.MEAL_PASS['COUPON_VALIDITY_MINUTES'])


def meal_window_enforced() -> bool:
    return bool(settings.MEAL_PASS['ENFORCE_MEAL_WINDOW'])


def get_meal_slot(meal_slot_id: str) -> MealSlot:
    try:
        return MealSlot.objects.get(slot_id=meal_slot_id)
    except MealSlot.DoesNotExist:
        raise MealSlotNotFoundError(f"Meal slot {meal_slot_id} not found")


def get_participant_coupon(
    *,
    participant: Participant,
    meal_slot_id: str,
    family_member_index: int = 0
) -> Coupon:
    """
    Fetch one of the participant's coupons.

    Raises:
        MealSlotNotFoundError: If the slot id is unknown
        CouponNotFoundError: If no coupon exists for that member index
    """
    meal_slot = get_meal_slot(meal_slot_id)

    if family_member_index < 0 or family_member_index >= participant.coupon_holder_count:
        raise CouponNotFoundError(
            f"{participant.name} has no family member #{family_member_index}"
        )

    try:
        return (
            Coupon.objects
            .select_related('meal_slot', 'participant')
            .get(
                participant=participant,
                meal_slot=meal_slot,
                family_member_index=family_member_index
            )
        )
    except Coupon.DoesNotExist:
        raise CouponNotFoundError(
            f"No coupon for {meal_slot.name} (member #{family_member_index})"
        )


def claim(coupon: Coupon, *, now: Optional[datetime] = None) -> Coupon:
    """
    Move a coupon from available to active and start its validity window.

    The local cache is written before the remote write so the countdown
    can render immediately; it is discarded again if the write does not
    land.

    Raises:
        InvalidTransitionError: If the coupon is not available
        MealSlotLockedError: If the meal window is enforced and closed
        NetworkFailureError: If the database write fails
    """
    now = now or timezone.now()

    if coupon.status != CouponStatus.AVAILABLE:
        raise InvalidTransitionError(
            f"Coupon {coupon.unique_id} is {coupon.status}, not available"
        )

    if meal_window_enforced():
        time_status = coupon.meal_slot.time_status(now=now)
        if time_status != MealTimeStatus.ACTIVE:
            raise MealSlotLockedError(
                f"{coupon.meal_slot.name} is {time_status}; coupons can only be "
                f"claimed between {coupon.meal_slot.start_time} and {coupon.meal_slot.end_time}"
            )

    claimed_at = now
    expires_at = now + validity_window()

    reconciler = CouponReconciler()
    reconciler.record_local_claim(coupon.unique_id, claimed_at, expires_at)

    try:
        updated = (
            Coupon.objects
            .filter(pk=coupon.pk, status=CouponStatus.AVAILABLE)
            .update(
                status=CouponStatus.ACTIVE,
                claimed_at=claimed_at,
                expires_at=expires_at,
                updated_at=now,
            )
        )
    except DatabaseError as exc:
        reconciler.discard(coupon.unique_id)
        logger.error("Claim write failed for coupon %s: %s", coupon.unique_id, exc)
        raise NetworkFailureError("Could not save the claim, please try again") from exc

    if updated == 0:
        # Lost the race: someone else claimed it first
        reconciler.discard(coupon.unique_id)
        coupon.refresh_from_db()
        raise InvalidTransitionError(
            f"Coupon {coupon.unique_id} is {coupon.status}, not available"
        )

    coupon.status = CouponStatus.ACTIVE
    coupon.claimed_at = claimed_at
    coupon.expires_at = expires_at
    coupon.updated_at = now
    reconciler.sync(RemoteCouponRecord.from_coupon(coupon))

    logger.info(
        "Coupon %s claimed, expires at %s", coupon.unique_id, expires_at.isoformat()
    )
    return coupon


def check_expiry(coupon: Coupon, *, now: Optional[datetime] = None) -> Coupon:
    """
    Convert an active coupon whose window has elapsed into used.

    The returned coupon always reflects the expiry; a failed write is
    logged and left for the next sweep.
    """
    now = now or timezone.now()

    if coupon.status != CouponStatus.ACTIVE or coupon.expires_at is None:
        return coupon
    if now < coupon.expires_at:
        return coupon

    coupon.status = CouponStatus.USED
    try:
        Coupon.objects.filter(pk=coupon.pk, status=CouponStatus.ACTIVE).update(
            status=CouponStatus.USED,
            updated_at=now,
        )
    except DatabaseError as exc:
        logger.warning("Could not persist expiry of coupon %s: %s", coupon.unique_id, exc)
    else:
        logger.info("Coupon %s expired", coupon.unique_id)

    return coupon


def redeem(coupon: Coupon, *, now: Optional[datetime] = None) -> Coupon:
    """
    Mark an active coupon as used at the serving counter.

    Raises:
        InvalidTransitionError: If the coupon is not active or already expired
        NetworkFailureError: If the database write fails
    """
    now = now or timezone.now()
    check_expiry(coupon, now=now)

    if coupon.status != CouponStatus.ACTIVE:
        raise InvalidTransitionError(
            f"Coupon {coupon.unique_id} is {coupon.status}, not active"
        )

    try:
        updated = (
            Coupon.objects
            .filter(pk=coupon.pk, status=CouponStatus.ACTIVE)
            .update(status=CouponStatus.USED, updated_at=now)
        )
    except DatabaseError as exc:
        logger.error("Redeem write failed for coupon %s: %s", coupon.unique_id, exc)
        raise NetworkFailureError("Could not redeem the coupon, please try again") from exc

    if updated == 0:
        coupon.refresh_from_db()
        raise InvalidTransitionError(
            f"Coupon {coupon.unique_id} is {coupon.status}, not active"
        )

    coupon.status = CouponStatus.USED
    CouponReconciler().discard(coupon.unique_id)
    logger.info("Coupon %s redeemed", coupon.unique_id)
    return coupon


def admin_reset(coupon: Coupon) -> Coupon:
    """
    Return a coupon to available and clear its timestamps.

    Valid from any state.

    Raises:
        NetworkFailureError: If the database write fails
    """
    try:
        Coupon.objects.filter(pk=coupon.pk).update(
            status=CouponStatus.AVAILABLE,
            claimed_at=None,
            expires_at=None,
            updated_at=timezone.now(),
        )
    except DatabaseError as exc:
        logger.error("Reset failed for coupon %s: %s", coupon.unique_id, exc)
        raise NetworkFailureError("Could not reset the coupon") from exc

    coupon.status = CouponStatus.AVAILABLE
    coupon.claimed_at = None
    coupon.expires_at = None
    CouponReconciler().discard(coupon.unique_id)

    logger.info("Coupon %s reset to available", coupon.unique_id)
    return coupon


def display_status(
    coupon: Coupon,
    *,
    status: Optional[str] = None,
    now: Optional[datetime] = None
) -> str:
    """
    Status shown to the holder.

    With meal-window enforcement on, an available coupon outside its
    slot window is shown as locked-upcoming or locked-past. ``status``
    overrides the stored status (e.g. with a reconciled one).
    """
    status = status or coupon.status
    if status != CouponStatus.AVAILABLE or not meal_window_enforced():
        return status

    time_status = coupon.meal_slot.time_status(now=now)
    if time_status == MealTimeStatus.UPCOMING:
        return DisplayStatus.LOCKED_UPCOMING
    if time_status == MealTimeStatus.PAST:
        return DisplayStatus.LOCKED_PAST
    return status


def claim_for_slot(
    *,
    participant: Participant,
    meal_slot_id: str,
    family_member_index: int = 0,
    now: Optional[datetime] = None
) -> Coupon:
    """Claim the participant's coupon for one slot and member."""
    coupon = get_participant_coupon(
        participant=participant,
        meal_slot_id=meal_slot_id,
        family_member_index=family_member_index
    )
    return claim(coupon, now=now)


def claim_family_meal(
    *,
    participant: Participant,
    meal_slot_id: str,
    now: Optional[datetime] = None
) -> List[Coupon]:
    """
    Claim every still-available family coupon for a slot.

    Members whose coupon is already active or used are skipped.

    Raises:
        NotFamilyParticipantError: If the participant is not a family
        InvalidTransitionError: If no member has an available coupon
    """
    now = now or timezone.now()
    if not participant.is_family:
        raise NotFamilyParticipantError(f"{participant.name} is not registered as a family")

    meal_slot = get_meal_slot(meal_slot_id)
    coupons = list(
        Coupon.objects
        .select_related('meal_slot', 'participant')
        .filter(
            participant=participant,
            meal_slot=meal_slot,
            family_member_index__lt=participant.coupon_holder_count,
            status=CouponStatus.AVAILABLE,
        )
        .order_by('family_member_index')
    )
    if not coupons:
        raise InvalidTransitionError(f"No available family coupons for {meal_slot.name}")

    claimed = []
    for coupon in coupons:
        try:
            claimed.append(claim(coupon, now=now))
        except InvalidTransitionError:
            logger.info("Skipping coupon %s claimed concurrently", coupon.unique_id)

    if not claimed:
        raise InvalidTransitionError(f"No available family coupons for {meal_slot.name}")
    return claimed


# =============================================================================
# Bulk administration
# =============================================================================

def _holder_coupons(participant: Optional[Participant] = None):
    qs = Coupon.objects.all()
    if participant is not None:
        qs = qs.filter(participant=participant)
    return qs


def _discard_cached(unique_ids) -> None:
    reconciler = CouponReconciler()
    for unique_id in unique_ids:
        reconciler.discard(unique_id)


@transaction.atomic
def activate_all(*, participant: Participant, now: Optional[datetime] = None) -> int:
    """
    Activate every available coupon of a participant with a fresh window.

    Returns:
        Number of coupons activated

    Raises:
        NetworkFailureError: If the database write fails
    """
    now = now or timezone.now()
    expires_at = now + validity_window()
    try:
        coupons = list(
            _holder_coupons(participant)
            .select_for_update()
            .filter(status=CouponStatus.AVAILABLE)
        )
        count = (
            Coupon.objects
            .filter(pk__in=[c.pk for c in coupons], status=CouponStatus.AVAILABLE)
            .update(
                status=CouponStatus.ACTIVE,
                claimed_at=now,
                expires_at=expires_at,
                updated_at=now,
            )
        )
    except DatabaseError as exc:
        logger.error("Activate all failed for participant %s: %s", participant.pk, exc)
        raise NetworkFailureError("Could not activate the coupons, please try again") from exc

    reconciler = CouponReconciler()
    for coupon in coupons:
        reconciler.record_local_claim(coupon.unique_id, now, expires_at)

    logger.info("Activated %d coupons for participant %s", count, participant.pk)
    return count


@transaction.atomic
def deactivate_all(*, participant: Participant) -> int:
    """
    Return a participant's active coupons to available.

    Used coupons are left alone.

    Returns:
        Number of coupons reset

    Raises:
        NetworkFailureError: If the database write fails
    """
    try:
        coupons = list(
            _holder_coupons(participant)
            .select_for_update()
            .filter(status=CouponStatus.ACTIVE)
            .values_list('pk', 'unique_id')
        )
        count = Coupon.objects.filter(pk__in=[pk for pk, _ in coupons]).update(
            status=CouponStatus.AVAILABLE,
            claimed_at=None,
            expires_at=None,
            updated_at=timezone.now(),
        )
    except DatabaseError as exc:
        logger.error("Deactivate all failed for participant %s: %s", participant.pk, exc)
        raise NetworkFailureError("Could not deactivate the coupons, please try again") from exc
    _discard_cached(uid for _, uid in coupons)

    logger.info("Deactivated %d coupons for participant %s", count, participant.pk)
    return count


@transaction.atomic
def reset_participant(*, participant: Participant) -> int:
    """Reset all of a participant's coupons to available."""
    try:
        unique_ids = list(_holder_coupons(participant).values_list('unique_id', flat=True))
        count = _holder_coupons(participant).update(
            status=CouponStatus.AVAILABLE,
            claimed_at=None,
            expires_at=None,
            updated_at=timezone.now(),
        )
    except DatabaseError as exc:
        logger.error("Reset failed for participant %s: %s", participant.pk, exc)
        raise NetworkFailureError("Could not reset the coupons, please try again") from exc
    _discard_cached(unique_ids)

    logger.info("Reset %d coupons for participant %s", count, participant.pk)
    return count


@transaction.atomic
def reset_all() -> int:
    """
    Reset every coupon in the event to available.

    Raises:
        NetworkFailureError: If the database write fails
    """
    changed = Coupon.objects.exclude(status=CouponStatus.AVAILABLE)
    try:
        unique_ids = list(changed.values_list('unique_id', flat=True))
        count = changed.update(
            status=CouponStatus.AVAILABLE,
            claimed_at=None,
            expires_at=None,
            updated_at=timezone.now(),
        )
    except DatabaseError as exc:
        logger.error("Reset all failed: %s", exc)
        raise NetworkFailureError("Could not reset the coupons, please try again") from exc
    _discard_cached(unique_ids)

    logger.warning("Reset all coupons (%d changed)", count)
    return count
