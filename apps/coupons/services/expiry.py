"""
Expiry sweeping.

Expiry is applied on every read of a participant's coupons and in bulk
by the ``expire_coupons`` management command.
"""

import logging
from datetime import datetime
from typing import List, Optional

from django.utils import timezone

from apps.coupons.models import Coupon, CouponStatus, Participant

from .claim_state import check_expiry

logger = logging.getLogger(__name__)


def expire_on_read(coupons, *, now: Optional[datetime] = None) -> List[Coupon]:
    now = now or timezone.now()
    return [check_expiry(coupon, now=now) for coupon in coupons]


def get_participant_coupons(
    *,
    participant: Participant,
    meal_slot_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> List[Coupon]:
    """
    A participant's coupons with expiry applied.

    Coupons for family member indices beyond the current family size
    are not returned.
    """
    qs = (
        Coupon.objects
        .select_related('meal_slot', 'participant')
        .filter(
            participant=participant,
            family_member_index__lt=participant.coupon_holder_count,
        )
    )
    if meal_slot_id:
        qs = qs.filter(meal_slot__slot_id=meal_slot_id)

    return expire_on_read(qs, now=now)


def sweep_expired(*, now: Optional[datetime] = None) -> int:
    """
    Convert every active coupon past its expiry to used.

    Returns:
        Number of coupons converted
    """
    now = now or timezone.now()
    count = (
        Coupon.objects
        .filter(status=CouponStatus.ACTIVE, expires_at__lte=now)
        .update(status=CouponStatus.USED, updated_at=now)
    )
    if count:
        logger.info("Swept %d expired coupons", count)
    return count
