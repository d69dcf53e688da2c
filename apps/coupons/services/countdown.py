"""
Countdown helpers for active coupons.
"""

import logging
import math
from datetime import datetime
from typing import Callable, Optional

from django.utils import timezone

from apps.coupons.models import CouponStatus

logger = logging.getLogger(__name__)


def remaining_seconds(expires_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole seconds left until ``expires_at``, floored and clamped at zero."""
    if expires_at is None:
        return 0
    now = now or timezone.now()
    return max(0, math.floor((expires_at - now).total_seconds()))


def format_time_remaining(seconds: int) -> str:
    """Render seconds as ``M:SS`` (e.g. ``14:59``, ``0:01``)."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


class CouponCountdown:
    """
    Per-coupon countdown.

    Call ``tick()`` on each display refresh. When the remaining time
    has elapsed the expiry callback runs once, converting the coupon
    to used.
    """

    def __init__(self, coupon, on_expire: Optional[Callable] = None):
        self.coupon = coupon
        self._on_expire = on_expire
        self._fired = False

    @property
    def expired(self) -> bool:
        return self._fired or self.coupon.status == CouponStatus.USED

    def tick(self, now: Optional[datetime] = None) -> int:
        now = now or timezone.now()
        if self.coupon.status != CouponStatus.ACTIVE:
            return 0

        left = remaining_seconds(self.coupon.expires_at, now)
        # left is floored, so it reads 0 up to a second before expires_at
        if not self._fired and now >= self.coupon.expires_at:
            self._fired = True
            logger.debug("Countdown reached zero for coupon %s", self.coupon.unique_id)
            self._expire(now)
        return left

    def display(self, now: Optional[datetime] = None) -> str:
        return format_time_remaining(self.tick(now))

    def _expire(self, now):
        if self._on_expire is not None:
            self._on_expire(self.coupon, now=now)
            return
        from .claim_state import check_expiry
        check_expiry(self.coupon, now=now)
