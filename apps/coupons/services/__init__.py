"""
Coupons app services layer.

Claims, expiry and resets go through these functions; views never write
coupon state directly.
"""

from .exceptions import (
    CouponServiceError,
    InvalidTransitionError,
    MealSlotLockedError,
    CouponNotFoundError,
    MealSlotNotFoundError,
    NotFamilyParticipantError,
    NetworkFailureError,
    ConfigurationError,
    DuplicateParticipantError,
)

from .coupon_keys import (
    derive_key,
    is_complete,
)

from .claim_state import (
    validity_window,
    get_meal_slot,
    get_participant_coupon,
    claim,
    check_expiry,
    redeem,
    admin_reset,
    display_status,
    claim_for_slot,
    claim_family_meal,
    activate_all,
    deactivate_all,
    reset_participant,
    reset_all,
)

from .countdown import (
    CouponCountdown,
    remaining_seconds,
    format_time_remaining,
)

from .expiry import (
    expire_on_read,
    get_participant_coupons,
    sweep_expired,
)

from .reconciliation import (
    RemoteCouponRecord,
    CouponView,
    CouponReconciler,
    merge_coupon_view,
)

from .participant_management import (
    get_participant_for_user,
    provision_coupons,
    provision_meal_slot,
    create_participant,
    update_participant,
    search_participants,
)


__all__ = [
    # Exceptions
    'CouponServiceError',
    'InvalidTransitionError',
    'MealSlotLockedError',
    'CouponNotFoundError',
    'MealSlotNotFoundError',
    'NotFamilyParticipantError',
    'NetworkFailureError',
    'ConfigurationError',
    'DuplicateParticipantError',

    # Keys
    'derive_key',
    'is_complete',

    # Claim state machine
    'validity_window',
    'get_meal_slot',
    'get_participant_coupon',
    'claim',
    'check_expiry',
    'redeem',
    'admin_reset',
    'display_status',
    'claim_for_slot',
    'claim_family_meal',
    'activate_all',
    'deactivate_all',
    'reset_participant',
    'reset_all',

    # Countdown and expiry
    'CouponCountdown',
    'remaining_seconds',
    'format_time_remaining',
    'expire_on_read',
    'get_participant_coupons',
    'sweep_expired',

    # Reconciliation
    'RemoteCouponRecord',
    'CouponView',
    'CouponReconciler',
    'merge_coupon_view',

    # Participants
    'get_participant_for_user',
    'provision_coupons',
    'provision_meal_slot',
    'create_participant',
    'update_participant',
    'search_participants',
]
