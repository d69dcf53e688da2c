"""
Domain-specific exceptions for coupons app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class CouponServiceError(Exception):
    """Base exception for all coupon service errors."""
    pass


class InvalidTransitionError(CouponServiceError):
    """Raised when a coupon is not in the state an operation requires."""
    pass


class MealSlotLockedError(CouponServiceError):
    """Raised when claiming outside the meal slot's time window."""
    pass


class CouponNotFoundError(CouponServiceError):
    """Raised when a coupon does not exist or belongs to another participant."""
    pass


class MealSlotNotFoundError(CouponServiceError):
    """Raised when a meal slot id is unknown."""
    pass


class NotFamilyParticipantError(CouponServiceError):
    """Raised when a family-only operation is used by a single participant."""
    pass


class NetworkFailureError(CouponServiceError):
    """Raised when the authoritative store rejects or cannot take a write."""
    pass


class ConfigurationError(CouponServiceError):
    """Raised when the requesting user has no participant profile."""
    pass


class DuplicateParticipantError(CouponServiceError):
    """Raised when a participant's email or phone number is already registered."""
    pass
