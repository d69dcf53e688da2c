from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


MAX_FAMILY_SIZE = 4


class CouponStatus(models.TextChoices):
    AVAILABLE = 'available', 'Available'
    ACTIVE = 'active', 'Active'
    USED = 'used', 'Used'


class DisplayStatus(models.TextChoices):
    """Stored statuses plus the time-locked states derived for display."""
    AVAILABLE = 'available', 'Available'
    ACTIVE = 'active', 'Active'
    USED = 'used', 'Used'
    LOCKED_UPCOMING = 'locked-upcoming', 'Locked (upcoming)'
    LOCKED_PAST = 'locked-past', 'Locked (past)'


class Participant(models.Model):
    """Conference participant; optionally holds coupons for family members."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='participant'
    )
    name = models.CharField(max_length=200)
    phone_number = models.CharField(max_length=20, unique=True, db_index=True)

    # Family size counts the participant; N means indices 0..N-1 exist
    is_family = models.BooleanField(default=False)
    family_size = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(MAX_FAMILY_SIZE)]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'participants'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.phone_number})"

    @property
    def coupon_holder_count(self):
        """Number of people holding coupons (1 unless a family)."""
        return self.family_size if self.is_family else 1


class Coupon(models.Model):
    """
    One claimable meal voucher: participant x meal slot x family member.

    ``claimed_at`` and ``expires_at`` are either both set or both null.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    unique_id = models.CharField(max_length=120, unique=True, db_index=True, editable=False)

    participant = models.ForeignKey(
        Participant,
        on_delete=models.CASCADE,
        related_name='coupons'
    )
    meal_slot = models.ForeignKey(
        'meals.MealSlot',
        on_delete=models.CASCADE,
        related_name='coupons'
    )
    # 0 = the participant, 1..N-1 = family members
    family_member_index = models.PositiveSmallIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=CouponStatus.choices,
        default=CouponStatus.AVAILABLE
    )
    claimed_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'coupons'
        constraints = [
            models.UniqueConstraint(
                fields=['participant', 'meal_slot', 'family_member_index'],
                name='uniq_coupon_holder_slot_member',
            ),
        ]
        indexes = [
            models.Index(fields=['participant', 'status'], name='coupons_holder_status_idx'),
            models.Index(fields=['status', 'expires_at'], name='coupons_status_expiry_idx'),
        ]
        ordering = ['meal_slot__event_date', 'meal_slot__start_time', 'family_member_index']

    def __str__(self):
        return f"{self.unique_id} ({self.status})"

    def save(self, *args, **kwargs):
        """Derive the composite key if not set."""
        if not self.unique_id:
            from .services.coupon_keys import derive_key
            self.unique_id = derive_key(
                self.participant_id,
                self.meal_slot.slot_id,
                self.family_member_index,
            )
        super().save(*args, **kwargs)

    def clean(self):
        from .services.coupon_keys import is_complete
        if not is_complete(self.claimed_at, self.expires_at):
            raise ValidationError(
                "claimed_at and expires_at must both be set or both be empty"
            )
