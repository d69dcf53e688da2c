"""
Analytics Module
=================

Read-only statistics for the event admin dashboard.

Classes:
    EventStatsQueries: Static methods aggregating coupons and
        exhibitor allocation claims.

Example:
    Getting the dashboard summary::

        from apps.analytics.analytics import EventStatsQueries

        stats = EventStatsQueries.admin_stats()
        print(f"{stats['active_coupons']} coupons are currently active")

Note:
    Active coupons whose window has elapsed are counted as used even if
    the sweeper has not written that yet, so the numbers agree with
    what participants see.
"""

from django.db.models import Count, IntegerField, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.coupons.models import Coupon, CouponStatus, Participant
from apps.exhibitors.models import AllocationClaim, ExhibitorCompany
from apps.meals.models import MealSlot, MealType


def _coupon_state_filters(now, prefix=''):
    """Q objects for available / active / used with expiry applied."""
    status = f'{prefix}status'
    expires_at = f'{prefix}expires_at'
    active = Q(**{status: CouponStatus.ACTIVE, f'{expires_at}__gt': now})
    used = Q(**{status: CouponStatus.USED}) | Q(
        **{status: CouponStatus.ACTIVE, f'{expires_at}__lte': now}
    )
    available = Q(**{status: CouponStatus.AVAILABLE})
    return available, active, used


class EventStatsQueries:
    """
    Aggregate queries for the admin dashboard.

    Methods:
        admin_stats: Headline numbers for the whole event.
        meal_slot_breakdown: Coupon and claim counts per meal slot.
    """

    @staticmethod
    def admin_stats(now=None):
        """
        Headline numbers for the event.

        Args:
            now (datetime, optional): Reference instant for expiry.

        Returns:
            dict: A dictionary containing:
                - total_participants / family_participants (int)
                - total_exhibitors (int)
                - total_admins (int)
                - total_coupons, available_coupons, active_coupons,
                  used_coupons (int)
                - total_meal_claims (int): Exhibitor ledger records.
                - lunch_meals_claimed / dinner_meals_claimed (int):
                  Summed ledger quantities per meal type.
        """
        now = now or timezone.now()
        available, active, used = _coupon_state_filters(now)

        coupons = Coupon.objects.aggregate(
            total=Count('id'),
            available=Count('id', filter=available),
            active=Count('id', filter=active),
            used=Count('id', filter=used),
        )
        participants = Participant.objects.aggregate(
            total=Count('id'),
            families=Count('id', filter=Q(is_family=True)),
        )
        claims = AllocationClaim.objects.aggregate(
            total=Count('id'),
            lunch=Coalesce(Sum('quantity', filter=Q(meal_type=MealType.LUNCH)), 0, output_field=IntegerField()),
            dinner=Coalesce(Sum('quantity', filter=Q(meal_type=MealType.DINNER)), 0, output_field=IntegerField()),
        )

        return {
            'total_participants': participants['total'],
            'family_participants': participants['families'],
            'total_exhibitors': ExhibitorCompany.objects.count(),
            'total_admins': User.objects.filter(
                Q(role=UserRole.ADMIN) | Q(is_staff=True)
            ).count(),
            'total_coupons': coupons['total'],
            'available_coupons': coupons['available'],
            'active_coupons': coupons['active'],
            'used_coupons': coupons['used'],
            'total_meal_claims': claims['total'],
            'lunch_meals_claimed': claims['lunch'],
            'dinner_meals_claimed': claims['dinner'],
            'generated_at': now,
        }

    @staticmethod
    def meal_slot_breakdown(now=None, day=None):
        """
        Per-slot coupon states and exhibitor meals.

        Args:
            now (datetime, optional): Reference instant for expiry.
            day (int, optional): Only slots of this event day.

        Returns:
            list[dict]: One entry per slot in event order.
        """
        now = now or timezone.now()
        available, active, used = _coupon_state_filters(now, prefix='coupons__')

        slots = MealSlot.objects.all()
        if day is not None:
            slots = slots.filter(day=day)

        slots = slots.annotate(
            total_coupons=Count('coupons', distinct=True),
            available_coupons=Count('coupons', filter=available, distinct=True),
            active_coupons=Count('coupons', filter=active, distinct=True),
            used_coupons=Count('coupons', filter=used, distinct=True),
        )

        # Separate query so the coupon join does not multiply quantities
        exhibitor_meals = dict(
            AllocationClaim.objects
            .values('meal_slot_id')
            .annotate(total=Sum('quantity'))
            .values_list('meal_slot_id', 'total')
        )

        return [
            {
                'slot_id': slot.slot_id,
                'name': slot.name,
                'day': slot.day,
                'meal_type': slot.meal_type,
                'time_status': slot.time_status(now=now),
                'total_coupons': slot.total_coupons,
                'available_coupons': slot.available_coupons,
                'active_coupons': slot.active_coupons,
                'used_coupons': slot.used_coupons,
                'exhibitor_meals': exhibitor_meals.get(slot.pk, 0),
            }
            for slot in slots
        ]
