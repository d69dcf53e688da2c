"""
Meal slot time-window helpers.

Slot windows are wall-clock times on the event date in the project's
``TIME_ZONE``; the instant passed in is converted to local time first.
"""

from django.utils import timezone

from .models import MealTimeStatus


def minutes_of_day(hhmm: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight (24:00 -> 1440)."""
    hours, minutes = hhmm.split(':')
    return int(hours) * 60 + int(minutes)


def get_meal_time_status(slot, now=None) -> str:
    """
    Classify ``now`` against the slot's window.

    Returns:
        'upcoming' before the window (or on an earlier date),
        'active' inside it (both ends inclusive, minute resolution),
        'past' after it (or on a later date).
    """
    local_now = timezone.localtime(now or timezone.now())
    today = local_now.date()

    if slot.event_date > today:
        return MealTimeStatus.UPCOMING
    if slot.event_date < today:
        return MealTimeStatus.PAST

    current = local_now.hour * 60 + local_now.minute
    if current < minutes_of_day(slot.start_time):
        return MealTimeStatus.UPCOMING
    if current > minutes_of_day(slot.end_time):
        return MealTimeStatus.PAST
    return MealTimeStatus.ACTIVE


def is_time_slot_active(slot, now=None) -> bool:
    return get_meal_time_status(slot, now=now) == MealTimeStatus.ACTIVE
