from django.core.validators import RegexValidator, MinValueValidator
from django.db import models


time_of_day_validator = RegexValidator(
    regex=r'^([01]\d|2[0-3]):[0-5]\d$|^24:00$',
    message='Time must be in HH:MM format (00:00-24:00).'
)


class MealType(models.TextChoices):
    LUNCH = 'lunch', 'Lunch'
    DINNER = 'dinner', 'Dinner'


class MealTimeStatus(models.TextChoices):
    UPCOMING = 'upcoming', 'Upcoming'
    ACTIVE = 'active', 'Active'
    PAST = 'past', 'Past'


class MealSlot(models.Model):
    """
    A scheduled meal event (e.g. "Lunch - Day 1").

    Reference data: seeded once per event and only read by the coupon
    and allocation engines.
    """

    slot_id = models.CharField(max_length=32, unique=True, db_index=True)
    name = models.CharField(max_length=100)
    day = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    meal_type = models.CharField(max_length=10, choices=MealType.choices)

    # Local time of day, end may be 24:00
    start_time = models.CharField(max_length=5, validators=[time_of_day_validator])
    end_time = models.CharField(max_length=5, validators=[time_of_day_validator])
    event_date = models.DateField()

    class Meta:
        db_table = 'meal_slots'
        ordering = ['event_date', 'start_time', 'slot_id']

    def __str__(self):
        return f"{self.name} ({self.event_date})"

    def time_status(self, now=None):
        from .timing import get_meal_time_status
        return get_meal_time_status(self, now=now)
