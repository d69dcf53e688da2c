import pytest
from datetime import date, datetime
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.meals.models import MealSlot, MealType


EVENT_DATE = date(2025, 10, 3)


def local_dt(*args):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(datetime(*args))


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        email='mealuser@example.com',
        password='TestPass123!',
        display_name='Meal User',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def lunch_slot(db):
    return MealSlot.objects.create(
        slot_id='lunch_1',
        name='Lunch - Day 1',
        day=1,
        meal_type=MealType.LUNCH,
        start_time='12:00',
        end_time='14:00',
        event_date=EVENT_DATE,
    )


@pytest.fixture
def dinner_slot(db):
    return MealSlot.objects.create(
        slot_id='gala_1',
        name='Gala Dinner - Day 1',
        day=1,
        meal_type=MealType.DINNER,
        start_time='14:00',
        end_time='24:00',
        event_date=EVENT_DATE,
    )
