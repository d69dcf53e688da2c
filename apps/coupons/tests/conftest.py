import pytest
from datetime import date, datetime
from django.core.cache import caches
from django.conf import settings
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.coupons.services import create_participant
from apps.meals.models import MealSlot, MealType


EVENT_DATE = date(2025, 10, 3)


def local_dt(*args):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(datetime(*args))


def client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture(autouse=True)
def clear_coupon_cache():
    """Local coupon cache must not leak between tests."""
    cache = caches[settings.MEAL_PASS['COUPON_CACHE_ALIAS']]
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def enforce_meal_window(settings):
    settings.MEAL_PASS = {**settings.MEAL_PASS, 'ENFORCE_MEAL_WINDOW': True}


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Meal slots
# =============================================================================

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
        start_time='19:00',
        end_time='22:00',
        event_date=EVENT_DATE,
    )


@pytest.fixture
def meal_slots(lunch_slot, dinner_slot):
    return [lunch_slot, dinner_slot]


# =============================================================================
# Participants
# =============================================================================

@pytest.fixture
def participant(meal_slots):
    """Single participant with one coupon per slot."""
    return create_participant(
        email='asha@example.com',
        password='TestPass123!',
        name='Asha Menon',
        phone_number='9000000001',
    )


@pytest.fixture
def family_participant(meal_slots):
    """Participant registered with a family of three."""
    return create_participant(
        email='rahul@example.com',
        password='TestPass123!',
        name='Rahul Nair',
        phone_number='9000000002',
        family_size=3,
    )


@pytest.fixture
def lunch_coupon(participant, lunch_slot):
    return participant.coupons.get(meal_slot=lunch_slot, family_member_index=0)


@pytest.fixture
def participant_client(participant):
    return client_for(participant.user)


@pytest.fixture
def family_client(family_participant):
    return client_for(family_participant.user)


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def plain_user_client(db):
    """Logged-in user with no participant profile."""
    user = User.objects.create_user(email='nobody@example.com', password='TestPass123!')
    return client_for(user)
