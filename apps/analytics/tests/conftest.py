import pytest
from datetime import date, timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.coupons.services import create_participant, claim_for_slot
from apps.exhibitors.models import ExhibitorCompany, ExhibitorEmployee, ExhibitorPlan
from apps.exhibitors.services import claim_bulk
from apps.meals.models import MealSlot, MealType


EVENT_DATE = date(2025, 10, 3)


def client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def event(db):
    """
    Three slots, two participants (one a family of two) and one exhibitor.

    Lunch day 1: one coupon active, one expired but still stored as
    active, one available; the exhibitor claimed 3 lunches and 2 dinners.
    """
    now = timezone.now()
    lunch = MealSlot.objects.create(
        slot_id='lunch_1', name='Lunch - Day 1', day=1, meal_type=MealType.LUNCH,
        start_time='12:00', end_time='14:00', event_date=EVENT_DATE,
    )
    MealSlot.objects.create(
        slot_id='gala_1', name='Gala Dinner - Day 1', day=1, meal_type=MealType.DINNER,
        start_time='19:00', end_time='22:00', event_date=EVENT_DATE,
    )
    MealSlot.objects.create(
        slot_id='lunch_2', name='Lunch - Day 2', day=2, meal_type=MealType.LUNCH,
        start_time='12:00', end_time='14:00', event_date=EVENT_DATE + timedelta(days=1),
    )

    single = create_participant(
        email='asha@example.com', name='Asha Menon', phone_number='9000000001',
    )
    family = create_participant(
        email='rahul@example.com', name='Rahul Nair', phone_number='9000000002', family_size=2,
    )
    claim_for_slot(participant=single, meal_slot_id='lunch_1', now=now)
    claim_for_slot(participant=family, meal_slot_id='lunch_1', now=now - timedelta(minutes=30))

    company_user = User.objects.create_user(
        email='medtech@example.com', password='TestPass123!', role=UserRole.EXHIBITOR,
    )
    company = ExhibitorCompany.objects.create(
        user=company_user, company_code='EXH001', company_name='MedTech', plan=ExhibitorPlan.DIAMOND,
    )
    employee = ExhibitorEmployee.objects.create(company=company, employee_name='Kiran Rao')
    claim_bulk(
        company=company, meal_slot_id='lunch_1', meal_type=MealType.LUNCH,
        quantity=3, employee_id=employee.pk,
    )
    claim_bulk(
        company=company, meal_slot_id='gala_1', meal_type=MealType.DINNER,
        quantity=2, employee_id=employee.pk,
    )
    return lunch
