import pytest
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.exhibitors.models import ExhibitorCompany, ExhibitorEmployee, ExhibitorPlan
from apps.meals.models import MealSlot, MealType


EVENT_DATE = date(2025, 10, 3)


def client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def pooled_policy(settings):
    settings.MEAL_PASS = {**settings.MEAL_PASS, 'ALLOCATION_POLICY': 'pooled'}


# =============================================================================
# Meal slots
# =============================================================================

def _slot(slot_id, name, day, meal_type, start, end):
    return MealSlot.objects.create(
        slot_id=slot_id,
        name=name,
        day=day,
        meal_type=meal_type,
        start_time=start,
        end_time=end,
        event_date=EVENT_DATE,
    )


@pytest.fixture
def lunch_slot(db):
    return _slot('lunch_1', 'Lunch - Day 1', 1, MealType.LUNCH, '12:00', '14:00')


@pytest.fixture
def second_lunch_slot(db):
    return _slot('lunch_2', 'Lunch - Day 2', 2, MealType.LUNCH, '12:00', '14:00')


@pytest.fixture
def dinner_slot(db):
    return _slot('gala_1', 'Gala Dinner - Day 1', 1, MealType.DINNER, '19:00', '22:00')


@pytest.fixture
def meal_slots(lunch_slot, second_lunch_slot, dinner_slot):
    return [lunch_slot, second_lunch_slot, dinner_slot]


# =============================================================================
# Companies
# =============================================================================

def _company(email, code, name, plan):
    user = User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=name,
        role=UserRole.EXHIBITOR,
    )
    return ExhibitorCompany.objects.create(
        user=user,
        company_code=code,
        company_name=name,
        phone_number='9100000000',
        plan=plan,
    )


@pytest.fixture
def diamond_company(db):
    return _company('medtech@example.com', 'EXH001', 'MedTech', ExhibitorPlan.DIAMOND)


@pytest.fixture
def gold_company(db):
    return _company('pharmacare@example.com', 'EXH002', 'PharmaCare', ExhibitorPlan.GOLD)


@pytest.fixture
def employee(diamond_company):
    return ExhibitorEmployee.objects.create(
        company=diamond_company,
        employee_name='Kiran Rao',
        employee_phone='9100000001',
    )


@pytest.fixture
def gold_employee(gold_company):
    return ExhibitorEmployee.objects.create(
        company=gold_company,
        employee_name='Divya Iyer',
    )


@pytest.fixture
def exhibitor_client(diamond_company):
    return client_for(diamond_company.user)


@pytest.fixture
def gold_client(gold_company):
    return client_for(gold_company.user)


@pytest.fixture
def admin_client(db):
    admin = User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        role=UserRole.ADMIN,
    )
    return client_for(admin)


@pytest.fixture
def plain_user_client(db):
    user = User.objects.create_user(email='nobody@example.com', password='TestPass123!')
    return client_for(user)
