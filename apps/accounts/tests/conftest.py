import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.coupons.models import Participant
from apps.exhibitors.models import ExhibitorCompany, ExhibitorPlan


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a participant login."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def admin_user(db):
    """Create and return an event admin (role only, not staff)."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def participant_user(user):
    """Participant profile behind the default test login."""
    Participant.objects.create(
        user=user,
        name='Test User',
        phone_number='9000000001',
    )
    return user


@pytest.fixture
def exhibitor_user(db):
    user = User.objects.create_user(
        email='medtech@example.com',
        password='TestPass123!',
        display_name='MedTech',
        role=UserRole.EXHIBITOR,
    )
    ExhibitorCompany.objects.create(
        user=user,
        company_code='EXH001',
        company_name='MedTech',
        plan=ExhibitorPlan.DIAMOND,
    )
    return user
