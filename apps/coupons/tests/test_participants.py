import pytest
from apps.accounts.models import UserRole
from apps.coupons.models import Coupon
from apps.coupons.services import (
    create_participant,
    update_participant,
    provision_coupons,
    provision_meal_slot,
    get_participant_for_user,
    ConfigurationError,
    DuplicateParticipantError,
)
from apps.meals.models import MealSlot, MealType
from .conftest import EVENT_DATE


@pytest.mark.django_db
class TestCreateParticipant:
    """Tests for participant registration and provisioning"""

    def test_single_participant_gets_one_coupon_per_slot(self, participant):
        assert participant.coupons.count() == 2
        assert participant.user.role == UserRole.PARTICIPANT
        assert participant.is_family is False

    def test_family_gets_coupon_per_member_per_slot(self, family_participant):
        assert family_participant.is_family is True
        assert family_participant.coupons.count() == 6
        assert sorted(set(
            family_participant.coupons.values_list('family_member_index', flat=True)
        )) == [0, 1, 2]

    def test_duplicate_phone_rejected(self, participant):
        with pytest.raises(DuplicateParticipantError):
            create_participant(
                email='other@example.com',
                name='Other',
                phone_number=participant.phone_number,
            )

    def test_family_size_out_of_range(self, meal_slots):
        with pytest.raises(ValueError):
            create_participant(
                email='big@example.com',
                name='Big Family',
                phone_number='9000000099',
                family_size=5,
            )

    def test_provisioning_is_idempotent(self, participant):
        assert provision_coupons(participant=participant) == 0
        assert participant.coupons.count() == 2

    def test_growing_family_provisions_new_members(self, participant):
        update_participant(participant=participant, family_size=2)

        assert participant.coupons.count() == 4

    def test_new_slot_provisions_everyone(self, participant, family_participant):
        slot = MealSlot.objects.create(
            slot_id='lunch_2',
            name='Lunch - Day 2',
            day=2,
            meal_type=MealType.LUNCH,
            start_time='12:00',
            end_time='14:00',
            event_date=EVENT_DATE,
        )

        created = provision_meal_slot(meal_slot=slot)

        assert created == 4
        assert Coupon.objects.filter(meal_slot=slot).count() == 4


@pytest.mark.django_db
class TestParticipantLookup:
    """Tests for resolving the current holder"""

    def test_resolves_profile(self, participant):
        assert get_participant_for_user(participant.user) == participant

    def test_user_without_profile(self, admin_user):
        with pytest.raises(ConfigurationError):
            get_participant_for_user(admin_user)
