import pytest
from datetime import timedelta
from unittest.mock import patch
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from apps.coupons.models import Coupon, CouponStatus, Participant
from apps.coupons.services import claim_for_slot, NetworkFailureError


# =============================================================================
# Participant coupon endpoints
# =============================================================================

@pytest.mark.django_db
class TestMyCoupons:
    """Tests for GET /api/coupons/"""

    def test_lists_own_coupons(self, participant_client, participant, family_participant):
        response = participant_client.get(reverse('coupons:my-coupons'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 2
        assert {c['meal_slot']['slot_id'] for c in response.data} == {'lunch_1', 'gala_1'}
        assert all(c['status'] == 'available' for c in response.data)

    def test_active_coupon_has_countdown(self, participant_client, participant):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')

        response = participant_client.get(reverse('coupons:my-coupons'), {'meal_slot_id': 'lunch_1'})

        coupon = response.data[0]
        assert coupon['status'] == 'active'
        assert 0 < coupon['remaining_seconds'] <= 900
        assert ':' in coupon['time_remaining']

    def test_expired_coupon_reported_used(self, participant_client, participant):
        claim_for_slot(
            participant=participant,
            meal_slot_id='lunch_1',
            now=timezone.now() - timedelta(minutes=20)
        )

        response = participant_client.get(reverse('coupons:my-coupons'), {'meal_slot_id': 'lunch_1'})

        assert response.data[0]['status'] == 'used'
        assert response.data[0]['time_remaining'] is None
        assert participant.coupons.get(meal_slot__slot_id='lunch_1').status == CouponStatus.USED

    def test_family_sees_all_members(self, family_client):
        response = family_client.get(reverse('coupons:my-coupons'))

        assert len(response.data) == 6

    def test_user_without_profile(self, plain_user_client):
        response = plain_user_client.get(reverse('coupons:my-coupons'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('coupons:my-coupons'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestClaimCoupon:
    """Tests for POST /api/coupons/claim/"""

    def test_claim(self, participant_client, participant):
        response = participant_client.post(reverse('coupons:claim'), {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'active'
        assert response.data['source'] == 'local'
        assert participant.coupons.get(meal_slot__slot_id='lunch_1').status == CouponStatus.ACTIVE

    def test_double_claim_conflicts(self, participant_client):
        url = reverse('coupons:claim')
        participant_client.post(url, {'meal_slot_id': 'lunch_1'})
        response = participant_client.post(url, {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'error' in response.data

    def test_claim_family_member(self, family_client, family_participant):
        response = family_client.post(
            reverse('coupons:claim'), {'meal_slot_id': 'gala_1', 'family_member_index': 2}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['family_member_index'] == 2

    def test_unknown_member(self, participant_client):
        response = participant_client.post(
            reverse('coupons:claim'), {'meal_slot_id': 'lunch_1', 'family_member_index': 3}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unknown_slot(self, participant_client):
        response = participant_client.post(reverse('coupons:claim'), {'meal_slot_id': 'brunch'})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_missing_slot(self, participant_client):
        response = participant_client.post(reverse('coupons:claim'), {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_locked_outside_window(self, enforce_meal_window, participant_client):
        # Event date is in the past, so the window is over
        response = participant_client.post(reverse('coupons:claim'), {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_network_failure(self, participant_client):
        with patch('apps.coupons.views.claim_for_slot', side_effect=NetworkFailureError('down')):
            response = participant_client.post(reverse('coupons:claim'), {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


@pytest.mark.django_db
class TestClaimFamily:
    """Tests for POST /api/coupons/claim_family/"""

    def test_claims_every_member(self, family_client):
        response = family_client.post(reverse('coupons:claim-family'), {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_201_CREATED
        assert [c['family_member_index'] for c in response.data] == [0, 1, 2]

    def test_single_participant_rejected(self, participant_client):
        response = participant_client.post(reverse('coupons:claim-family'), {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_nothing_left(self, family_client):
        url = reverse('coupons:claim-family')
        family_client.post(url, {'meal_slot_id': 'lunch_1'})
        response = family_client.post(url, {'meal_slot_id': 'lunch_1'})

        assert response.status_code == status.HTTP_409_CONFLICT


# =============================================================================
# Admin endpoints
# =============================================================================

@pytest.mark.django_db
class TestAdminParticipants:
    """Tests for /api/admin/participants/"""

    def test_requires_admin(self, participant_client):
        response = participant_client.get(reverse('coupon-admin:participant-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list(self, admin_client, participant, family_participant):
        response = admin_client.get(reverse('coupon-admin:participant-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

    def test_create_provisions_coupons(self, admin_client, meal_slots):
        response = admin_client.post(reverse('coupon-admin:participant-list'), {
            'email': 'new@example.com',
            'name': 'New Person',
            'phone_number': '9000000050',
            'family_size': 2,
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['is_family'] is True
        participant = Participant.objects.get(phone_number='9000000050')
        assert participant.coupons.count() == 4

    def test_create_duplicate(self, admin_client, participant):
        response = admin_client.post(reverse('coupon-admin:participant-list'), {
            'email': 'dup@example.com',
            'name': 'Dup',
            'phone_number': participant.phone_number,
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_family_size(self, admin_client, participant):
        url = reverse('coupon-admin:participant-detail', args=[participant.pk])
        response = admin_client.patch(url, {'family_size': 3}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['family_size'] == 3
        assert participant.coupons.count() == 6

    def test_delete_removes_login(self, admin_client, participant):
        user_id = participant.user_id
        url = reverse('coupon-admin:participant-detail', args=[participant.pk])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Participant.objects.filter(user_id=user_id).exists()
        assert not Coupon.objects.filter(participant_id=participant.pk).exists()

    def test_activate_and_deactivate(self, admin_client, participant):
        activate = reverse('coupon-admin:participant-activate-coupons', args=[participant.pk])
        deactivate = reverse('coupon-admin:participant-deactivate-coupons', args=[participant.pk])

        assert admin_client.post(activate).data['count'] == 2
        assert admin_client.post(deactivate).data['count'] == 2
        assert not participant.coupons.exclude(status=CouponStatus.AVAILABLE).exists()

    def test_reset_participant_coupons(self, admin_client, participant):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')
        url = reverse('coupon-admin:participant-reset-coupons', args=[participant.pk])

        response = admin_client.post(url)

        assert response.data['count'] == 2
        assert participant.coupons.filter(status=CouponStatus.AVAILABLE).count() == 2

    def test_participant_coupons(self, admin_client, family_participant):
        url = reverse('coupon-admin:participant-coupons', args=[family_participant.pk])
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 6

    def test_search_by_name_or_phone(self, admin_client, participant, family_participant):
        url = reverse('coupon-admin:participant-list')

        by_name = admin_client.get(url, {'search': 'asha'})
        by_phone = admin_client.get(url, {'search': '00002'})

        assert [p['name'] for p in by_name.data['results']] == ['Asha Menon']
        assert [p['name'] for p in by_phone.data['results']] == ['Rahul Nair']

    def test_search_without_match(self, admin_client, participant):
        response = admin_client.get(reverse('coupon-admin:participant-list'), {'search': 'zzz'})

        assert response.data['count'] == 0

    def test_bulk_action_store_failure(self, admin_client, participant):
        url = reverse('coupon-admin:participant-activate-coupons', args=[participant.pk])

        with patch('apps.coupons.views.activate_all', side_effect=NetworkFailureError('down')):
            response = admin_client.post(url)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error'] == 'down'


@pytest.mark.django_db
class TestAdminCoupons:
    """Tests for /api/admin/coupons/"""

    def test_filter_by_status(self, admin_client, participant, family_participant):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')

        response = admin_client.get(reverse('coupon-admin:coupon-list'), {'status': 'active'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['participant_name'] == participant.name

    def test_filter_by_slot_and_participant(self, admin_client, participant, family_participant):
        response = admin_client.get(reverse('coupon-admin:coupon-list'), {
            'meal_slot_id': 'gala_1',
            'participant_id': str(family_participant.pk),
        })

        assert response.data['count'] == 3

    def test_invalid_filter(self, admin_client, participant):
        response = admin_client.get(reverse('coupon-admin:coupon-list'), {'status': 'lost'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reset_coupon(self, admin_client, participant, lunch_coupon):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')
        url = reverse('coupon-admin:coupon-reset', args=[lunch_coupon.unique_id])

        response = admin_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'available'
        assert response.data['claimed_at'] is None

    def test_redeem_coupon(self, admin_client, participant, lunch_coupon):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')
        url = reverse('coupon-admin:coupon-redeem', args=[lunch_coupon.unique_id])

        response = admin_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'used'

    def test_redeem_available_conflicts(self, admin_client, lunch_coupon):
        url = reverse('coupon-admin:coupon-redeem', args=[lunch_coupon.unique_id])

        response = admin_client.post(url)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_reset_all(self, admin_client, participant, family_participant):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')
        claim_for_slot(participant=family_participant, meal_slot_id='gala_1')

        response = admin_client.post(reverse('coupon-admin:coupon-reset-all'))

        assert response.data['count'] == 2
        assert not Coupon.objects.exclude(status=CouponStatus.AVAILABLE).exists()

    def test_reset_all_store_failure(self, admin_client, participant):
        claim_for_slot(participant=participant, meal_slot_id='lunch_1')

        with patch('apps.coupons.views.reset_all', side_effect=NetworkFailureError('down')):
            response = admin_client.post(reverse('coupon-admin:coupon-reset-all'))

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert participant.coupons.filter(status=CouponStatus.ACTIVE).count() == 1
