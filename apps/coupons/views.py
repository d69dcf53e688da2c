from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import Coupon, Participant
from apps.accounts.permissions import IsEventAdmin
from .serializers import (
    ParticipantSerializer,
    ParticipantCreateSerializer,
    ParticipantUpdateSerializer,
    CouponSerializer,
    HolderCouponSerializer,
    ClaimCouponSerializer,
    ClaimFamilySerializer,
    CouponFilterSerializer,
)

from apps.coupons.services import (
    get_participant_for_user,
    get_participant_coupons,
    claim_for_slot,
    claim_family_meal,
    check_expiry,
    redeem,
    admin_reset,
    activate_all,
    deactivate_all,
    reset_participant,
    reset_all,
    create_participant,
    update_participant,
    search_participants,
    CouponReconciler,
    RemoteCouponRecord,
    # Exceptions
    ConfigurationError,
    InvalidTransitionError,
    MealSlotLockedError,
    CouponNotFoundError,
    MealSlotNotFoundError,
    NotFamilyParticipantError,
    NetworkFailureError,
    DuplicateParticipantError,
)


def _holder_payload(coupons, now):
    """Pair each coupon with its reconciled view."""
    views = CouponReconciler().refresh(
        [RemoteCouponRecord.from_coupon(c) for c in coupons], now=now
    )
    items = [{'coupon': c, 'view': v} for c, v in zip(coupons, views)]
    return HolderCouponSerializer(items, many=True, context={'now': now}).data


# =============================================================================
# Participant endpoints
# =============================================================================

@extend_schema(
    parameters=[OpenApiParameter('meal_slot_id', str, description='Only coupons for this slot')],
    responses=HolderCouponSerializer(many=True),
    tags=['coupons'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_coupons(request):
    """
    Get the current participant's coupons.

    Expired active coupons are converted to used before responding.
    """
    try:
        participant = get_participant_for_user(request.user)
    except ConfigurationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    now = timezone.now()
    coupons = get_participant_coupons(
        participant=participant,
        meal_slot_id=request.query_params.get('meal_slot_id'),
        now=now
    )
    return Response(_holder_payload(coupons, now))


@extend_schema(request=ClaimCouponSerializer, responses=HolderCouponSerializer, tags=['coupons'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def claim_coupon(request):
    """Claim one coupon (own or a family member's) for a meal slot."""
    serializer = ClaimCouponSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    now = timezone.now()
    try:
        participant = get_participant_for_user(request.user)
        coupon = claim_for_slot(
            participant=participant,
            meal_slot_id=serializer.validated_data['meal_slot_id'],
            family_member_index=serializer.validated_data['family_member_index'],
            now=now
        )
    except ConfigurationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except (MealSlotNotFoundError, CouponNotFoundError) as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (InvalidTransitionError, MealSlotLockedError) as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    except NetworkFailureError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response(_holder_payload([coupon], now)[0], status=status.HTTP_201_CREATED)


@extend_schema(request=ClaimFamilySerializer, responses=HolderCouponSerializer(many=True), tags=['coupons'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def claim_family(request):
    """Claim every available family coupon for a meal slot."""
    serializer = ClaimFamilySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    now = timezone.now()
    try:
        participant = get_participant_for_user(request.user)
        coupons = claim_family_meal(
            participant=participant,
            meal_slot_id=serializer.validated_data['meal_slot_id'],
            now=now
        )
    except ConfigurationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except NotFamilyParticipantError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except MealSlotNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (InvalidTransitionError, MealSlotLockedError) as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    except NetworkFailureError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response(_holder_payload(coupons, now), status=status.HTTP_201_CREATED)


# =============================================================================
# Admin endpoints
# =============================================================================

class AdminPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


class AdminParticipantViewSet(viewsets.ModelViewSet):
    """
    Participant administration.

    list: Participant profiles, optionally filtered by ?search=
    retrieve: One participant profile
    create: Register a participant and provision coupons
    partial_update: Change details or family size
    destroy: Remove the participant and their login
    """

    serializer_class = ParticipantSerializer
    permission_classes = [IsAuthenticated, IsEventAdmin]
    pagination_class = AdminPagination
    http_method_names = ['get', 'post', 'patch', 'delete']

    def get_queryset(self):
        if self.action != 'list':
            return Participant.objects.select_related('user')
        return search_participants(search=self.request.query_params.get('search'))

    @extend_schema(parameters=[OpenApiParameter('search', str, description='Name, phone or email contains')])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def get_serializer_class(self):
        if self.action == 'create':
            return ParticipantCreateSerializer
        if self.action == 'partial_update':
            return ParticipantUpdateSerializer
        return ParticipantSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participant = create_participant(**serializer.validated_data)
        except DuplicateParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ParticipantSerializer(participant).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participant = update_participant(
                participant=self.get_object(),
                **serializer.validated_data
            )
        except DuplicateParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ParticipantSerializer(participant).data)

    def perform_destroy(self, instance):
        instance.user.delete()

    @action(detail=True, methods=['get'])
    def coupons(self, request, pk=None):
        """All coupons of a participant, stored state with expiry applied."""
        coupons = get_participant_coupons(participant=self.get_object())
        return Response(CouponSerializer(coupons, many=True).data)

    @action(detail=True, methods=['post'])
    def reset_coupons(self, request, pk=None):
        try:
            count = reset_participant(participant=self.get_object())
        except NetworkFailureError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({'message': f'Reset {count} coupons', 'count': count})

    @action(detail=True, methods=['post'])
    def activate_coupons(self, request, pk=None):
        try:
            count = activate_all(participant=self.get_object())
        except NetworkFailureError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({'message': f'Activated {count} coupons', 'count': count})

    @action(detail=True, methods=['post'])
    def deactivate_coupons(self, request, pk=None):
        try:
            count = deactivate_all(participant=self.get_object())
        except NetworkFailureError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({'message': f'Deactivated {count} coupons', 'count': count})


class AdminCouponViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Coupon administration.

    list: All coupons, filterable by status, meal_slot_id and participant_id
    retrieve: One coupon by unique id
    reset: Return a coupon to available
    redeem: Mark an active coupon as used
    reset_all: Return every coupon to available
    """

    serializer_class = CouponSerializer
    permission_classes = [IsAuthenticated, IsEventAdmin]
    pagination_class = AdminPagination
    lookup_field = 'unique_id'

    def get_queryset(self):
        qs = Coupon.objects.select_related('meal_slot', 'participant')
        if self.action != 'list':
            return qs

        filters = CouponFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data

        if 'status' in data:
            qs = qs.filter(status=data['status'])
        if 'meal_slot_id' in data:
            qs = qs.filter(meal_slot__slot_id=data['meal_slot_id'])
        if 'participant_id' in data:
            qs = qs.filter(participant_id=data['participant_id'])
        return qs

    def retrieve(self, request, *args, **kwargs):
        coupon = check_expiry(self.get_object())
        return Response(self.get_serializer(coupon).data)

    @extend_schema(parameters=[CouponFilterSerializer])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @action(detail=True, methods=['post'])
    def reset(self, request, unique_id=None):
        try:
            coupon = admin_reset(self.get_object())
        except NetworkFailureError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(self.get_serializer(coupon).data)

    @action(detail=True, methods=['post'])
    def redeem(self, request, unique_id=None):
        try:
            coupon = redeem(self.get_object())
        except InvalidTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except NetworkFailureError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(self.get_serializer(coupon).data)

    @action(detail=False, methods=['post'])
    def reset_all(self, request):
        try:
            count = reset_all()
        except NetworkFailureError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({'message': f'Reset {count} coupons', 'count': count})
