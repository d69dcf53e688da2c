from django.utils import timezone
from rest_framework import viewsets, status, mixins
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import IsEventAdmin
from apps.meals.models import MealSlot

from .models import AllocationClaim, ExhibitorCompany
from .serializers import (
    ExhibitorCompanySerializer,
    ExhibitorCreateSerializer,
    ExhibitorUpdateSerializer,
    ExhibitorEmployeeSerializer,
    ExhibitorEmployeeUpdateSerializer,
    AllocationClaimSerializer,
    ClaimBulkSerializer,
    SlotAvailabilitySerializer,
)

from apps.exhibitors.services import (
    get_company_for_user,
    slot_availability,
    allocation_summary,
    claim_bulk,
    get_company_claims,
    reset_allocation_claim,
    get_active_employees,
    add_employee,
    update_employee,
    remove_employee,
    search_companies,
    create_exhibitor,
    update_exhibitor,
    delete_exhibitor,
    # Exceptions
    ConfigurationError,
    SlotAlreadyClaimedError,
    AllocationExceededError,
    InvalidQuantityError,
    EmployeeRequiredError,
    MealTypeMismatchError,
    MealSlotNotFoundError,
    EmployeeNotFoundError,
    ClaimNotFoundError,
    NetworkFailureError,
    DuplicateExhibitorError,
)


def _no_company(e):
    return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)


@extend_schema(responses=ExhibitorCompanySerializer, tags=['exhibitors'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_company(request):
    """Current exhibitor's company profile and allocation summary."""
    try:
        company = get_company_for_user(request.user)
    except ConfigurationError as e:
        return _no_company(e)

    serializer = ExhibitorCompanySerializer(
        company, context={'summary': allocation_summary(company=company)}
    )
    return Response(serializer.data)


@extend_schema(responses=SlotAvailabilitySerializer(many=True), tags=['exhibitors'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def allocations(request):
    """Claimability of every meal slot for the current exhibitor."""
    try:
        company = get_company_for_user(request.user)
    except ConfigurationError as e:
        return _no_company(e)

    rows = [
        slot_availability(company=company, meal_slot=slot)
        for slot in MealSlot.objects.all()
    ]
    return Response({
        'slots': SlotAvailabilitySerializer(rows, many=True).data,
        'summary': allocation_summary(company=company),
    })


@extend_schema(request=ClaimBulkSerializer, responses=AllocationClaimSerializer(many=True), tags=['exhibitors'])
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def claims(request):
    """
    GET: The company's allocation claims
    POST: Claim meals for a slot in bulk
    """
    try:
        company = get_company_for_user(request.user)
    except ConfigurationError as e:
        return _no_company(e)

    now = timezone.now()
    if request.method == 'GET':
        serializer = AllocationClaimSerializer(
            get_company_claims(company=company), many=True, context={'now': now}
        )
        return Response(serializer.data)

    serializer = ClaimBulkSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        claim = claim_bulk(company=company, now=now, **serializer.validated_data)
    except AllocationExceededError as e:
        return Response(
            {'error': str(e), 'remaining': e.remaining},
            status=status.HTTP_400_BAD_REQUEST
        )
    except (InvalidQuantityError, EmployeeRequiredError, MealTypeMismatchError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except MealSlotNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except SlotAlreadyClaimedError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    except NetworkFailureError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    output = AllocationClaimSerializer(claim, context={'now': now})
    return Response(output.data, status=status.HTTP_201_CREATED)


class ExhibitorEmployeeViewSet(viewsets.ViewSet):
    """
    Employees of the current exhibitor company.

    list: Active employees
    create: Add an employee
    partial_update: Change name or phone
    destroy: Deactivate an employee
    """

    permission_classes = [IsAuthenticated]

    def _company(self):
        return get_company_for_user(self.request.user)

    @extend_schema(responses=ExhibitorEmployeeSerializer(many=True))
    def list(self, request):
        try:
            company = self._company()
        except ConfigurationError as e:
            return _no_company(e)
        employees = get_active_employees(company=company)
        return Response(ExhibitorEmployeeSerializer(employees, many=True).data)

    @extend_schema(request=ExhibitorEmployeeSerializer, responses=ExhibitorEmployeeSerializer)
    def create(self, request):
        serializer = ExhibitorEmployeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            company = self._company()
        except ConfigurationError as e:
            return _no_company(e)

        employee = add_employee(
            company=company,
            employee_name=serializer.validated_data['employee_name'],
            employee_phone=serializer.validated_data.get('employee_phone', '')
        )
        return Response(ExhibitorEmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ExhibitorEmployeeUpdateSerializer, responses=ExhibitorEmployeeSerializer)
    def partial_update(self, request, pk=None):
        serializer = ExhibitorEmployeeUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            employee = update_employee(
                company=self._company(),
                employee_id=pk,
                **serializer.validated_data
            )
        except ConfigurationError as e:
            return _no_company(e)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ExhibitorEmployeeSerializer(employee).data)

    def destroy(self, request, pk=None):
        try:
            remove_employee(company=self._company(), employee_id=pk)
        except ConfigurationError as e:
            return _no_company(e)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminAllocationClaimViewSet(mixins.ListModelMixin,
                                  mixins.DestroyModelMixin,
                                  viewsets.GenericViewSet):
    """
    Allocation ledger administration.

    list: All claims, optionally filtered by company_code or meal_slot_id
    destroy: Reset a claim, freeing the slot
    """

    serializer_class = AllocationClaimSerializer
    permission_classes = [IsAuthenticated, IsEventAdmin]

    def get_queryset(self):
        qs = AllocationClaim.objects.select_related('company', 'meal_slot', 'employee')
        company_code = self.request.query_params.get('company_code')
        if company_code:
            qs = qs.filter(company__company_code=company_code)
        meal_slot_id = self.request.query_params.get('meal_slot_id')
        if meal_slot_id:
            qs = qs.filter(meal_slot__slot_id=meal_slot_id)
        return qs

    def destroy(self, request, *args, **kwargs):
        try:
            reset_allocation_claim(claim_id=kwargs['pk'])
        except ClaimNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminExhibitorViewSet(viewsets.ModelViewSet):
    """
    Exhibitor company administration.

    list: Companies, filterable by ?search= (code, name or phone) and ?plan=
    retrieve: One company with its allocation summary
    create: Register a company together with its login
    partial_update: Change name, phone or plan
    destroy: Remove the company, its login, employees and claims
    """

    serializer_class = ExhibitorCompanySerializer
    permission_classes = [IsAuthenticated, IsEventAdmin]
    http_method_names = ['get', 'post', 'patch', 'delete']

    def get_queryset(self):
        if self.action != 'list':
            return ExhibitorCompany.objects.select_related('user')
        return search_companies(
            search=self.request.query_params.get('search'),
            plan=self.request.query_params.get('plan'),
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return ExhibitorCreateSerializer
        if self.action == 'partial_update':
            return ExhibitorUpdateSerializer
        return ExhibitorCompanySerializer

    @extend_schema(parameters=[
        OpenApiParameter('search', str, description='Company code, name or phone contains'),
        OpenApiParameter('plan', str, description='Only companies on this plan'),
    ])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        company = self.get_object()
        serializer = ExhibitorCompanySerializer(
            company, context={'summary': allocation_summary(company=company)}
        )
        return Response(serializer.data)

    @extend_schema(request=ExhibitorCreateSerializer, responses=ExhibitorCompanySerializer)
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            company = create_exhibitor(**serializer.validated_data)
        except DuplicateExhibitorError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExhibitorCompanySerializer(company).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ExhibitorUpdateSerializer, responses=ExhibitorCompanySerializer)
    def partial_update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        company = update_exhibitor(company=self.get_object(), **serializer.validated_data)
        return Response(ExhibitorCompanySerializer(company).data)

    def destroy(self, request, *args, **kwargs):
        delete_exhibitor(company=self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)
