from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'exhibitors'

router = DefaultRouter()
router.register(r'employees', views.ExhibitorEmployeeViewSet, basename='employee')
router.register(r'admin/claims', views.AdminAllocationClaimViewSet, basename='admin-claim')
router.register(r'admin/companies', views.AdminExhibitorViewSet, basename='admin-company')

urlpatterns = [
    # GET /api/exhibitors/me/           - Company profile and allocation summary
    path('me/', views.my_company, name='me'),

    # GET /api/exhibitors/allocations/  - Per-slot availability
    path('allocations/', views.allocations, name='allocations'),

    # GET/POST /api/exhibitors/claims/  - List or create bulk claims
    path('claims/', views.claims, name='claims'),

    # /api/exhibitors/employees/...     - Employee management
    # /api/exhibitors/admin/claims/...  - Ledger administration
    # /api/exhibitors/admin/companies/... - Company administration
    path('', include(router.urls)),
]
