from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'coupon-admin'

router = DefaultRouter()
router.register(r'participants', views.AdminParticipantViewSet, basename='participant')
router.register(r'coupons', views.AdminCouponViewSet, basename='coupon')

urlpatterns = [
    # /api/admin/participants/...  - Participant CRUD and bulk coupon actions
    # /api/admin/coupons/...       - Coupon list, reset, redeem, reset_all
    path('', include(router.urls)),
]
