from django.urls import path
from . import views

app_name = 'coupons'

urlpatterns = [
    # GET /api/coupons/                 - Current participant's coupons
    path('', views.my_coupons, name='my-coupons'),

    # POST /api/coupons/claim/          - Claim one coupon
    path('claim/', views.claim_coupon, name='claim'),

    # POST /api/coupons/claim_family/   - Claim all family coupons for a slot
    path('claim_family/', views.claim_family, name='claim-family'),
]
