from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'meals'

router = DefaultRouter()
router.register(r'', views.MealSlotViewSet, basename='mealslot')

urlpatterns = [
    # GET /api/meals/            - List meal slots
    # GET /api/meals/{slot_id}/  - Meal slot detail
    path('', include(router.urls)),
]
