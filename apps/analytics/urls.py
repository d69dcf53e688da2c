from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Admin dashboard
    path('stats/', views.admin_stats, name='admin-stats'),

    # Per meal slot
    path('slots/', views.meal_slot_stats, name='meal-slot-stats'),
]
