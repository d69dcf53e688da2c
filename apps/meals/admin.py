from django.contrib import admin
from .models import MealSlot


@admin.register(MealSlot)
class MealSlotAdmin(admin.ModelAdmin):
    list_display = ['slot_id', 'name', 'day', 'meal_type', 'event_date', 'start_time', 'end_time']
    list_filter = ['meal_type', 'day', 'event_date']
    search_fields = ['slot_id', 'name']
    ordering = ['event_date', 'start_time']

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        if not change:
            # New slots need a coupon for every registered participant
            from apps.coupons.services import provision_meal_slot
            provision_meal_slot(meal_slot=obj)
