from django.contrib import admin, messages
from .models import Participant, Coupon
from .services import admin_reset, NetworkFailureError


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone_number', 'is_family', 'family_size', 'created_at']
    list_filter = ['is_family', 'family_size']
    search_fields = ['name', 'phone_number', 'user__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['user']


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    """Coupons are provisioned automatically; state only changes through reset."""

    list_display = ['unique_id', 'participant', 'meal_slot', 'family_member_index', 'status', 'claimed_at', 'expires_at']
    list_filter = ['status', 'meal_slot']
    search_fields = ['unique_id', 'participant__name', 'participant__phone_number']
    readonly_fields = ['id', 'unique_id', 'status', 'claimed_at', 'expires_at', 'created_at', 'updated_at']
    actions = ['reset_selected']

    def has_add_permission(self, request):
        return False

    @admin.action(description='Reset selected coupons to available')
    def reset_selected(self, request, queryset):
        reset = 0
        for coupon in queryset:
            try:
                admin_reset(coupon)
            except NetworkFailureError as e:
                self.message_user(request, f"{coupon.unique_id}: {e}", level=messages.ERROR)
                continue
            reset += 1
        self.message_user(request, f"Reset {reset} coupons.")
