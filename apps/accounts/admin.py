# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for login identities."""

    list_display = [
        'email',
        'display_name',
        'role',
        'holder',
        'is_active',
        'is_staff',
        'last_login',
    ]

    list_filter = [
        'role',
        'is_active',
        'is_staff',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
        'participant__phone_number',
        'exhibitor__company_code',
    ]
    list_select_related = ['participant', 'exhibitor']

    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'role', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'role', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']

    @admin.display(description='Holder')
    def holder(self, obj):
        participant = getattr(obj, 'participant', None)
        if participant is not None:
            return f"{participant.name} ({participant.phone_number})"
        company = getattr(obj, 'exhibitor', None)
        if company is not None:
            return company.company_code
        return '-'
