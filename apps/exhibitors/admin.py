from django.contrib import admin
from .models import ExhibitorCompany, ExhibitorEmployee, AllocationClaim


class ExhibitorEmployeeInline(admin.TabularInline):
    model = ExhibitorEmployee
    extra = 0
    fields = ['employee_name', 'employee_phone', 'is_active']


@admin.register(ExhibitorCompany)
class ExhibitorCompanyAdmin(admin.ModelAdmin):
    list_display = ['company_code', 'company_name', 'plan', 'phone_number', 'created_at']
    list_filter = ['plan']
    search_fields = ['company_code', 'company_name', 'user__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    inlines = [ExhibitorEmployeeInline]


@admin.register(AllocationClaim)
class AllocationClaimAdmin(admin.ModelAdmin):
    list_display = ['company', 'meal_slot', 'meal_type', 'quantity', 'employee', 'claimed_at']
    list_filter = ['meal_type', 'meal_slot']
    search_fields = ['company__company_name', 'company__company_code']
    readonly_fields = ['id', 'claimed_at', 'expires_at', 'created_at']
