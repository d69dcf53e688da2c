"""
Custom permission classes shared by the admin endpoints.

Usage:
    from apps.accounts.permissions import IsEventAdmin

    class AdminCouponViewSet(viewsets.ReadOnlyModelViewSet):
        permission_classes = [IsAuthenticated, IsEventAdmin]
"""

from rest_framework.permissions import BasePermission


class IsEventAdmin(BasePermission):
    """Allows access to staff users and users with the admin role."""

    message = 'Only event administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_event_admin)
