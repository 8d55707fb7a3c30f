from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Only users with the admin role (or superusers)"""
    message = 'Administrator role required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_superuser or user.role == 'admin'))


class IsAdminOrManager(BasePermission):
    message = 'Administrator or manager role required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_superuser or user.role in ('admin', 'manager')))
