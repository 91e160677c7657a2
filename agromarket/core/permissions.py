from rest_framework.permissions import BasePermission


def is_admin_user(user):
    """
    Check if user is an admin user.
    Returns True if the user has the admin role or is a Django superuser/staff member.
    """
    if not user or not user.is_authenticated:
        return False
    return user.is_admin_role


def is_farmer_or_admin(user):
    return is_admin_user(user) or (user.is_authenticated and user.is_farmer)


class IsAdminRole(BasePermission):
    """Allows access only to marketplace administrators"""
    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        return is_admin_user(request.user)
