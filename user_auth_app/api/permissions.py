from rest_framework import permissions

from user_auth_app.roles import is_admin


class IsAdminRole(permissions.BasePermission):
    """
    Custom permission to only allow users holding the 'admin' role.

    The role lives on the user's `UserProfile`, not on Django's `is_staff`
    flag, so this check goes through the role resolver.
    """
    message = "Only administrators can perform this action."

    def has_permission(self, request, view):
        """
        Denies anonymous users outright, then asks the role resolver.

        Args:
            request: The incoming HttpRequest object.
            view: The view that is handling the request.

        Returns:
            bool: True if the authenticated user is an admin.
        """
        if not request.user or not request.user.is_authenticated:
            return False
        return is_admin(request.user.id)
