"""Role checks applied on the server for every privileged endpoint."""

from rest_framework import permissions


class HasRole(permissions.BasePermission):
    """Allow authenticated users whose role is in ``allowed_roles``."""

    allowed_roles: tuple = ()
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return getattr(user, "role", None) in self.allowed_roles and user.is_active


class IsAdminRole(HasRole):
    allowed_roles = ("admin",)
    message = "Only administrators can perform this action."


class IsAccountsRole(HasRole):
    allowed_roles = ("admin", "accounts")
    message = "Only admin or accounts users can perform this action."
