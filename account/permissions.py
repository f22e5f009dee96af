# account/permissions.py
from rest_framework.permissions import BasePermission
from account.models import Role


class IsAdminOrInvigilator(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        return bool(
            user.is_authenticated
            and user.role
            and user.role.name in [Role.ADMIN, Role.INVIGILATOR]
        )


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        return bool(
            user.is_authenticated
            and user.role
            and user.role.name == Role.ADMIN
        )
