"""DRF permission classes shared by the API modules."""

from __future__ import annotations

from rest_framework.permissions import BasePermission


class IsOperator(BasePermission):
    """Allow staff users only (order administration)."""

    message = "Operator role required."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)
