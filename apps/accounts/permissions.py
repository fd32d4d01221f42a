"""
API permission classes.

- IsExecutive: CEO or Executive role (organization management, dashboard)
- IsExecutiveOrReadOnly: anyone signed in may read, executives may write
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_executive(user):
    return bool(
        user
        and getattr(user, 'is_authenticated', False)
        and getattr(user, 'is_executive', False)
    )


class IsExecutive(BasePermission):
    """Allow access only to CEO and Executive roles."""

    message = 'Only the CEO or an executive can do this.'

    def has_permission(self, request, view):
        return is_executive(request.user)


class IsExecutiveOrReadOnly(BasePermission):
    """Reads for any signed-in user, writes for CEO and executives."""

    message = 'Only the CEO or an executive can change this.'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return is_executive(user)
