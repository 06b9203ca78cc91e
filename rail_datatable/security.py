"""
Authorization checkers consulted to hide permission-gated columns.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable


class AuthorizationChecker(ABC):
    @abstractmethod
    def is_granted(self, permission: str) -> bool:
        """Return whether the current user holds ``permission``."""


class UserAuthorizationChecker(AuthorizationChecker):
    """
    Checks Django permissions (``"app_label.codename"``) of a user.

    Anonymous or missing users are never granted anything.
    """

    def __init__(self, user: Any):
        self.user = user

    def is_granted(self, permission: str) -> bool:
        user = self.user
        if user is None or not getattr(user, "is_authenticated", False):
            return False
        if getattr(user, "is_active", True) is False:
            return False
        return bool(user.has_perm(permission))


class StaticAuthorizationChecker(AuthorizationChecker):
    """Grants a fixed set of permissions; handy for tests and scripts."""

    def __init__(self, permissions: Iterable[str] = ()):
        self.permissions = frozenset(permissions)

    def is_granted(self, permission: str) -> bool:
        return permission in self.permissions


__all__ = ["AuthorizationChecker", "UserAuthorizationChecker", "StaticAuthorizationChecker"]
