"""Strawberry permissions for authenticated and owner-only fields."""

import logging
from typing import Any

from strawberry.permission import BasePermission
from strawberry.types import Info

from eats.app.models.user import UserRole

logger = logging.getLogger(__name__)


class IsAuthenticated(BasePermission):
    """Allows the field only when the request carried a valid token.

    Examples:
        @strawberry.field(permission_classes=[IsAuthenticated])
        def me(self, info: Info) -> UserType:
            return UserType.from_model(info.context.user)
    """

    message = "Not authenticated"

    def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
        if info.context.user is None:
            logger.debug("Permission denied: anonymous request to %s", info.field_name)
            return False
        return True


class IsOwner(BasePermission):
    """Allows the field only for authenticated restaurant owners."""

    message = "Only restaurant owners can do this"

    def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
        user = info.context.user
        if user is None or user.role != UserRole.Owner:
            logger.debug("Permission denied: %s requires an owner", info.field_name)
            return False
        return True
