"""GraphQL request context and the authentication dependency feeding it."""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from eats.app.core.database import get_db
from eats.app.core.email import MailService
from eats.app.core.security import TokenService
from eats.app.models.user import User
from eats.app.services.account_directory import AccountDirectory
from eats.app.services.restaurants import RestaurantService
from eats.app.services.users import UserService

logger = logging.getLogger(__name__)

# Anonymous requests are allowed through; resolvers decide via permissions
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail_service


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Resolve the bearer token into a User, or None for anonymous callers."""
    if credentials is None:
        return None
    user_id = tokens.user_id_from(credentials.credentials)
    if user_id is None:
        logger.debug("Ignoring invalid or expired bearer token")
        return None
    return await AccountDirectory(db).find_by_id(user_id)


class GraphQLContext(BaseContext):
    """Per-request dependencies available to resolvers as ``info.context``.

    Attributes:
        user: Authenticated caller, None when anonymous.
        user_service: Account lifecycle operations.
        restaurant_service: Catalog operations.
        session_lock: Held by query resolvers around their service call. Root
            query fields resolve concurrently but share one AsyncSession,
            which allows one operation at a time. Mutations run serially.
    """

    def __init__(
        self,
        user: Optional[User],
        user_service: UserService,
        restaurant_service: RestaurantService,
    ) -> None:
        super().__init__()
        self.user = user
        self.user_service = user_service
        self.restaurant_service = restaurant_service
        self.session_lock = asyncio.Lock()


async def get_context(
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_current_user_optional),
    tokens: TokenService = Depends(get_token_service),
    mailer: MailService = Depends(get_mail_service),
) -> GraphQLContext:
    return GraphQLContext(
        user=user,
        user_service=UserService(AccountDirectory(db), tokens, mailer),
        restaurant_service=RestaurantService(db),
    )
