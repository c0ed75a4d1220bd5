"""Data access for users and their email verifications.

The directory only stages and flushes; ``save_user`` and ``commit`` are the
points where a unit of work becomes durable.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from eats.app.core.errors import DuplicateAccountError, UserNotFoundError
from eats.app.models.user import User, UserRole, Verification, normalize_email

logger = logging.getLogger(__name__)


class AccountDirectory:
    """Persistence boundary for User and Verification records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_id(self, user_id: int) -> User:
        """Like ``find_by_id`` but raises UserNotFoundError when absent."""
        user = await self.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    async def list_users(self) -> list[User]:
        result = await self.session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def create_user(self, email: str, password: str, role: UserRole) -> User:
        """Stage a new user and flush so it gets an id.

        Raises:
            DuplicateAccountError: The email is already taken.
        """
        user = User(email=email, password=password, role=role, verified=False)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateAccountError(f"Email {normalize_email(email)} already registered") from exc
        return user

    async def save_user(self, user: User) -> User:
        """Persist the user and everything staged alongside it.

        Raises:
            DuplicateAccountError: The new email collides with another user.
        """
        email = user.email
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateAccountError(f"Email {email} already registered") from exc
        return user

    async def create_verification(self, user: User) -> Verification:
        """Stage a fresh verification for ``user``, replacing any pending one."""
        if user.id is not None:
            await self.session.execute(
                delete(Verification).where(Verification.user_id == user.id)
            )
        verification = Verification(user=user)
        self.session.add(verification)
        await self.session.flush()
        return verification

    async def find_verification_by_code(self, code: str) -> Optional[Verification]:
        result = await self.session.execute(
            select(Verification)
            .options(joinedload(Verification.user))
            .where(Verification.code == code)
        )
        return result.scalar_one_or_none()

    async def delete_verification(self, verification: Verification) -> None:
        await self.session.delete(verification)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
