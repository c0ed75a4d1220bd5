"""User and email verification models."""

import enum
import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from eats.app.core.database import CoreModel
from eats.app.core.security import hash_password, verify_password


class UserRole(enum.Enum):
    Client = "Client"
    Owner = "Owner"
    Delivery = "Delivery"


def normalize_email(email: str) -> str:
    """Emails are compared and stored stripped and lower-cased."""
    return email.strip().lower()


class User(CoreModel):
    """A platform account (customer, restaurant owner or courier)."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return normalize_email(value)

    @validates("password")
    def _hash_password(self, key: str, value: str) -> str:
        # Only assignments pass through here; rows loaded from the db keep their hash
        return hash_password(value)

    def check_password(self, plain: str) -> bool:
        return verify_password(plain, self.password)

    def __repr__(self) -> str:
        return f"<User {self.email}>"


def _new_code() -> str:
    return uuid.uuid4().hex


class Verification(CoreModel):
    """Pending proof-of-ownership code for a user's email address."""

    __tablename__ = "verifications"

    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, default=_new_code)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    user: Mapped[User] = relationship()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Column defaults only apply at flush; the code is needed before that
        if self.code is None:
            self.code = _new_code()

    def __repr__(self) -> str:
        return f"<Verification user={self.user_id}>"
