"""Account lifecycle: sign-up, login, profile edits and email verification.

Every public method returns a result object. Faults raised by the directory,
the database or the mailer are logged and converted into ``ok=False``
results; nothing propagates to the API layer.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from eats.app.core.errors import DuplicateAccountError, ErrorKind
from eats.app.core.security import TokenService
from eats.app.models.user import User, UserRole, normalize_email
from eats.app.services.account_directory import AccountDirectory
from eats.app.services.common import CoreOutput

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT = "There is a user with that email already"
USER_NOT_FOUND = "User not found"
WRONG_PASSWORD = "Wrong password"
VERIFICATION_NOT_FOUND = "Verification not found"


class VerificationMailer(Protocol):
    async def send_verification_email(self, email: str, code: str) -> bool: ...


# ── Inputs / outputs ────────────────────────────────────────────────


@dataclass
class CreateAccountInput:
    email: str
    password: str
    role: UserRole


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class EditProfileInput:
    """Patch for the mutable profile fields; None or blank leaves a field unchanged."""

    email: Optional[str] = None
    password: Optional[str] = None


@dataclass
class LoginOutput(CoreOutput):
    token: Optional[str] = None


@dataclass
class UserProfileOutput(CoreOutput):
    user: Optional[User] = None


@dataclass
class UsersOutput(CoreOutput):
    users: list[User] = field(default_factory=list)


# ── Service ─────────────────────────────────────────────────────────


class UserService:
    def __init__(
        self,
        directory: AccountDirectory,
        tokens: TokenService,
        mailer: VerificationMailer,
    ):
        self.directory = directory
        self.tokens = tokens
        self.mailer = mailer

    async def _send_verification(self, email: str, code: str) -> None:
        sent = await self.mailer.send_verification_email(email, code)
        if not sent:
            logger.warning("Verification email to %s was not delivered", email)

    async def create_account(self, data: CreateAccountInput) -> CoreOutput:
        """Register a user and mail them a verification code.

        Mail delivery failure does not undo the account.
        """
        try:
            if await self.directory.find_by_email(data.email):
                return CoreOutput.fail(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT)
            user = await self.directory.create_user(data.email, data.password, data.role)
            verification = await self.directory.create_verification(user)
            await self.directory.commit()
        except DuplicateAccountError:
            return CoreOutput.fail(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT)
        except Exception:
            logger.exception("Could not create account for %s", data.email)
            await self._rollback()
            return CoreOutput.fail(ErrorKind.DEPENDENCY_FAILURE, "Couldn't create account")

        logger.info("Created account %s (%s)", user.id, user.role.value)
        await self._send_verification(user.email, verification.code)
        return CoreOutput(ok=True)

    async def login(self, data: LoginInput) -> LoginOutput:
        try:
            user = await self.directory.find_by_email(data.email)
            if user is None:
                return LoginOutput.fail(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
            if not user.check_password(data.password):
                return LoginOutput.fail(ErrorKind.INVALID_CREDENTIAL, WRONG_PASSWORD)
            token = self.tokens.sign(user.id)
        except Exception:
            logger.exception("Login failed for %s", data.email)
            return LoginOutput.fail(ErrorKind.DEPENDENCY_FAILURE, "Can't log user in")
        return LoginOutput(ok=True, token=token)

    async def find_by_id(self, user_id: int) -> UserProfileOutput:
        try:
            user = await self.directory.get_by_id(user_id)
        except Exception:
            logger.debug("User %s lookup failed", user_id, exc_info=True)
            return UserProfileOutput.fail(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return UserProfileOutput(ok=True, user=user)

    async def get_all_users(self) -> UsersOutput:
        try:
            users = await self.directory.list_users()
        except Exception:
            logger.exception("Could not list users")
            await self._rollback()
            return UsersOutput.fail(ErrorKind.DEPENDENCY_FAILURE, "Could not load users")
        return UsersOutput(ok=True, users=users)

    async def edit_profile(self, user_id: int, data: EditProfileInput) -> CoreOutput:
        """Apply email and/or password changes with a single save.

        A new email resets ``verified`` and issues a fresh verification code,
        mailed to the new address once the change is committed.
        """
        verification = None
        try:
            user = await self.directory.get_by_id(user_id)
            new_email = normalize_email(data.email) if data.email else ""
            if new_email:
                if new_email != user.email:
                    owner = await self.directory.find_by_email(new_email)
                    if owner is not None:
                        return CoreOutput.fail(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT)
                verification = await self.directory.create_verification(user)
                user.email = new_email
                user.verified = False
            if data.password:
                user.password = data.password
            await self.directory.save_user(user)
        except DuplicateAccountError:
            return CoreOutput.fail(ErrorKind.CONFLICT, DUPLICATE_ACCOUNT)
        except Exception:
            logger.exception("Could not update profile of user %s", user_id)
            await self._rollback()
            return CoreOutput.fail(ErrorKind.DEPENDENCY_FAILURE, "Could not update profile")

        if verification is not None:
            await self._send_verification(user.email, verification.code)
        return CoreOutput(ok=True)

    async def verify_email(self, code: str) -> CoreOutput:
        """Consume a verification code. A code verifies at most once."""
        try:
            verification = await self.directory.find_verification_by_code(code)
            if verification is None:
                return CoreOutput.fail(ErrorKind.NOT_FOUND, VERIFICATION_NOT_FOUND)
            user = verification.user
            user.verified = True
            await self.directory.delete_verification(verification)
            # user update and verification removal commit together
            await self.directory.save_user(user)
        except Exception:
            logger.exception("Could not verify email with code %s", code)
            await self._rollback()
            return CoreOutput.fail(ErrorKind.DEPENDENCY_FAILURE, "Could not verify email")

        logger.info("User %s verified their email", user.id)
        return CoreOutput(ok=True)

    async def _rollback(self) -> None:
        try:
            await self.directory.rollback()
        except Exception:
            logger.exception("Rollback failed")
