"""JWT token signing/validation and password hashing."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from eats.app.core.config import Settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain, hashed)


class TokenService:
    """Issues and verifies signed identity tokens for numeric user ids.

    Stateless apart from the signing configuration, which is read once
    from the settings object passed at construction.
    """

    token_type = "access"

    def __init__(self, config: Settings):
        self._secret = config.jwt_secret
        self._algorithm = config.jwt_algorithm
        self._expires = timedelta(minutes=config.jwt_access_expire_minutes)

    def sign(self, user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        """Create a token whose subject is ``user_id``.

        Args:
            user_id: Numeric user id.
            expires_delta: Custom expiry. Defaults to the configured lifetime.
        """
        expire = datetime.now(timezone.utc) + (expires_delta or self._expires)
        return jwt.encode(
            {"sub": str(user_id), "exp": expire, "type": self.token_type},
            self._secret,
            algorithm=self._algorithm,
        )

    def verify(self, token: str) -> Optional[dict[str, Any]]:
        """Decode and validate a token.

        Returns:
            The decoded claims if the signature, expiry and type check out,
            None otherwise.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            logger.debug("Rejected token: bad signature or expired")
            return None
        if payload.get("type") != self.token_type:
            return None
        return payload

    def user_id_from(self, token: str) -> Optional[int]:
        """Return the numeric subject of a valid token, or None."""
        payload = self.verify(token)
        if payload is None:
            return None
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
