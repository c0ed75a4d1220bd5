"""Transactional email via the Mailgun HTTP API."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from eats.app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailVar:
    """A single template variable, sent as a ``v:{key}`` form field."""

    key: str
    value: str


class MailService:
    """Sends templated mail. Delivery is best-effort: one attempt, no retry.

    Args:
        config: Settings holding the API key, domain and sender address.
        client: Optional pre-built HTTP client (tests inject one).
    """

    def __init__(self, config: Settings, client: Optional[httpx.AsyncClient] = None):
        self._api_key = config.mail_api_key
        self._from_email = config.mail_from_email
        self._timeout = config.mail_timeout_seconds
        self._url = f"{config.mail_api_base.rstrip('/')}/v3/{config.mail_domain}/messages"
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client (call on shutdown)."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send_email(
        self,
        subject: str,
        to: str,
        template: str,
        email_vars: list[EmailVar],
    ) -> bool:
        """Send a templated email.

        Args:
            subject: Subject line.
            to: Recipient address.
            template: Name of the template stored at the mail provider.
            email_vars: Template variables.

        Returns:
            True if the provider accepted the message, False on any failure.
        """
        try:
            # (None, value) makes httpx send a plain multipart field, not a file
            form = [
                ("from", (None, f"Eats <{self._from_email}>")),
                ("to", (None, to)),
                ("subject", (None, subject)),
                ("template", (None, template)),
            ]
            form.extend((f"v:{var.key}", (None, var.value)) for var in email_vars)

            client = self._get_client()
            resp = await client.post(
                self._url, files=form, auth=("api", self._api_key), timeout=self._timeout
            )
            resp.raise_for_status()
        except Exception:
            logger.exception("Failed to send '%s' email to %s", template, to)
            return False

        logger.info("Sent '%s' email to %s", template, to)
        return True

    async def send_verification_email(self, email: str, code: str) -> bool:
        """Send the email verification code to the user's current address."""
        return await self.send_email(
            "Verify Your Email",
            email,
            "verify-email",
            [EmailVar("code", code), EmailVar("username", email)],
        )
