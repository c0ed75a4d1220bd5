"""Tests for the Mailgun mail service.

The HTTP client is a mock; no request leaves the process.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from eats.app.core.config import Settings
from eats.app.core.email import EmailVar, MailService

TEST_DOMAIN = "test-domain"
MAIL_URL = f"https://api.mailgun.net/v3/{TEST_DOMAIN}/messages"


def _config() -> Settings:
    return Settings(
        mail_api_key="test-api-key",
        mail_domain=TEST_DOMAIN,
        mail_from_email="from@example.com",
    )


def _client(response=None, error=None) -> MagicMock:
    client = MagicMock(spec=httpx.AsyncClient)
    if error is not None:
        client.post = AsyncMock(side_effect=error)
    else:
        client.post = AsyncMock(
            return_value=response or httpx.Response(200, request=httpx.Request("POST", MAIL_URL))
        )
    return client


@pytest.mark.asyncio
async def test_send_email_posts_form_to_domain():
    client = _client()
    service = MailService(_config(), client=client)

    ok = await service.send_email("subject", "to@example.com", "template", [EmailVar("key", "value")])

    assert ok is True
    client.post.assert_awaited_once()
    args, kwargs = client.post.await_args
    assert args[0] == MAIL_URL
    assert kwargs["auth"] == ("api", "test-api-key")
    fields = dict(kwargs["files"])
    assert fields["from"] == (None, "Eats <from@example.com>")
    assert fields["to"] == (None, "to@example.com")
    assert fields["subject"] == (None, "subject")
    assert fields["template"] == (None, "template")
    assert fields["v:key"] == (None, "value")
    assert kwargs["timeout"] == _config().mail_timeout_seconds


@pytest.mark.asyncio
async def test_send_email_returns_false_on_transport_error():
    client = _client(error=httpx.ConnectError("connection refused"))
    service = MailService(_config(), client=client)

    ok = await service.send_email("subject", "to@example.com", "template", [])

    assert ok is False


@pytest.mark.asyncio
async def test_send_email_returns_false_on_any_exception():
    client = _client(error=RuntimeError("boom"))
    service = MailService(_config(), client=client)

    assert await service.send_email("s", "to@example.com", "t", []) is False


@pytest.mark.asyncio
async def test_send_email_returns_false_on_error_status():
    response = httpx.Response(401, request=httpx.Request("POST", MAIL_URL))
    service = MailService(_config(), client=_client(response=response))

    assert await service.send_email("s", "to@example.com", "t", []) is False


@pytest.mark.asyncio
async def test_send_email_returns_false_on_malformed_vars():
    client = _client()
    service = MailService(_config(), client=client)

    assert await service.send_email("s", "to@example.com", "t", None) is False
    client.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_email_applies_timeout_to_injected_client():
    client = _client()
    config = Settings(mail_domain=TEST_DOMAIN, mail_timeout_seconds=2.5)

    await MailService(config, client=client).send_email("s", "to@example.com", "t", [])

    assert client.post.await_args.kwargs["timeout"] == 2.5


@pytest.mark.asyncio
async def test_send_verification_email():
    service = MailService(_config(), client=_client())

    with patch.object(service, "send_email", new_callable=AsyncMock, return_value=True) as m:
        ok = await service.send_verification_email("user@example.com", "the-code")

    assert ok is True
    m.assert_awaited_once_with(
        "Verify Your Email",
        "user@example.com",
        "verify-email",
        [EmailVar("code", "the-code"), EmailVar("username", "user@example.com")],
    )


@pytest.mark.asyncio
async def test_close_releases_client():
    client = _client()
    service = MailService(_config(), client=client)

    await service.close()

    client.aclose.assert_awaited_once()


def test_url_uses_configured_base():
    config = Settings(mail_api_base="https://api.eu.mailgun.net/", mail_domain="mg.example.com")
    assert MailService(config).url == "https://api.eu.mailgun.net/v3/mg.example.com/messages"
