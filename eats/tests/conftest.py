"""Test fixtures for the Eats API.

Uses SQLite in-memory for tests, no Postgres needed.
"""

from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eats.app.core.config import settings
from eats.app.core.database import Base, get_db
from eats.app.core.email import MailService
from eats.app.core.security import TokenService
from eats.app.main import app
from eats.app.services.account_directory import AccountDirectory
from eats.app.services.users import UserService

# Use SQLite for testing (async via aiosqlite); StaticPool keeps one shared in-memory db
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
test_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # The shared connection belongs to this test's event loop
    await test_engine.dispose()


@pytest.fixture(autouse=True)
def mailer(monkeypatch) -> MagicMock:
    """Replace the app's mail service; nothing leaves the process in tests."""
    fake = MagicMock(spec=MailService)
    fake.send_verification_email = AsyncMock(return_value=True)
    fake.close = AsyncMock()
    monkeypatch.setattr(app.state, "mail_service", fake)
    return fake


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(settings)


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield the test DB session for direct model manipulation in tests."""
    async with test_session() as session:
        yield session


@pytest.fixture
def directory(db_session: AsyncSession) -> AccountDirectory:
    return AccountDirectory(db_session)


@pytest.fixture
def user_service(directory: AccountDirectory, tokens: TokenService, mailer: MagicMock) -> UserService:
    return UserService(directory, tokens, mailer)


async def _gql(
    client: AsyncClient,
    query: str,
    variables: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> dict:
    resp = await client.post(
        "/graphql",
        json={"query": query, "variables": variables or {}},
        headers=headers or {},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def gql(client: AsyncClient):
    """POST a GraphQL operation and return the decoded body."""

    async def run(query: str, variables: Optional[dict] = None, headers: Optional[dict] = None) -> dict:
        return await _gql(client, query, variables, headers)

    return run


CREATE_ACCOUNT = """
mutation CreateAccount($input: CreateAccountInput!) {
  createAccount(input: $input) { ok error errorKind }
}
"""

LOGIN = """
mutation Login($input: LoginInput!) {
  login(input: $input) { ok error errorKind token }
}
"""


async def register_and_login(client: AsyncClient, email: str, password: str, role: str = "Client") -> dict:
    """Create an account through the API and return auth headers for it."""
    await _gql(client, CREATE_ACCOUNT, {"input": {"email": email, "password": password, "role": role}})
    body = await _gql(client, LOGIN, {"input": {"email": email, "password": password}})
    token = body["data"]["login"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict:
    """Register a test client account and return auth headers."""
    return await register_and_login(client, "test@example.com", "testpassword123")


@pytest_asyncio.fixture
async def owner_headers(client: AsyncClient) -> dict:
    """Register a restaurant owner and return auth headers."""
    return await register_and_login(client, "owner@example.com", "ownerpassword123", role="Owner")


@pytest.fixture
def login_as(client: AsyncClient):
    """Factory: register an account and return its auth headers."""

    async def run(email: str, password: str = "password1234", role: str = "Client") -> dict:
        return await register_and_login(client, email, password, role)

    return run
