"""Eats API: GraphQL backend for a food-ordering platform.

FastAPI application with accounts, email verification and the restaurant catalog.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eats.app.api.schema import create_graphql_router
from eats.app.core.config import settings
from eats.app.core.database import init_db
from eats.app.core.email import MailService
from eats.app.core.security import TokenService

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    logger.info("Eats API starting up...")
    await init_db()
    logger.info("Database initialized")
    yield
    await app.state.mail_service.close()
    logger.info("Eats API shut down")


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan,
)

# Process-wide collaborators, built once from the frozen settings
app.state.token_service = TokenService(settings)
app.state.mail_service = MailService(settings)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(create_graphql_router(), prefix="/graphql")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "service": settings.app_name}
