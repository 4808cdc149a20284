"""
Credential service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_middleware
from auth.password import PasswordHasher
from auth.routes import register_exception_handlers
from auth.routes import router as auth_router
from auth.service import CredentialService
from auth.store import UserStore
from auth.tokens import TokenIssuer, TokenVerifier
from config.settings import Settings, get_settings
from database.session import build_engine, build_session_factory, create_tables
from database.user_store import SqlUserStore

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio", "multipart"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def build_credential_service(settings: Settings, store: UserStore) -> CredentialService:
    return CredentialService(
        store=store,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        issuer=TokenIssuer(settings.jwt_secret, expiry_seconds=settings.jwt_expiry_seconds),
        verifier=TokenVerifier(settings.jwt_secret),
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[UserStore] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Without an explicit ``store`` the app talks to the database named by
    ``DATABASE_URL`` and creates the ``users`` table on startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.debug)

    app = FastAPI(
        title="Credential Service",
        version="1.0.0",
        description="Account registration, login and bearer-token validation.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    engine = None
    if store is None:
        engine = build_engine(settings.database_url)
        store = SqlUserStore(build_session_factory(engine))

    app.state.settings = settings
    app.state.credentials = build_credential_service(settings, store)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")

    @app.on_event("startup")
    async def on_startup():
        if engine is not None:
            logger.info("Ensuring users table exists…")
            await create_tables(engine)
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        if engine is not None:
            await engine.dispose()

    return app


if __name__ == "__main__":
    config = get_settings()
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )
