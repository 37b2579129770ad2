# modelchat/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import chat, messages, models
from .core.config import Settings
from .core.middleware import ErrorHandlingMiddleware, http_exception_handler, request_validation_handler
from .db.init_db import init_db
from .db.session import build_engine, build_sessionmaker
from .services.llm.base import CompletionProvider
from .services.llm.factory import create_completion_provider
from .services.rate_limit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


def create_app(
        settings: Optional[Settings] = None,
        completion_provider: Optional[CompletionProvider] = None
) -> FastAPI:
    """Build the application.

    Settings are read once, here. A missing completion API key fails at this
    point rather than on the first message.
    """
    settings = settings or Settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Setup database
        engine = build_engine(settings)
        await init_db(engine)
        app.state.engine = engine
        app.state.sessionmaker = build_sessionmaker(engine)

        # Setup completion provider
        provider = completion_provider or create_completion_provider(settings)
        app.state.completion_provider = provider

        logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION} with provider {settings.COMPLETION_BASE_URL}")
        try:
            yield
        finally:
            await provider.close()
            await engine.dispose()

    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = FixedWindowRateLimiter(
        settings.RATE_LIMIT_MAX_REQUESTS,
        settings.RATE_LIMIT_WINDOW_SECONDS
    )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["RateLimit-Policy", "RateLimit-Limit", "RateLimit-Remaining", "RateLimit-Reset", "Retry-After"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(chat.router, prefix=settings.API_PREFIX)
    app.include_router(messages.router, prefix=settings.API_PREFIX)
    app.include_router(models.router, prefix=settings.API_PREFIX)

    return app
