"""
Trainee Assessment Service

This package serves the REST API of a training-assessment application:

1. Trainees read the question-sets published for a date and save or submit
   one attempt per date
2. Admins publish question-sets and grade submitted attempts
3. A superadmin manages admin and trainee accounts
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trainassess.api import build_router, register_exception_handlers
from trainassess.attempts.service import AttemptService
from trainassess.common.auth import JWTConfig, set_jwt_config
from trainassess.common.exceptions import ConfigurationError
from trainassess.common.logger import configure_logger
from trainassess.config import DEFAULT_JWT_SECRET, Settings, get_settings
from trainassess.middleware import RequestLoggingMiddleware
from trainassess.questions.service import QuestionSetService
from trainassess.store import create_store
from trainassess.users.service import UserService

__version__ = "0.1.0"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    The document store is created here and opened by the lifespan, so each
    application owns its store for its whole life.

    Args:
        settings: Settings to use; the process-wide settings by default

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    if settings.is_production and settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
        raise ConfigurationError("JWT_SECRET_KEY must be set in production", config_key="JWT_SECRET_KEY")

    logger = configure_logger(
        level=settings.LOG_LEVEL,
        use_json=settings.LOG_JSON,
        log_file=settings.LOG_FILE
    )

    set_jwt_config(JWTConfig(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expires=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        token_issuer=settings.TOKEN_ISSUER
    ))

    store = create_store(
        settings.STORE_URL,
        echo=settings.SQL_ECHO,
        pool_timeout=settings.DB_POOL_TIMEOUT
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store and seed the superadmin on startup; close the store on shutdown."""
        logger.info("Application startup sequence initiated.")
        await store.open()

        if settings.SEED_DEFAULT_ADMIN:
            await app.state.user_service.ensure_default_admin(
                settings.DEFAULT_ADMIN_NAME,
                settings.DEFAULT_ADMIN_EMAIL,
                settings.DEFAULT_ADMIN_PASSWORD
            )

        logger.info("Application startup sequence complete.")
        yield

        logger.info("Application shutdown sequence initiated.")
        await store.close()
        logger.info("Application shutdown sequence complete.")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Training quizzes, submissions and evaluations",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.store = store
    app.state.user_service = UserService(store)
    app.state.question_set_service = QuestionSetService(store)
    app.state.attempt_service = AttemptService(
        store,
        max_score_per_question=settings.MAX_SCORE_PER_QUESTION
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(build_router())
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "OK", "environment": settings.ENV}

    logger.info(f"Application created with {len(app.routes)} routes (environment: {settings.ENV})")
    return app
