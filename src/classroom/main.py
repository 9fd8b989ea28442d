"""
Application factory.

    uvicorn classroom.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from classroom.api.v1.error_handlers import register_exception_handlers
from classroom.api.v1.sections import router as sections_router
from classroom.config.settings import Settings, get_settings
from classroom.core.logging import RequestIDMiddleware, setup_logging
from classroom.database.session import create_all, dispose_engine
from classroom.core.logging.formatters import get_project_version

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app.startup", extra={"env": settings.ENV, "api_prefix": settings.API_PREFIX})
        if settings.CREATE_TABLES_ON_STARTUP:
            await create_all()
            logger.info("app.tables_created")
        yield
        await dispose_engine()
        logger.info("app.shutdown")

    app = FastAPI(title=settings.APP_NAME, version=get_project_version(), lifespan=lifespan)

    app.add_middleware(RequestIDMiddleware)
    app.include_router(sections_router, prefix=settings.API_PREFIX)
    register_exception_handlers(app)

    return app


app = create_app()
