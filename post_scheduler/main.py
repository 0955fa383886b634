from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from .config import settings
from .domain.exceptions import SchedulingError
from .infrastructure.logging import configure_logging
from .presentation.api.dependencies import get_database
from .presentation.api.errors import scheduling_error_handler
from .presentation.api.v1 import health, scheduled_posts, webhooks
from .presentation.middleware import CorrelationIdMiddleware

configure_logging(settings.service_name, debug=settings.debug)

logger = structlog.get_logger()

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = get_database()
    log = logger.bind(db_host=settings.db_host, db_name=settings.db_name)
    log.info("Starting scheduler", callback_url=settings.callback_url, auth_enabled=settings.auth_enabled)

    # Schema is owned by alembic in deployed environments; this covers local runs
    try:
        await db.create_tables()
    except Exception as e:
        log.error("Schema setup failed", error=str(e), error_type=type(e).__name__, exc_info=True)
        raise

    yield

    await db.close()
    logger.info("Scheduler stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Post Scheduler API",
        description="Schedule social posts and publish them when their delivery fires",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(SchedulingError, scheduling_error_handler)

    app.include_router(health.router)
    app.include_router(scheduled_posts.router, prefix=API_PREFIX)
    app.include_router(webhooks.router, prefix=API_PREFIX)
    return app


app = create_app()
