import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from app.core.limits import limiter, rate_limit_handler
from app.core.error_handlers import setup_exception_handlers
from app.core.middleware import setup_middleware
from app.core.store import StudioStore
from app.core.logging_utils import (
    setup_logging,
    log_business_event,
    error_tracker,
)
from app.core.config import (
    validate_config,
    APP_NAME,
    APP_VERSION,
    DEBUG,
    ENVIRONMENT,
    LOG_LEVEL,
    LOG_FORMAT,
    PASS_CATALOG_PATH,
    CORS_ORIGINS,
)
from app.studio.models.passes import PassCatalog
from app.studio.routers import (
    students_router,
    memberships_router,
    imports_router,
    attendance_router,
    analytics_router,
    passes_router,
)

# Настройка системы логирования
setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = logging.getLogger(__name__)


def create_store() -> StudioStore:
    """Хранилище студии с каталогом из конфигурации"""
    catalog = PassCatalog.from_config(PASS_CATALOG_PATH)
    logger.info(f"Pass catalog loaded: {len(catalog)} passes")
    return StudioStore(catalog)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""

    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        validate_config()
        logger.info("Configuration validated")

        # Тесты могут подставить собственное хранилище заранее
        if getattr(app.state, "store", None) is None:
            app.state.store = create_store()

        log_business_event(
            "application_started",
            "system",
            0,
            {"version": APP_VERSION, "environment": ENVIRONMENT},
        )
        logger.info("Application startup completed")

    except Exception as e:
        logger.error(f"Application startup failed: {str(e)}")
        error_tracker.track_error(
            "STARTUP_ERROR",
            str(e),
            {"component": "application_startup", "version": APP_VERSION},
        )
        raise

    yield

    logger.info(f"Shutting down application: {app.state.store!r}")


app = FastAPI(
    title=APP_NAME,
    description="Dance studio operations: students, memberships, attendance",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

setup_middleware(
    app,
    {
        "slow_request_threshold": 2.0,
        "exclude_paths": [
            "/health",
            "/docs",
            "/openapi.json",
            "/redoc",
            "/favicon.ico",
        ],
    },
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.include_router(passes_router, prefix="/api/v1")
app.include_router(students_router, prefix="/api/v1")
app.include_router(memberships_router, prefix="/api/v1")
app.include_router(attendance_router, prefix="/api/v1")
app.include_router(imports_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")


@app.get("/health", tags=["System"])
async def health_check():
    store = getattr(app.state, "store", None)
    return {
        "status": "ok" if store is not None else "starting",
        "version": APP_VERSION,
        "students": len(store.students) if store is not None else 0,
        "errors": error_tracker.get_stats(),
    }
