from contextlib import asynccontextmanager
from pathlib import Path
from typing import Iterable, Optional, Union
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from .routers import links
from .routers.dependencies import initialize_binding, close_binding
from .services.binding import ShutdownHook
from .middleware.rate_limit import limiter, shorten_limit_exceeded
from .middleware.request_logging import RequestLoggingMiddleware
from .core.config import RATE_LIMIT_ENABLED, RATE_LIMIT_PER_MINUTE
from .core.logging_config import get_logger

logger = get_logger(__name__)


def create_app(
    data_file: Optional[Union[str, Path]] = None,
    store_type: Optional[str] = None,
    table_name: Optional[str] = None,
    shutdown_signals: Optional[Iterable[str]] = None
) -> FastAPI:
    """
    Build the shortener application.

    The binding is opened on startup and flushed/closed on shutdown; the
    arguments override DATA_FILE, STORE_TYPE and STORE_TABLE.
    With shutdown_signals, those signals flush the binding synchronously and
    exit the process (see ShutdownHook).
    """
    shutdown_signals = tuple(shutdown_signals or ())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("Starting shortlink backend...")
        logger.info("=" * 60)
        logger.info("Rate Limiting:")
        logger.info(f"  → Enabled: {RATE_LIMIT_ENABLED}")
        if RATE_LIMIT_ENABLED:
            logger.info(f"  → Limit: {RATE_LIMIT_PER_MINUTE} requests/minute on /shorten")

        binding = await initialize_binding(data_file, store_type, table_name)
        app.state.binding = binding
        hook = None
        if shutdown_signals:
            hook = ShutdownHook(binding).install(signals=shutdown_signals)
        logger.info("✅ shortlink backend initialized successfully")
        try:
            yield
        finally:
            logger.info("Shutting down shortlink backend...")
            if hook is not None:
                hook.uninstall()
            await close_binding()
            logger.info("shortlink backend shutdown complete")

    app = FastAPI(
        title="shortlink",
        description="URL shortener over a persistent key-value binding",
        version="1.0.0",
        docs_url="/docs" if os.getenv("ENVIRONMENT") != "production" else None,
        redoc_url=None,
        lifespan=lifespan
    )

    app.state.limiter = limiter
    app.state.shutdown_signals = shutdown_signals
    app.add_exception_handler(RateLimitExceeded, shorten_limit_exceeded)

    app.add_middleware(RequestLoggingMiddleware)
    cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(links.router, tags=["Links"])
    return app
