"""ListSync API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ListSyncError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - One ListController per process, built and first loaded in the lifespan;
      its httpx client is closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Initial refresh never raises for fetch failures: the app starts in ERROR
      state and the client can retry
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from listsync.api.error_handlers import register_error_handlers
from listsync.api.routes import health, list_view
from listsync.config import get_settings
from listsync.infrastructure.http_page_fetcher import HttpPageFetcher
from listsync.infrastructure.observability import setup_logging
from listsync.services.list_controller import ListController

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    fetcher = HttpPageFetcher.from_settings(settings)
    app.state.controller = ListController.from_settings(settings, fetcher)
    await app.state.controller.refresh()
    logger.info("ListSync API started")
    yield
    await fetcher.aclose()
    logger.info("ListSync API shutting down")


app = FastAPI(title="ListSync API", version="0.1.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(list_view.router)

register_error_handlers(app)
