"""
FreshTrack FastAPI Application
Main entry point: store selection, middleware, exception handlers and routers
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import auth, food_items, health, locations, receipts, views
from adapters import VisionClient
from app.config import Settings, StorageBackend, settings
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    app_exception_handler,
    extraction_exception_handler,
    general_exception_handler,
)
from app.exceptions import AppError, ExtractionFailedError
from repositories import InventoryStore, MemoryStore, SqlAlchemyStore
from services.extraction_service import ReceiptExtractionService

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("freshtrack.main")


def build_store(app_settings: Settings) -> InventoryStore:
    if app_settings.storage_backend == StorageBackend.MEMORY:
        return MemoryStore()
    return SqlAlchemyStore(app_settings.database_url, echo=app_settings.db_echo)


def build_extractor(app_settings: Settings) -> ReceiptExtractionService:
    vision = VisionClient(
        api_key=app_settings.openai_api_key,
        model=app_settings.openai_model,
        base_url=app_settings.openai_base_url,
        timeout=app_settings.extraction_timeout_sec,
        max_tokens=app_settings.extraction_max_tokens,
    )
    return ReceiptExtractionService(
        vision,
        strategy=app_settings.extraction_strategy,
        timeout_sec=app_settings.extraction_timeout_sec,
        max_upload_bytes=app_settings.max_upload_bytes,
    )


async def init_store(store: InventoryStore, app_settings: Settings) -> None:
    """Initialize the store, retrying while the database comes up"""
    for attempt in range(1, app_settings.db_init_attempts + 1):
        try:
            # Run blocking init in a thread to avoid blocking the event loop
            await anyio.to_thread.run_sync(store.init)
            _logger.info("Store initialization succeeded")
            return
        except Exception as exc:
            _logger.warning(
                "Store init attempt %d/%d failed: %s",
                attempt,
                app_settings.db_init_attempts,
                exc,
            )
            if attempt < app_settings.db_init_attempts:
                await anyio.sleep(app_settings.db_init_delay_sec)
            else:
                _logger.error("Store initialization failed after %d attempts", attempt)
                raise


def create_app(
    store: Optional[InventoryStore] = None,
    extractor: Optional[ReceiptExtractionService] = None,
    app_settings: Settings = settings,
) -> FastAPI:
    """
    Build the FastAPI application.

    The settings, store and extractor are fixed here and shared by every
    request through ``app.state``; tests pass their own.
    """
    if store is None:
        store = build_store(app_settings)
    if extractor is None:
        extractor = build_extractor(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _logger.info(
            f"Starting {app_settings.app_name} in {app_settings.environment.value} mode "
            f"with {type(store).__name__}"
        )
        await init_store(store, app_settings)
        try:
            yield
        finally:
            _logger.info(f"Shutting down {app_settings.app_name}")
            await extractor.vision.close()
            store.close()

    docs_enabled = not app_settings.is_production()
    app = FastAPI(
        title=app_settings.api_title,
        version=app_settings.app_version,
        description=app_settings.api_description,
        lifespan=lifespan,
        debug=app_settings.debug,
        openapi_url=f"{app_settings.api_prefix}/openapi.json" if docs_enabled else None,
        docs_url=f"{app_settings.api_prefix}/docs" if docs_enabled else None,
        redoc_url=f"{app_settings.api_prefix}/redoc" if docs_enabled else None,
    )
    app.state.settings = app_settings
    app.state.store = store
    app.state.extractor = extractor

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Signed cookie carrying only the session token
    app.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.session_secret,
        session_cookie=app_settings.session_cookie_name,
        max_age=app_settings.session_max_age_sec,
        https_only=app_settings.is_production(),
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    # Register exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ExtractionFailedError, extraction_exception_handler)
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(auth.router, prefix=app_settings.api_prefix)
    app.include_router(receipts.router, prefix=app_settings.api_prefix)
    app.include_router(food_items.router, prefix=app_settings.api_prefix)
    app.include_router(locations.router, prefix=app_settings.api_prefix)
    app.include_router(views.router, prefix=app_settings.api_prefix)
    app.include_router(health.router, prefix=app_settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
