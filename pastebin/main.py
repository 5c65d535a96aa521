"""
Pastebin Lite - Main FastAPI application.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from pastebin.clock import Clock, fixed_clock_provider, header_clock_provider, system_clock_provider
from pastebin.config import Settings, get_settings
from pastebin.database import PasteStore, build_store
from pastebin.errors import register_exception_handlers
from pastebin.routes import health, pastes
from pastebin.templating import STATIC_DIR, templates

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PasteStore] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; read from the environment when omitted
        store: Paste store to use; built from settings when omitted
        clock: Fixed "now" provider for every request; when omitted the
            system clock is used, or the x-test-now-ms header in TEST_MODE
    """
    settings = settings or get_settings()
    configure_logging(settings)

    # Create FastAPI app
    app = FastAPI(
        title="Pastebin Lite",
        description="A lightweight Pastebin-like application for sharing text",
        version="1.0.0",
    )

    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)
    if clock is not None:
        app.state.clock_provider = fixed_clock_provider(clock)
    elif settings.TEST_MODE:
        logger.warning("TEST_MODE is on: honoring x-test-now-ms request headers")
        app.state.clock_provider = header_clock_provider
    else:
        app.state.clock_provider = system_clock_provider

    # Add CORS middleware (optional, for cross-origin requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Mount static files
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Include route modules
    app.include_router(health.router)
    app.include_router(pastes.router)

    @app.on_event("startup")
    async def startup_event():
        """Startup event handler."""
        logger.info("Pastebin Lite application starting...")
        logger.info(f"DATABASE: using {type(app.state.store).__name__}")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Shutdown event handler."""
        logger.info("Pastebin Lite application shutting down...")
        app.state.store.close()

    @app.get("/", include_in_schema=False)
    def root(request: Request):
        """Serve the create paste HTML page."""
        return templates.TemplateResponse(request, "create.html", {})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pastebin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
