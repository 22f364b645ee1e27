import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gridguard import __version__
from gridguard.config import Settings, settings as default_settings
from gridguard.core.errors import register_error_handlers
from gridguard.core.security import resolve_api_key
from gridguard.core.websocket import ConnectionManager, router as ws_router
from gridguard.services.log_store import LogStore
from gridguard.services.protection_engine import ProtectionEngine
from gridguard.services.protection_store import ProtectionStore
from gridguard.api.telemetry import router as telemetry_router
from gridguard.api.protect import router as protect_router
from gridguard.api.logs import router as logs_router

logger = logging.getLogger("gridguard.main")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an app with its own stores and engine (one per call)."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "GridGuard starting... DEBUG=%s data_dir=%s zones=%d logs=%d",
            settings.DEBUG, settings.DATA_DIR,
            len(app.state.protection_store.get_all()), len(app.state.log_store),
        )
        yield
        logger.info("GridGuard shutting down")

    app = FastAPI(
        title="GridGuard API",
        version=__version__,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # State is built eagerly so TestClient works without entering lifespan
    protection_store = ProtectionStore(settings.data_path(settings.PROTECT_STATE_FILE))
    log_store = LogStore(
        settings.data_path(settings.LOG_FILE),
        retention_days=settings.LOG_RETENTION_DAYS,
    )
    app.state.settings = settings
    app.state.protection_store = protection_store
    app.state.log_store = log_store
    app.state.engine = ProtectionEngine(protection_store, log_store)
    app.state.ws_manager = ConnectionManager()
    app.state.api_key = resolve_api_key(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(telemetry_router)
    app.include_router(protect_router)
    app.include_router(logs_router)
    app.include_router(ws_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


def run() -> None:
    """Serve with uvicorn; the app is built by the factory at startup, not at import."""
    configure_logging(default_settings)
    uvicorn.run(
        "gridguard.main:create_app",
        factory=True,
        host=default_settings.HOST,
        port=default_settings.PORT,
    )


if __name__ == "__main__":
    run()
