import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.errors import NotConfiguredError
from app.config import Settings, get_settings
from app.infrastructure.storage import BlobStore, build_blob_store
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the blob store once at start-up unless one was injected."""

    settings: Settings = app.state.settings
    logging.basicConfig(level=settings.log_level.upper())

    if app.state.blob_store is None:
        try:
            app.state.blob_store = build_blob_store(settings)
        except NotConfiguredError as exc:
            logger.error("Blob storage unavailable: %s", exc.details)
        else:
            logger.info(
                "Blob storage ready (container %s)",
                settings.azure_storage_container_name,
            )
    yield


def create_app(
    settings: Settings | None = None,
    blob_store: BlobStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    app = FastAPI(title="File Calendar Storage", lifespan=lifespan)
    app.state.settings = settings
    app.state.blob_store = blob_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
