import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uploadgate.config import GatewaySettings, get_cors_allow_origins, load_settings
from uploadgate.routers import uploads_router
from uploadgate.services.s3_storage import ObjectStore, S3ObjectStore

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Missing secrets must stop the process before it serves anything.
    if app.state.settings is None:
        app.state.settings = load_settings()
    settings: GatewaySettings = app.state.settings
    setup_logging(settings.log_level)
    if app.state.object_store is None:
        app.state.object_store = S3ObjectStore.from_settings(settings)
    logger.info(
        "Upload gateway ready for bucket %s (max size: %s)",
        settings.expected_bucket,
        settings.max_file_size if settings.max_file_size is not None else "unlimited",
    )
    yield


def create_app(
    settings: GatewaySettings | None = None,
    object_store: ObjectStore | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Upload Gateway API",
        description="Signs browser upload policies and REST requests for S3",
        version="0.1.0",
        lifespan=_lifespan,
    )
    app.state.settings = settings
    app.state.object_store = object_store

    allow_origins = list(settings.cors_allow_origins) if settings else get_cors_allow_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(uploads_router)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "uploadgate"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("uploadgate.main:app", host="0.0.0.0", port=8000, log_config=None)
