# main.py
"""Main application: builds the document index on startup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from config import settings
from core.interfaces import IDocumentIndex
from services.logger_config import setup_logging
from services.factory import build_document_index
from api.endpoints import router

setup_logging()
logger = logging.getLogger(settings.LOGGER_NAME)


def create_app(document_index: Optional[IDocumentIndex] = None) -> FastAPI:
    """Create the app. Pass a document_index to skip building one from settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        logger.info("Starting application...")

        if getattr(app.state, "document_index", None) is None:
            app.state.document_index = build_document_index()
        logger.info("Document index initialized")

        yield

        # Corpus lives for the process only
        logger.info("Shutting down, discarding in-memory corpus...")
        await app.state.document_index.reset()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        lifespan=lifespan
    )
    app.state.document_index = document_index
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
