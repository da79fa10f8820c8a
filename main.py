# main.py
"""FastAPI application for the Q&A retrieval core"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from config import settings
from services.logger_config import setup_logging
from services.factory import create_rag_service, get_embedding_service, get_vector_store
from api.endpoints import router

setup_logging()
logger = logging.getLogger(settings.LOGGER_NAME)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: owns the vector store for the process"""
    logger.info("Starting application...")

    embedding_service = get_embedding_service()
    vector_store = get_vector_store(embedding_service)
    # Raises VectorStoreError on a corrupt store file
    await vector_store.load()
    app.state.rag_service = create_rag_service(vector_store, embedding_service)
    logger.info(f"Services initialized ({await vector_store.count()} chunks)")

    yield

    logger.info("Application shutdown complete")

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
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
