# services/factory.py
"""Explicit construction of the retrieval components.

Nothing here is a module-level singleton: each entry point (API lifespan,
ingestion CLI) builds its own store and owns when it is loaded and saved.
"""
from typing import Optional

from fastapi import Request

from config import settings
from core.interfaces import (
    IDocumentRepository, IEmbeddingService, IQuestionRepository, IVectorStore
)
from infrastructure.document_processors import DocumentChunker
from infrastructure.embedding_services import OpenAIEmbeddingService
from infrastructure.repositories import JsonDocumentRepository, JsonQuestionRepository
from infrastructure.vector_stores import JsonVectorStore
from services.faq_matcher import FaqMatcher
from services.ingestion_service import IngestionService
from services.llm_service import build_generation_chain
from services.rag_service import RAGService


def get_embedding_service() -> IEmbeddingService:
    """Create embedding service based on configuration."""
    return OpenAIEmbeddingService(api_key=settings.OPENAI_API_KEY)


def get_vector_store(
    embedding_service: IEmbeddingService,
    store_path: Optional[str] = None,
) -> IVectorStore:
    """Create the vector store; the caller decides when to load/save."""
    return JsonVectorStore(embedding_service, store_path or settings.VECTOR_STORE_PATH)


def get_document_repository() -> IDocumentRepository:
    return JsonDocumentRepository(settings.DOCUMENT_REPOSITORY_PATH)


def get_question_repository() -> IQuestionRepository:
    return JsonQuestionRepository(settings.QUESTION_REPOSITORY_PATH)


def create_rag_service(
    vector_store: IVectorStore,
    embedding_service: Optional[IEmbeddingService] = None,
) -> RAGService:
    """Wire the orchestrator around an already constructed store."""
    return RAGService(
        vector_store=vector_store,
        faq_matcher=FaqMatcher(),
        generation_chain=build_generation_chain(),
        document_repo=get_document_repository(),
        question_repo=get_question_repository(),
        embedding_service=embedding_service,
    )


def create_ingestion_service(vector_store: IVectorStore) -> IngestionService:
    return IngestionService(vector_store, DocumentChunker())


# FastAPI dependency: the service is built once in the app lifespan
def get_rag_service(request: Request) -> RAGService:
    return request.app.state.rag_service
