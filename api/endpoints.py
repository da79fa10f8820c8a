"""
API endpoints for the document Q&A retrieval core.

Authentication and document/question CRUD are handled by the surrounding
portal; these routes only expose retrieval, the FAQ cache and answer drafting.
"""
import logging

from fastapi import APIRouter, HTTPException, Depends

from config import settings
from core.domain import DocumentExpiredError, DocumentNotFoundError, VectorStoreError
from services.factory import get_rag_service
from services.rag_service import RAGService
from api.schemas import (
    ChunkResult,
    DraftResponse,
    InstantQueryRequest,
    InstantQueryResponse,
    SearchRequest,
    SearchResponse,
    StatusResponse,
)

logger = logging.getLogger(settings.LOGGER_NAME)

router = APIRouter()


# ---------- Status ----------
@router.get("/status", response_model=StatusResponse)
async def get_status(
    rag_service: RAGService = Depends(get_rag_service),
) -> StatusResponse:
    status = await rag_service.get_status()
    return StatusResponse(**status)


# ---------- Search ----------
@router.post("/search", response_model=SearchResponse)
async def search_endpoint(
    request: SearchRequest,
    rag_service: RAGService = Depends(get_rag_service),
) -> SearchResponse:
    if not 1 <= len(request.question.strip()) <= 2000:
        raise HTTPException(
            status_code=422,
            detail="Search query must be between 1 and 2000 characters",
        )

    try:
        results = await rag_service.search(request.question, top_k=request.top_k)
    except VectorStoreError as e:
        logger.error(f"Search failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    status = await rag_service.get_status()
    return SearchResponse(
        status="success",
        query=request.question,
        results=[
            ChunkResult(
                id=r.chunk.id,
                text=r.chunk.text,
                metadata=r.chunk.metadata,
                similarity=r.similarity if r.is_valid else None,
            )
            for r in results
        ],
        total_results=len(results),
        degraded_embeddings=status["degraded_embeddings"],
    )


# ---------- Instant query (FAQ cache → generation) ----------
@router.post("/questions/instant-query", response_model=InstantQueryResponse)
async def instant_query(
    request: InstantQueryRequest,
    rag_service: RAGService = Depends(get_rag_service),
) -> InstantQueryResponse:
    if not request.question.strip() or not request.document_id.strip():
        raise HTTPException(status_code=400, detail="질문과 공문을 선택해주세요.")

    try:
        result = await rag_service.instant_query(request.question, request.document_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="공문을 찾을 수 없습니다.")
    except DocumentExpiredError:
        raise HTTPException(status_code=400, detail="해당 공문의 질의응답 기간이 종료되었습니다.")

    return InstantQueryResponse(
        answer=result.answer,
        source=result.source,
        document_title=result.document_title,
        document_number=result.document_number,
        faq_question=result.faq_question,
    )


# ---------- Draft answer ----------
@router.post("/questions/{question_id}/draft", response_model=DraftResponse)
async def draft_answer(
    question_id: str,
    rag_service: RAGService = Depends(get_rag_service),
) -> DraftResponse:
    draft = await rag_service.draft_answer_for(question_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="질문을 찾을 수 없습니다.")

    return DraftResponse(
        question_id=draft.question_id,
        draft=draft.draft,
        provider=draft.provider,
        context_chunks=draft.context_chunks,
    )
