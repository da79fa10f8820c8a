# api/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any

from core.domain import AnswerSource


class SearchRequest(BaseModel):
    question: str
    top_k: int = Field(default=3, ge=1, le=50)

class ChunkResult(BaseModel):
    id: str
    text: str
    metadata: Dict[str, Any]
    similarity: Optional[float] = None  # None when undefined (zero vector)

class SearchResponse(BaseModel):
    status: str
    query: str
    results: List[ChunkResult]
    total_results: int
    degraded_embeddings: bool = False

class InstantQueryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    document_id: str = Field(alias="documentId")

class InstantQueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answer: str
    source: AnswerSource
    document_title: str = Field(alias="documentTitle")
    document_number: str = Field(alias="documentNumber")
    faq_question: Optional[str] = Field(default=None, alias="faqQuestion")

class DraftResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId")
    draft: str
    provider: str
    context_chunks: List[str] = Field(default_factory=list, alias="contextChunks")

class StatusResponse(BaseModel):
    store_loaded: bool = False
    chunks_available: int = 0
    ready_for_queries: bool = False
    degraded_embeddings: bool = False
    generation_providers: List[str] = Field(default_factory=list)
