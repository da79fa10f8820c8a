# services/rag_service.py
"""Retrieval orchestration: context assembly, FAQ cache gate, and generation hand-off"""
import logging
from typing import Any, Dict, List, Optional

from core.domain import (
    AnswerSource, ChunkSearchResult, DocumentExpiredError, DocumentNotFoundError,
    DraftAnswer, GenerationRequest, InstantAnswer, OfficialDocument, Question, QuestionStatus
)
from core.interfaces import (
    IDocumentRepository, IEmbeddingService, IQuestionRepository, IVectorStore
)
from services.faq_matcher import FaqMatcher
from services.llm_service import GenerationChain
from services import prompts
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

RESOLVED_STATUSES = {QuestionStatus.ANSWERED, QuestionStatus.CLOSED}


class RAGService:
    """
    Assembles generation context without generating anything itself.

    The vector store is passed in already constructed; this service only
    makes sure it is loaded before the first search and never saves it.
    """

    def __init__(
        self,
        vector_store: IVectorStore,
        faq_matcher: FaqMatcher,
        generation_chain: GenerationChain,
        document_repo: IDocumentRepository,
        question_repo: IQuestionRepository,
        embedding_service: Optional[IEmbeddingService] = None,
        top_k: int = settings.DEFAULT_TOP_K,
        similar_qa_limit: int = settings.SIMILAR_QA_LIMIT,
    ):
        self.vector_store = vector_store
        self.faq_matcher = faq_matcher
        self.generation_chain = generation_chain
        self.document_repo = document_repo
        self.question_repo = question_repo
        self.embedding_service = embedding_service
        self.top_k = top_k
        self.similar_qa_limit = similar_qa_limit

    # ---------- Retrieval ----------

    async def search(self, query: str, top_k: Optional[int] = None) -> List[ChunkSearchResult]:
        await self.vector_store.ensure_loaded()
        return await self.vector_store.search(query, self.top_k if top_k is None else top_k)

    async def retrieve_context(self, query: str) -> List[ChunkSearchResult]:
        """Top-k chunks for the query; any failure means no context."""
        try:
            results = await self.search(query, self.top_k)
            logger.info(f"RAG: Found {len(results)} relevant chunks")
            return results
        except Exception as e:
            logger.warning(f"RAG: Failed to search vector store: {e}")
            return []

    async def find_similar_questions(self, question: Question) -> List[Question]:
        """Resolved questions sharing the category or the related document."""
        candidates = await self.question_repo.list_all()
        return [
            q for q in candidates
            if q.id != question.id
            and q.status in RESOLVED_STATUSES
            and (
                q.category == question.category
                or (
                    question.related_document_id is not None
                    and q.related_document_id == question.related_document_id
                )
            )
        ]

    # ---------- Draft answers ----------

    async def draft_answer(self, question: Question) -> DraftAnswer:
        """Draft an answer for a posted question using retrieved context."""
        context = await self.retrieve_context(f"{question.content} {question.title}")
        context_chunks = [r.chunk.text for r in context]

        related_doc: Optional[OfficialDocument] = None
        if question.related_document_id:
            related_doc = await self.document_repo.get_by_id(question.related_document_id)

        similar_qas = await self.find_similar_questions(question)

        request = GenerationRequest(
            system_prompt=prompts.build_draft_system_prompt(
                related_doc, similar_qas, context_chunks, self.similar_qa_limit
            ),
            user_prompt=prompts.build_draft_user_prompt(question),
            canned_answer=prompts.build_canned_draft(question.category, len(context_chunks)),
            max_tokens=settings.DRAFT_MAX_TOKENS,
        )
        result = await self.generation_chain.generate(request)

        return DraftAnswer(
            question_id=question.id,
            draft=result.text,
            provider=result.provider,
            context_chunks=context_chunks,
        )

    async def draft_answer_for(self, question_id: str) -> Optional[DraftAnswer]:
        question = await self.question_repo.get_by_id(question_id)
        if question is None:
            return None
        return await self.draft_answer(question)

    # ---------- Instant answers ----------

    async def instant_query(self, question: str, document_id: str) -> InstantAnswer:
        """
        Answer a question about one document.

        Approved FAQ hit → cached answer, no generation. Miss → generation
        grounded on the document content and its approved FAQs.
        """
        document = await self.document_repo.get_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        if document.is_expired():
            raise DocumentExpiredError(document_id, document.valid_until or "")

        matched = self.faq_matcher.match(question, document.faq_items)
        if matched is not None:
            return InstantAnswer(
                answer=matched.answer,
                source=AnswerSource.CACHE,
                document_title=document.title,
                document_number=document.document_number,
                faq_question=matched.question,
            )

        approved = document.approved_faqs
        request = GenerationRequest(
            system_prompt=prompts.build_instant_system_prompt(document),
            user_prompt=prompts.build_instant_user_prompt(question, approved),
            canned_answer=prompts.build_canned_instant_answer(question, document),
            max_tokens=settings.INSTANT_MAX_TOKENS,
        )
        result = await self.generation_chain.generate(request)

        return InstantAnswer(
            answer=result.text,
            source=AnswerSource.AI,
            document_title=document.title,
            document_number=document.document_number,
            provider=result.provider,
        )

    # ---------- Status ----------

    async def get_status(self) -> Dict[str, Any]:
        chunk_count = await self.vector_store.count()
        degraded = self.embedding_service.is_degraded if self.embedding_service else False
        return {
            "store_loaded": self.vector_store.is_loaded,
            "chunks_available": chunk_count,
            "ready_for_queries": chunk_count > 0,
            "degraded_embeddings": degraded,
            "generation_providers": self.generation_chain.provider_names,
        }
