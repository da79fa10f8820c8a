"""
Shared test fixtures.

Provides: controllable embedding service, in-memory repositories, recording
generators, temp vector-store paths and sample documents.
"""
from typing import Dict, List, Optional

import pytest

from core.domain import (
    FaqEntry, FaqStatus, GenerationRequest, OfficialDocument, Question, QuestionStatus
)
from core.interfaces import (
    IAnswerGenerator, IDocumentRepository, IEmbeddingService, IQuestionRepository
)
from infrastructure.embedding_services import fallback_embedding
from infrastructure.vector_stores import JsonVectorStore


class FakeEmbeddingService(IEmbeddingService):
    """Returns preset vectors by text, the length-based fallback otherwise."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, dimension: int = 1536):
        self.vectors = vectors or {}
        self._dimension = dimension
        self.calls: List[str] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_degraded(self) -> bool:
        return not self.vectors

    async def generate_embedding(self, text: str) -> List[float]:
        self.calls.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        return fallback_embedding(text, self._dimension)


class InMemoryDocumentRepository(IDocumentRepository):
    def __init__(self, documents: List[OfficialDocument]):
        self.documents = {d.id: d for d in documents}

    async def get_by_id(self, document_id: str) -> Optional[OfficialDocument]:
        return self.documents.get(document_id)

    async def list_all(self) -> List[OfficialDocument]:
        return list(self.documents.values())


class InMemoryQuestionRepository(IQuestionRepository):
    def __init__(self, questions: List[Question]):
        self.questions = list(questions)

    async def get_by_id(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    async def list_all(self) -> List[Question]:
        return list(self.questions)


class RecordingGenerator(IAnswerGenerator):
    """Generator that records requests and returns a fixed text (or raises)."""

    def __init__(self, name: str = "recording", text: str = "generated", error: Optional[Exception] = None,
                 available: bool = True):
        self.name = name
        self.text = text
        self.error = error
        self.available = available
        self.requests: List[GenerationRequest] = []

    def is_available(self) -> bool:
        return self.available

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_embedder() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def store_path(tmp_path) -> str:
    return str(tmp_path / "data" / "vector-store.json")


@pytest.fixture
def vector_store(fake_embedder, store_path) -> JsonVectorStore:
    return JsonVectorStore(fake_embedder, store_path)


@pytest.fixture
def sample_document() -> OfficialDocument:
    return OfficialDocument(
        id="doc1",
        title="2026년 노인돌봄서비스 사업안내",
        document_number="경남복지-2026-001",
        content="2026년 노인돌봄서비스 사업안내입니다. 서비스 대상자 확대 - 기존 65세 이상에서 60세 이상으로 확대.",
        faq_items=[
            FaqEntry(id="f1", question="대상자 연령", answer="60세 이상입니다.", status=FaqStatus.APPROVED),
            FaqEntry(id="f2", question="대상자 기준 변경", answer="검토 중인 답변", status=FaqStatus.PENDING),
            FaqEntry(id="f3", question="예산 편성 시기", answer="3월입니다.", status=FaqStatus.APPROVED),
        ],
    )


@pytest.fixture
def sample_questions() -> List[Question]:
    return [
        Question(id="q1", title="대상자 확대 문의", content="60세 이상 확대 기준이 궁금합니다.",
                 category="사업지침", status=QuestionStatus.PENDING, related_document_id="doc1"),
        Question(id="q2", title="기존 답변", content="예전 질문", category="사업지침",
                 status=QuestionStatus.ANSWERED, final_answer="최종 답변"),
        Question(id="q3", title="같은 공문 질문", content="공문 관련", category="행정절차",
                 status=QuestionStatus.CLOSED, related_document_id="doc1", ai_draft_answer="초안"),
        Question(id="q4", title="미해결 질문", content="대기 중", category="사업지침",
                 status=QuestionStatus.PENDING),
        Question(id="q5", title="무관한 질문", content="다른 분야", category="서식작성",
                 status=QuestionStatus.ANSWERED, final_answer="무관"),
    ]


@pytest.fixture
def make_store(tmp_path):
    """Store factory over preset 2-d vectors."""
    def _make(vectors=None, dimension=2, name="store.json"):
        return JsonVectorStore(FakeEmbeddingService(vectors, dimension), str(tmp_path / name))
    return _make


@pytest.fixture
def make_generator():
    return RecordingGenerator


@pytest.fixture
def document_repo(sample_document) -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository([sample_document])


@pytest.fixture
def question_repo(sample_questions) -> InMemoryQuestionRepository:
    return InMemoryQuestionRepository(sample_questions)
