# core/domain.py
"""Shared enumerations, errors and domain models used across the application."""
import math
from enum import Enum

from dataclasses import dataclass, field
from datetime import date
from typing import List, Dict, Any, Optional

# ============= Enums =============

class ErrorCode(str, Enum):
    """Error codes for user-facing error messages."""
    CORRUPT_STORE = "CORRUPT_STORE"
    STORE_IO_FAILED = "STORE_IO_FAILED"
    DIMENSION_MISMATCH = "DIMENSION_MISMATCH"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    DOCUMENT_EXPIRED = "DOCUMENT_EXPIRED"
    GENERATION_FAILED = "GENERATION_FAILED"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"


class ChunkFormat(str, Enum):
    """How raw document text is split into chunks."""
    STRUCTURED = "structured"  # heading-delimited (markdown)
    PLAIN = "plain"            # blank-line paragraphs


class FileType(str, Enum):
    """Originating file format recorded in chunk metadata."""
    MARKDOWN = "markdown"
    TEXT = "text"

    @property
    def chunk_format(self) -> ChunkFormat:
        return ChunkFormat.STRUCTURED if self is FileType.MARKDOWN else ChunkFormat.PLAIN

    @staticmethod
    def from_extension(extension: str) -> 'FileType':
        """Map a file extension ("md", ".txt") to a FileType."""
        from config import settings  # Lazy import

        ext = extension.lower().lstrip(".")
        if ext in settings.STRUCTURED_EXTENSIONS:
            return FileType.MARKDOWN
        if ext in settings.PLAIN_EXTENSIONS:
            return FileType.TEXT
        raise UnsupportedFormatError(extension)


class FaqStatus(str, Enum):
    """Review state of an FAQ entry, stored with its Korean label."""
    PENDING = "대기"
    APPROVED = "승인"
    REJECTED = "반려"

    @staticmethod
    def from_string(status: str) -> 'FaqStatus':
        """Accept either the stored label or the English name."""
        try:
            return FaqStatus(status)
        except ValueError:
            try:
                return FaqStatus[status.strip().upper()]
            except KeyError:
                return FaqStatus.PENDING


class QuestionStatus(str, Enum):
    PENDING = "pending"
    AI_DRAFT = "ai_draft"
    ANSWERED = "answered"
    CLOSED = "closed"

    @staticmethod
    def from_string(status: str) -> 'QuestionStatus':
        try:
            return QuestionStatus(status)
        except ValueError:
            return QuestionStatus.PENDING


class AnswerSource(str, Enum):
    """Where an instant answer came from."""
    CACHE = "cache"
    AI = "ai"


# ============= Errors =============

class RetrievalError(Exception):
    """Raised when a retrieval-core operation fails with a specific error code"""

    def __init__(self, message: str, error_code: ErrorCode):
        self.message = message
        self.error_code = error_code
        super().__init__(message)

    def __str__(self):
        return f"[{self.error_code.value}] {self.message}"


class VectorStoreError(RetrievalError):
    """Durable store could not be read, written, or extended."""


class DocumentNotFoundError(RetrievalError):
    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}", ErrorCode.DOCUMENT_NOT_FOUND)
        self.document_id = document_id


class DocumentExpiredError(RetrievalError):
    def __init__(self, document_id: str, valid_until: str):
        super().__init__(
            f"Q&A period for document {document_id} ended on {valid_until}",
            ErrorCode.DOCUMENT_EXPIRED,
        )
        self.document_id = document_id
        self.valid_until = valid_until


class UnsupportedFormatError(RetrievalError):
    def __init__(self, extension: str):
        super().__init__(f"Unsupported file type: {extension}", ErrorCode.UNSUPPORTED_FORMAT)


# ============= Domain Models =============

@dataclass
class TextChunk:
    """Chunker output before embedding"""
    text: str
    section: str


@dataclass
class Chunk:
    """Unit of retrievable knowledge persisted in the vector store"""
    id: str
    text: str
    metadata: Dict[str, Any]
    embedding: List[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "metadata": self.metadata,
            "embedding": self.embedding,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Chunk':
        """Build a chunk from its persisted form. Raises KeyError/TypeError on malformed input."""
        return Chunk(
            id=str(data["id"]),
            text=str(data["text"]),
            metadata=dict(data["metadata"]),
            embedding=[float(v) for v in data["embedding"]],
        )


@dataclass
class ChunkSearchResult:
    """A stored chunk annotated with its similarity to a query (never persisted)"""
    chunk: Chunk
    similarity: float

    @property
    def is_valid(self) -> bool:
        """False when a zero-magnitude vector made the similarity undefined."""
        return not math.isnan(self.similarity)


@dataclass
class FaqEntry:
    question: str
    answer: str
    status: FaqStatus = FaqStatus.PENDING
    id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.status, FaqStatus):
            self.status = FaqStatus.from_string(str(self.status))

    @property
    def is_approved(self) -> bool:
        return self.status == FaqStatus.APPROVED

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'FaqEntry':
        return FaqEntry(
            id=data.get("id"),
            question=data.get("question", ""),
            answer=data.get("answer", ""),
            status=FaqStatus.from_string(data.get("status", FaqStatus.PENDING.value)),
        )


@dataclass
class OfficialDocument:
    """Official notice document, read from the external document store"""
    id: str
    title: str
    document_number: str
    content: str
    faq_items: List[FaqEntry] = field(default_factory=list)
    valid_until: Optional[str] = None

    @property
    def approved_faqs(self) -> List[FaqEntry]:
        return [faq for faq in self.faq_items if faq.is_approved]

    def is_expired(self, today: Optional[date] = None) -> bool:
        """True when ``valid_until`` is set and lies before today."""
        if not self.valid_until:
            return False
        today = today or date.today()
        try:
            expiry = date.fromisoformat(self.valid_until[:10])
        except ValueError:
            return False
        return expiry < today

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'OfficialDocument':
        return OfficialDocument(
            id=str(data["id"]),
            title=data.get("title", ""),
            document_number=data.get("documentNumber", ""),
            content=data.get("content", ""),
            faq_items=[FaqEntry.from_dict(f) for f in data.get("faqItems") or []],
            valid_until=data.get("validUntil"),
        )


@dataclass
class Question:
    """Question posted to the Q&A board"""
    id: str
    title: str
    content: str
    category: str
    status: QuestionStatus = QuestionStatus.PENDING
    related_document_id: Optional[str] = None
    author_org_name: str = ""
    ai_draft_answer: Optional[str] = None
    final_answer: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Question':
        return Question(
            id=str(data["id"]),
            title=data.get("title", ""),
            content=data.get("content", ""),
            category=data.get("category", ""),
            status=QuestionStatus.from_string(data.get("status", "pending")),
            related_document_id=data.get("relatedDocumentId"),
            author_org_name=data.get("authorOrgName", ""),
            ai_draft_answer=data.get("aiDraftAnswer"),
            final_answer=data.get("finalAnswer"),
        )


@dataclass
class GenerationRequest:
    """Prompt pair handed to the generation chain"""
    system_prompt: str
    user_prompt: str
    canned_answer: str
    max_tokens: int = 2048


@dataclass
class GenerationResult:
    text: str
    provider: str


@dataclass
class InstantAnswer:
    answer: str
    source: AnswerSource
    document_title: str
    document_number: str
    faq_question: Optional[str] = None
    provider: Optional[str] = None


@dataclass
class DraftAnswer:
    question_id: str
    draft: str
    provider: str
    context_chunks: List[str] = field(default_factory=list)
