# core/interfaces.py
"""Core interfaces for the retrieval system"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional

from core.domain import (
    Chunk, ChunkSearchResult, GenerationRequest, OfficialDocument, Question
)

# ============= Vector Store Interface =============
class IVectorStore(ABC):
    """
    In-memory chunk collection mirrored to durable storage.

    Persistence is explicit: ``add_document`` never saves, so callers can
    batch many insertions before a single ``save``.
    """

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether load() (or clear()) has initialised the collection"""
        pass

    @abstractmethod
    async def load(self) -> None:
        """Replace the in-memory collection with the durable copy"""
        pass

    @abstractmethod
    async def ensure_loaded(self) -> None:
        """Load once; later calls are no-ops"""
        pass

    @abstractmethod
    async def save(self) -> None:
        """Overwrite the durable copy with the in-memory collection"""
        pass

    @abstractmethod
    async def add_document(self, text: str, metadata: Dict[str, Any]) -> Chunk:
        """Embed text and append a new chunk"""
        pass

    @abstractmethod
    async def search(self, query: str, top_k: int = 3) -> List[ChunkSearchResult]:
        """Return the top_k most similar chunks, best first"""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Get total number of chunks"""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Empty the in-memory collection (persisted on next save)"""
        pass

# ============= Embedding Service Interface =============
class IEmbeddingService(ABC):
    """Interface for embedding generation"""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of every vector this service produces"""
        pass

    @property
    @abstractmethod
    def is_degraded(self) -> bool:
        """True when vectors come from the non-semantic fallback"""
        pass

    @abstractmethod
    async def generate_embedding(self, text: str) -> List[float]:
        """Generate embedding for a single text. Never raises."""
        pass

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for several texts, in order"""
        return [await self.generate_embedding(text) for text in texts]

# ============= Generation Interface =============
class IAnswerGenerator(ABC):
    """One generation backend in the priority chain"""

    name: str = "generator"

    @abstractmethod
    def is_available(self) -> bool:
        """Whether credentials/configuration allow this backend to run"""
        pass

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """Return generated text; raise on any provider failure"""
        pass

# ============= Repository Interfaces =============
class IDocumentRepository(ABC):
    """
    Read-only access to official documents and their FAQ items.

    Status changes (FAQ approval etc.) happen elsewhere; this core never writes.
    """

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Optional[OfficialDocument]:
        """Get document by ID"""
        pass

    @abstractmethod
    async def list_all(self) -> List[OfficialDocument]:
        """List all documents"""
        pass


class IQuestionRepository(ABC):
    """Read-only access to posted questions"""

    @abstractmethod
    async def get_by_id(self, question_id: str) -> Optional[Question]:
        """Get question by ID"""
        pass

    @abstractmethod
    async def list_all(self) -> List[Question]:
        """List all questions"""
        pass
