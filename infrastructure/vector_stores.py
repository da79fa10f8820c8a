# infrastructure/vector_stores.py
import asyncio
import json
import logging
import math
import os
import uuid
from pathlib import Path
from typing import List, Dict, Any, Optional

import numpy as np

from core.domain import Chunk, ChunkSearchResult, ErrorCode, VectorStoreError
from core.interfaces import IEmbeddingService, IVectorStore
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


def cosine_similarity(vec_a: List[float], vec_b: List[float]) -> float:
    """
    dot(a, b) / (|a| * |b|), clipped to [-1, 1].

    Returns NaN when either vector has zero magnitude or the lengths differ.
    """
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.shape != b.shape or a.size == 0:
        return math.nan

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return math.nan

    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def _similarity_sort_key(result: ChunkSearchResult):
    # NaN scores go last; valid scores descending
    if math.isnan(result.similarity):
        return (1, 0.0)
    return (0, -result.similarity)


class JsonVectorStore(IVectorStore):
    """
    Exhaustive-scan vector store persisted as one JSON document.

    - The durable file is a JSON array of {id, text, metadata, embedding}
    - load() treats a missing file as an empty store but raises on a corrupt one
    - save() writes a temp file then replaces the target, so a snapshot is never partial
    - A single asyncio.Lock serialises mutations within the process
    """

    def __init__(
        self,
        embedding_service: IEmbeddingService,
        store_path: str = settings.VECTOR_STORE_PATH,
    ):
        self._embedding_service = embedding_service
        self._store_path = Path(store_path)
        self._chunks: List[Chunk] = []
        self._dimension: Optional[int] = None
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def store_path(self) -> Path:
        return self._store_path

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def chunks(self) -> List[Chunk]:
        """Snapshot of the in-memory collection, in insertion order"""
        return list(self._chunks)

    # ---------- Persistence ----------

    def _read_file(self) -> Optional[str]:
        try:
            return self._store_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _parse(self, raw: str) -> List[Chunk]:
        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise TypeError(f"expected a JSON array, got {type(records).__name__}")
            chunks = [Chunk.from_dict(record) for record in records]
        except (ValueError, KeyError, TypeError) as e:
            raise VectorStoreError(
                f"Vector store at {self._store_path} is corrupt: {e}",
                ErrorCode.CORRUPT_STORE,
            ) from e

        dimensions = {len(c.embedding) for c in chunks}
        if len(dimensions) > 1:
            raise VectorStoreError(
                f"Vector store at {self._store_path} mixes embedding sizes {sorted(dimensions)}",
                ErrorCode.CORRUPT_STORE,
            )
        return chunks

    def _write_file(self, payload: str) -> None:
        self._store_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._store_path.with_name(self._store_path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self._store_path)

    async def load(self) -> None:
        async with self._lock:
            try:
                raw = await asyncio.to_thread(self._read_file)
            except OSError as e:
                raise VectorStoreError(
                    f"Failed to read vector store {self._store_path}: {e}",
                    ErrorCode.STORE_IO_FAILED,
                ) from e

            if raw is None:
                logger.info(f"No existing vector store found at {self._store_path}. Starting fresh.")
                chunks: List[Chunk] = []
            else:
                chunks = self._parse(raw)
                logger.info(f"Loaded {len(chunks)} chunks from vector store.")

            self._chunks = chunks
            self._dimension = len(chunks[0].embedding) if chunks else None
            self._loaded = True

    async def ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    async def save(self) -> None:
        async with self._lock:
            payload = json.dumps(
                [chunk.to_dict() for chunk in self._chunks],
                indent=2,
                ensure_ascii=False,
            )
            try:
                await asyncio.to_thread(self._write_file, payload)
            except OSError as e:
                logger.error(f"Failed to save vector store: {e}")
                raise VectorStoreError(
                    f"Failed to write vector store {self._store_path}: {e}",
                    ErrorCode.STORE_IO_FAILED,
                ) from e
            logger.info(f"Saved {len(self._chunks)} chunks to vector store.")

    # ---------- Mutation ----------

    async def add_document(self, text: str, metadata: Dict[str, Any]) -> Chunk:
        """
        Embed and append one chunk. Does not persist; call save() afterwards.

        Duplicate texts are stored again under a fresh id.
        """
        embedding = await self._embedding_service.generate_embedding(text)

        async with self._lock:
            if self._dimension is not None and len(embedding) != self._dimension:
                raise VectorStoreError(
                    f"Embedding has {len(embedding)} dimensions, store holds {self._dimension}",
                    ErrorCode.DIMENSION_MISMATCH,
                )

            chunk = Chunk(
                id=str(uuid.uuid4()),
                text=text,
                metadata=dict(metadata),
                embedding=list(embedding),
            )
            self._chunks.append(chunk)
            self._dimension = len(embedding)
            return chunk

    async def clear(self) -> None:
        async with self._lock:
            self._chunks = []
            self._dimension = None
            self._loaded = True

    # ---------- Query ----------

    async def search(self, query: str, top_k: int = 3) -> List[ChunkSearchResult]:
        """
        Rank every stored chunk by cosine similarity to the query.

        Results are sorted descending (stable, so ties keep insertion order);
        chunks with an undefined (NaN) score come last.
        """
        if not self._chunks or top_k <= 0:
            logger.debug("Search called on an empty store.")
            return []

        query_embedding = await self._embedding_service.generate_embedding(query)

        snapshot = list(self._chunks)
        results = [
            ChunkSearchResult(chunk=chunk, similarity=cosine_similarity(query_embedding, chunk.embedding))
            for chunk in snapshot
        ]
        results.sort(key=_similarity_sort_key)

        logger.debug(f"Search over {len(snapshot)} chunks returned top {min(top_k, len(results))}")
        return results[:top_k]

    async def count(self) -> int:
        return len(self._chunks)
