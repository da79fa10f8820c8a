# services/ingestion_service.py
"""Batch ingestion of a documents directory into the vector store"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from core.domain import FileType, UnsupportedFormatError
from core.interfaces import IVectorStore
from infrastructure.document_processors import DocumentChunker
from utils.common import get_file_extension
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


@dataclass
class IngestionReport:
    files_processed: List[str] = field(default_factory=list)
    files_skipped: List[str] = field(default_factory=list)
    files_failed: List[str] = field(default_factory=list)
    chunks_added: int = 0


class IngestionService:
    """
    Chunk → embed → append for every supported file, then one save().

    The store is loaded first (or cleared when rebuilding) so new chunks are
    appended to what is already persisted.
    """

    def __init__(self, vector_store: IVectorStore, chunker: DocumentChunker):
        self.vector_store = vector_store
        self.chunker = chunker

    async def ingest_file(self, path: Path) -> int:
        """Append the chunks of one file. Raises UnsupportedFormatError for other extensions."""
        file_type = FileType.from_extension(get_file_extension(path.name))
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        ingested_at = datetime.now(timezone.utc).isoformat()

        pieces = self.chunker.process(content, path.name, file_type, ingested_at)
        logger.info(f"- Extracted {len(pieces)} chunks from {path.name}")

        for text, metadata in pieces:
            await self.vector_store.add_document(text, metadata)
        return len(pieces)

    async def ingest_directory(self, docs_dir: str, rebuild: bool = False) -> IngestionReport:
        directory = Path(docs_dir)
        if not directory.is_dir():
            raise FileNotFoundError(f"Documents directory not found: {directory}")

        if rebuild:
            await self.vector_store.clear()
        else:
            await self.vector_store.load()

        report = IngestionReport()
        files = sorted(p for p in directory.iterdir() if p.is_file())
        for path in files:
            try:
                logger.info(f"Processing {path.name}...")
                report.chunks_added += await self.ingest_file(path)
                report.files_processed.append(path.name)
            except UnsupportedFormatError:
                logger.debug(f"Skipping unsupported file {path.name}")
                report.files_skipped.append(path.name)
            except (UnicodeDecodeError, OSError) as e:
                logger.error(f"Cannot read {path.name} as UTF-8 text: {e}")
                report.files_failed.append(path.name)

        if not report.files_processed:
            logger.info("No supported documents found; vector store left unchanged.")
            return report

        await self.vector_store.save()
        logger.info(
            f"Ingestion complete: {len(report.files_processed)} files, "
            f"{report.chunks_added} chunks."
        )
        return report
