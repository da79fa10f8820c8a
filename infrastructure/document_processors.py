# infrastructure/document_processors.py
"""Document chunking: heading-delimited (markdown) and paragraph (plain text) strategies

Both strategies trim every candidate and drop anything shorter than the
minimum length (bare headings, stray whitespace). Chunking is a pure function
of its inputs: it never looks at the vector store.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Tuple

from core.domain import ChunkFormat, FileType, TextChunk
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

# -----------------------------
# Configuration
# -----------------------------
# Split *before* every line starting with 1-3 '#' followed by whitespace
HEADING_SPLIT_PATTERN = re.compile(r"(?=^#{1,3}\s)", re.MULTILINE)
# First heading line inside a chunk; group 1 is the title
HEADING_TITLE_PATTERN = re.compile(r"^#{1,3}\s+(.+)$", re.MULTILINE)
PARAGRAPH_SPLIT_PATTERN = re.compile(r"\n{2,}")

DEFAULT_MIN_CHUNK_CHARS = settings.MIN_CHUNK_CHARS
DEFAULT_SECTION = settings.DEFAULT_SECTION


def _normalize_newlines(text: str) -> str:
    return (text or "").replace("\r\n", "\n").replace("\r", "\n")


def infer_section(chunk_text: str, default_section: str = DEFAULT_SECTION) -> str:
    """Title of the first heading line in the chunk, or the default label."""
    match = HEADING_TITLE_PATTERN.search(chunk_text)
    return match.group(1).strip() if match else default_section


def split_structured(text: str) -> List[str]:
    """Heading-delimited sections, including any preamble before the first heading."""
    return [part.strip() for part in HEADING_SPLIT_PATTERN.split(_normalize_newlines(text))]


def split_plain(text: str) -> List[str]:
    """Blank-line delimited paragraphs."""
    return [part.strip() for part in PARAGRAPH_SPLIT_PATTERN.split(_normalize_newlines(text))]


def chunk_text(
    raw_text: str,
    chunk_format: ChunkFormat,
    min_chars: int = DEFAULT_MIN_CHUNK_CHARS,
    default_section: str = DEFAULT_SECTION,
) -> List[TextChunk]:
    """
    Split raw text into ordered chunks for the given format.

    Structured chunks get the first heading they contain as section title;
    plain chunks always get ``default_section``.
    """
    if chunk_format == ChunkFormat.STRUCTURED:
        candidates = split_structured(raw_text)
    else:
        candidates = split_plain(raw_text)

    chunks: List[TextChunk] = []
    for candidate in candidates:
        if len(candidate) < min_chars:
            continue
        section = (
            infer_section(candidate, default_section)
            if chunk_format == ChunkFormat.STRUCTURED
            else default_section
        )
        chunks.append(TextChunk(text=candidate, section=section))
    return chunks


class DocumentChunker:
    """Chunks one source file and attaches provenance metadata."""

    def __init__(
        self,
        min_chars: int = DEFAULT_MIN_CHUNK_CHARS,
        default_section: str = DEFAULT_SECTION,
    ) -> None:
        self.min_chars = min_chars
        self.default_section = default_section

    def chunk(self, raw_text: str, chunk_format: ChunkFormat) -> List[TextChunk]:
        return chunk_text(raw_text, chunk_format, self.min_chars, self.default_section)

    def process(
        self,
        raw_text: str,
        source: str,
        file_type: FileType,
        ingested_at: Optional[str] = None,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Chunk a document and pair each chunk with its metadata.

        Every chunk of one document shares the same ``ingestedAt`` timestamp.
        """
        ingested_at = ingested_at or datetime.now(timezone.utc).isoformat()
        chunks = self.chunk(raw_text, file_type.chunk_format)
        logger.debug(f"Extracted {len(chunks)} chunks from {source}")
        return [
            (
                chunk.text,
                {
                    "source": source,
                    "section": chunk.section,
                    "fileType": file_type.value,
                    "ingestedAt": ingested_at,
                },
            )
            for chunk in chunks
        ]
