# ingest_docs.py
"""Ingest a directory of .md/.txt documents into the vector store, or run a test query."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from config import settings
from core.domain import VectorStoreError
from services.factory import create_ingestion_service, get_embedding_service, get_vector_store
from services.logger_config import setup_logging

logger = logging.getLogger(settings.LOGGER_NAME)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build or query the document vector store.")
    parser.add_argument("--docs-dir", type=str, default=settings.DOCUMENTS_DIR,
                        help="Directory containing .md / .txt source documents")
    parser.add_argument("--store-path", type=str, default=settings.VECTOR_STORE_PATH,
                        help="Path of the JSON vector store file")
    parser.add_argument("--rebuild", action="store_true",
                        help="Discard existing chunks and rebuild from the documents directory")
    parser.add_argument("--query", type=str, default=None,
                        help="Skip ingestion and print the top matches for this query")
    parser.add_argument("--top-k", type=int, default=settings.DEFAULT_TOP_K)
    return parser.parse_args(argv)


async def run_query(store_path: str, query: str, top_k: int) -> int:
    embedding_service = get_embedding_service()
    store = get_vector_store(embedding_service, store_path)
    await store.load()

    print(f'Query: "{query}"')
    results = await store.search(query, top_k)
    print(f"\nFound {len(results)} results:")
    for i, r in enumerate(results, start=1):
        score = f"{r.similarity:.4f}" if r.is_valid else "n/a"
        print(f"\n[{i}] Similarity: {score}")
        print(f"Source: {r.chunk.metadata.get('source')}")
        print(f"Text Preview: {r.chunk.text[:100]}...")
    if embedding_service.is_degraded:
        print("\nWARNING: mock embeddings in use; similarity scores are not meaningful.")
    return 0


async def run_ingestion(docs_dir: str, store_path: str, rebuild: bool) -> int:
    embedding_service = get_embedding_service()
    store = get_vector_store(embedding_service, store_path)
    service = create_ingestion_service(store)

    logger.info("Starting document ingestion...")
    report = await service.ingest_directory(docs_dir, rebuild=rebuild)
    print(
        f"Processed {len(report.files_processed)} files, added {report.chunks_added} chunks "
        f"(skipped {len(report.files_skipped)}, failed {len(report.files_failed)})."
    )
    for name in report.files_failed:
        print(f"  could not read {name} (not UTF-8 or unreadable)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()

    try:
        if args.query:
            return asyncio.run(run_query(args.store_path, args.query, args.top_k))
        return asyncio.run(run_ingestion(args.docs_dir, args.store_path, args.rebuild))
    except (VectorStoreError, OSError) as e:
        logger.error(f"Ingestion failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
