import json
from unittest.mock import patch

import pytest

import ingest_docs
from core.domain import UnsupportedFormatError
from infrastructure.document_processors import DocumentChunker
from infrastructure.vector_stores import JsonVectorStore
from services.ingestion_service import IngestionService

GUIDE_MD = "# 사업 개요\n" + "노인돌봄서비스 사업의 목적과 추진 방향을 설명합니다. " * 3 + "\n\n## 지원 대상\n" + "만 60세 이상 독거노인을 대상으로 합니다. " * 3
NOTES_TXT = "신청 서류는 읍면동 주민센터에 제출합니다. " * 3 + "\n\n짧은 줄\n\n" + "처리 기간은 통상 7일에서 14일이 소요됩니다. " * 3


@pytest.fixture
def docs_dir(tmp_path):
    directory = tmp_path / "documents"
    directory.mkdir()
    (directory / "guide.md").write_text(GUIDE_MD, encoding="utf-8")
    (directory / "notes.txt").write_text(NOTES_TXT, encoding="utf-8")
    (directory / "scan.pdf").write_bytes(b"%PDF-1.4")
    return directory


@pytest.fixture
def mixed_encoding_dir(tmp_path):
    directory = tmp_path / "legacy"
    directory.mkdir()
    (directory / "a_guide.md").write_text(GUIDE_MD, encoding="utf-8")
    (directory / "b_legacy.txt").write_bytes(NOTES_TXT.encode("cp949"))
    return directory


@pytest.fixture
def ingestion(vector_store):
    return IngestionService(vector_store, DocumentChunker())


class TestIngestionService:
    async def test_ingest_directory(self, ingestion, vector_store, docs_dir, store_path):
        report = await ingestion.ingest_directory(str(docs_dir))

        assert report.files_processed == ["guide.md", "notes.txt"]
        assert report.files_skipped == ["scan.pdf"]
        assert report.chunks_added == 4

        with open(store_path, encoding="utf-8") as f:
            records = json.load(f)
        assert len(records) == 4
        assert [r["metadata"]["section"] for r in records] == ["사업 개요", "지원 대상", "General", "General"]
        assert {r["metadata"]["fileType"] for r in records} == {"markdown", "text"}

    async def test_append_keeps_existing_chunks(self, ingestion, fake_embedder, docs_dir, store_path):
        await ingestion.ingest_directory(str(docs_dir))

        second_run = IngestionService(JsonVectorStore(fake_embedder, store_path), DocumentChunker())
        report = await second_run.ingest_directory(str(docs_dir))

        assert report.chunks_added == 4
        assert await second_run.vector_store.count() == 8

    async def test_rebuild_discards_existing_chunks(self, ingestion, fake_embedder, docs_dir, store_path):
        await ingestion.ingest_directory(str(docs_dir))

        rebuild = IngestionService(JsonVectorStore(fake_embedder, store_path), DocumentChunker())
        await rebuild.ingest_directory(str(docs_dir), rebuild=True)

        assert await rebuild.vector_store.count() == 4

    async def test_undecodable_file_does_not_abort_run(self, ingestion, mixed_encoding_dir, store_path):
        report = await ingestion.ingest_directory(str(mixed_encoding_dir))

        assert report.files_processed == ["a_guide.md"]
        assert report.files_failed == ["b_legacy.txt"]
        assert report.chunks_added == 2

        with open(store_path, encoding="utf-8") as f:
            records = json.load(f)
        assert [r["metadata"]["source"] for r in records] == ["a_guide.md", "a_guide.md"]

    async def test_missing_directory(self, ingestion, tmp_path):
        with pytest.raises(FileNotFoundError):
            await ingestion.ingest_directory(str(tmp_path / "nope"))

    async def test_no_supported_files_leaves_store_untouched(self, ingestion, tmp_path, store_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        (empty / "image.png").write_bytes(b"\x89PNG")

        report = await ingestion.ingest_directory(str(empty))

        assert report.files_skipped == ["image.png"]
        assert not (tmp_path / "data" / "vector-store.json").exists()

    async def test_ingest_single_unsupported_file(self, ingestion, docs_dir):
        with pytest.raises(UnsupportedFormatError):
            await ingestion.ingest_file(docs_dir / "scan.pdf")


class TestIngestCli:
    def test_parse_args(self):
        args = ingest_docs.parse_args(["--docs-dir", "docs", "--rebuild", "--top-k", "5"])
        assert args.docs_dir == "docs"
        assert args.rebuild is True
        assert args.top_k == 5
        assert args.query is None

    def test_ingest_then_query(self, fake_embedder, docs_dir, store_path, capsys):
        with patch("ingest_docs.setup_logging"), \
                patch("ingest_docs.get_embedding_service", return_value=fake_embedder):
            assert ingest_docs.main(["--docs-dir", str(docs_dir), "--store-path", store_path]) == 0
            assert ingest_docs.main(["--store-path", store_path, "--query", "지원 대상", "--top-k", "2"]) == 0

        output = capsys.readouterr().out
        assert "Processed 2 files, added 4 chunks" in output
        assert "Found 2 results" in output
        assert "WARNING: mock embeddings" in output

    def test_corrupt_store_exit_code(self, fake_embedder, docs_dir, tmp_path):
        bad_store = tmp_path / "bad.json"
        bad_store.write_text("not json", encoding="utf-8")

        with patch("ingest_docs.setup_logging"), \
                patch("ingest_docs.get_embedding_service", return_value=fake_embedder):
            code = ingest_docs.main(["--docs-dir", str(docs_dir), "--store-path", str(bad_store)])

        assert code == 1

    def test_missing_docs_dir_exit_code(self, fake_embedder, tmp_path):
        with patch("ingest_docs.setup_logging"), \
                patch("ingest_docs.get_embedding_service", return_value=fake_embedder):
            code = ingest_docs.main(["--docs-dir", str(tmp_path / "missing"),
                                     "--store-path", str(tmp_path / "s.json")])

        assert code == 1

    def test_undecodable_file_reported(self, fake_embedder, mixed_encoding_dir, store_path, capsys):
        with patch("ingest_docs.setup_logging"), \
                patch("ingest_docs.get_embedding_service", return_value=fake_embedder):
            code = ingest_docs.main(["--docs-dir", str(mixed_encoding_dir), "--store-path", store_path])

        output = capsys.readouterr().out
        assert code == 0
        assert "Processed 1 files, added 2 chunks" in output
        assert "failed 1" in output
        assert "could not read b_legacy.txt" in output
