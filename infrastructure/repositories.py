# infrastructure/repositories.py
"""Read-only JSON repositories for documents and questions"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from core.interfaces import IDocumentRepository, IQuestionRepository
from core.domain import OfficialDocument, Question
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

T = TypeVar("T")


class _JsonCollection(Generic[T]):
    """
    A JSON array of camelCase records, read on each access.

    A missing file is an empty collection. Malformed content propagates as
    ValueError so the caller decides how to report it.
    """

    def __init__(self, path: str, factory: Callable[[Dict[str, Any]], T]):
        self._path = Path(path)
        self._factory = factory

    def _read(self) -> List[T]:
        if not self._path.exists():
            logger.debug(f"Repository file {self._path} not found; treating as empty")
            return []
        with open(self._path, "r", encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"{self._path} must contain a JSON array")
        return [self._factory(record) for record in records]

    async def all(self) -> List[T]:
        return await asyncio.to_thread(self._read)


class JsonDocumentRepository(IDocumentRepository):
    def __init__(self, path: str = settings.DOCUMENT_REPOSITORY_PATH):
        self._collection = _JsonCollection(path, OfficialDocument.from_dict)

    async def get_by_id(self, document_id: str) -> Optional[OfficialDocument]:
        for document in await self._collection.all():
            if document.id == document_id:
                return document
        return None

    async def list_all(self) -> List[OfficialDocument]:
        return await self._collection.all()


class JsonQuestionRepository(IQuestionRepository):
    def __init__(self, path: str = settings.QUESTION_REPOSITORY_PATH):
        self._collection = _JsonCollection(path, Question.from_dict)

    async def get_by_id(self, question_id: str) -> Optional[Question]:
        for question in await self._collection.all():
            if question.id == question_id:
                return question
        return None

    async def list_all(self) -> List[Question]:
        return await self._collection.all()
