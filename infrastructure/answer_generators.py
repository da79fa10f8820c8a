# infrastructure/answer_generators.py
"""Generation backends: hosted LLM adapters over HTTP plus a canned stub"""
import asyncio
import logging
import requests
from typing import Any, Dict, Optional

from core.domain import GenerationRequest
from core.interfaces import IAnswerGenerator
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


class GeminiGenerator(IAnswerGenerator):
    """Google Gemini via the Generative Language REST API."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = settings.GEMINI_MODEL_NAME,
        base_url: str = settings.GEMINI_API_URL,
        timeout: int = settings.REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _post(self, request: GenerationRequest) -> str:
        response = requests.post(
            f"{self.base_url}/{self.model}:generateContent",
            params={"key": self.api_key},
            json={
                "system_instruction": {"parts": [{"text": request.system_prompt}]},
                "contents": [{"role": "user", "parts": [{"text": request.user_prompt}]}],
                "generationConfig": {"maxOutputTokens": request.max_tokens},
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        result: Dict[str, Any] = response.json()
        parts = result["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts).strip()
        if not text:
            raise ValueError("Empty response from Gemini")
        return text

    async def generate(self, request: GenerationRequest) -> str:
        logger.info(f"Generating with Gemini model '{self.model}'...")
        return await asyncio.to_thread(self._post, request)


class ClaudeGenerator(IAnswerGenerator):
    """Anthropic Claude via the Messages REST API."""

    name = "claude"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = settings.CLAUDE_MODEL_NAME,
        api_url: str = settings.ANTHROPIC_API_URL,
        api_version: str = settings.ANTHROPIC_VERSION,
        timeout: int = settings.REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.api_version = api_version
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _post(self, request: GenerationRequest) -> str:
        response = requests.post(
            self.api_url,
            headers={
                "x-api-key": self.api_key or "",
                "anthropic-version": self.api_version,
                "content-type": "application/json",
            },
            json={
                "model": self.model,
                "max_tokens": request.max_tokens,
                "system": request.system_prompt,
                "messages": [{"role": "user", "content": request.user_prompt}],
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        result: Dict[str, Any] = response.json()
        for block in result.get("content", []):
            if block.get("type") == "text" and block.get("text"):
                return block["text"]
        raise ValueError("Claude response contained no text block")

    async def generate(self, request: GenerationRequest) -> str:
        logger.info(f"Generating with Claude model '{self.model}'...")
        return await asyncio.to_thread(self._post, request)


class CannedAnswerGenerator(IAnswerGenerator):
    """Terminal stub: always available, returns the request's canned answer."""

    name = "canned"

    def is_available(self) -> bool:
        return True

    async def generate(self, request: GenerationRequest) -> str:
        return request.canned_answer
