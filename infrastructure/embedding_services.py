# infrastructure/embedding_services.py
"""Embedding generation via a hosted provider, with a deterministic offline fallback"""
import asyncio
import logging
import numpy as np
import requests
from typing import List, Optional

from core.interfaces import IEmbeddingService
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


def fallback_embedding(text: str, dimension: int = 1536) -> List[float]:
    """
    Deterministic pseudo-embedding: value i is sin(len(text) + i).

    NOT semantic. It depends only on the text length, so any two texts of
    equal length get identical vectors and similarity scores computed from
    these vectors carry no meaning. Exists so the pipeline keeps its shape
    when no provider is configured.
    """
    values = np.sin(len(text) + np.arange(dimension, dtype=np.float64))
    return values.tolist()


class OpenAIEmbeddingService(IEmbeddingService):
    """
    OpenAI-compatible embeddings endpoint with fallback.

    Request body is ``{"input": text, "model": name}``; the first vector of
    the response is returned verbatim. Any transport error, non-2xx status or
    malformed body degrades to ``fallback_embedding`` with a warning: this
    service never raises to its caller.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = settings.EMBEDDING_MODEL_NAME,
        api_url: str = settings.EMBEDDING_API_URL,
        dimension: int = settings.EMBEDDING_DIMENSION,
        timeout: int = settings.REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.api_url = api_url
        self.timeout = timeout
        self._dimension = dimension
        self._fallback_count = 0

        if not self.api_key:
            logger.warning(
                "No embedding API key configured. Using length-based MOCK embeddings; "
                "similarity search results will NOT be semantically meaningful."
            )

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_degraded(self) -> bool:
        return not self.api_key or self._fallback_count > 0

    @property
    def fallback_count(self) -> int:
        """Number of embeddings served by the fallback so far"""
        return self._fallback_count

    def _request_embedding(self, text: str) -> List[float]:
        """Blocking provider call. Raises on any failure."""
        response = requests.post(
            self.api_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            json={"input": text, "model": self.model_name},
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        embedding = data["data"][0]["embedding"]
        if not isinstance(embedding, list) or not embedding:
            raise ValueError("Embedding response did not contain a vector")
        return embedding

    def _adopt_dimension(self, size: int) -> None:
        """Fallback vectors follow the size the provider actually returns."""
        if size != self._dimension:
            logger.warning(
                f"Provider returned {size}-d embeddings but EMBEDDING_DIMENSION is {self._dimension}; "
                f"using {size} for fallback vectors."
            )
            self._dimension = size

    def _fallback(self, text: str) -> List[float]:
        self._fallback_count += 1
        logger.warning("Using MOCK embeddings. Semantic search will NOT work correctly.")
        return fallback_embedding(text, self._dimension)

    async def generate_embedding(self, text: str) -> List[float]:
        if not self.api_key:
            return self._fallback(text)

        try:
            embedding = await asyncio.to_thread(self._request_embedding, text)
            self._adopt_dimension(len(embedding))
            return embedding
        except requests.exceptions.Timeout:
            logger.error(f"Embedding request timed out after {self.timeout} seconds.")
        except requests.exceptions.HTTPError as e:
            logger.error(f"Embedding provider returned an error: {e.response.status_code} {e.response.text}")
        except requests.exceptions.RequestException as e:
            logger.error(f"Cannot reach embedding provider at {self.api_url}: {e}")
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Malformed embedding response: {e}")
        return self._fallback(text)
