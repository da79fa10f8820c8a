# services/llm_service.py
import requests
import logging
from typing import List, Optional, Sequence

from core.domain import GenerationRequest, GenerationResult
from core.interfaces import IAnswerGenerator
from infrastructure.answer_generators import (
    CannedAnswerGenerator, ClaudeGenerator, GeminiGenerator
)
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


class GenerationChain:
    """
    Ordered list of generation backends.

    Each available backend is attempted in turn; a failure is logged and the
    next one is tried. The chain always ends with ``CannedAnswerGenerator`` so
    exactly one result is produced. Adding a provider is a list edit.
    """

    def __init__(self, generators: Sequence[IAnswerGenerator]):
        self.generators: List[IAnswerGenerator] = list(generators)
        if not self.generators or not isinstance(self.generators[-1], CannedAnswerGenerator):
            self.generators.append(CannedAnswerGenerator())

    @property
    def provider_names(self) -> List[str]:
        return [g.name for g in self.generators if g.is_available()]

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        for generator in self.generators:
            if not generator.is_available():
                continue
            try:
                text = await generator.generate(request)
                logger.info(f"Generation succeeded with '{generator.name}'.")
                return GenerationResult(text=text, provider=generator.name)
            except requests.exceptions.Timeout:
                logger.error(f"'{generator.name}' request timed out; trying next provider.")
            except requests.exceptions.ConnectionError:
                logger.error(f"Cannot connect to '{generator.name}'; trying next provider.")
            except requests.exceptions.HTTPError as e:
                logger.error(
                    f"'{generator.name}' returned an error: "
                    f"{e.response.status_code if e.response is not None else '?'}; trying next provider."
                )
            except Exception as e:
                logger.error(f"'{generator.name}' failed: {e}; trying next provider.", exc_info=True)

        # Unreachable while the canned stub terminates the chain
        return GenerationResult(text=request.canned_answer, provider=CannedAnswerGenerator.name)


def build_generation_chain(
    gemini_api_key: Optional[str] = settings.GOOGLE_GEMINI_API_KEY,
    anthropic_api_key: Optional[str] = settings.ANTHROPIC_API_KEY,
) -> GenerationChain:
    """Default priority: Gemini, then Claude, then the canned stub."""
    return GenerationChain([
        GeminiGenerator(api_key=gemini_api_key),
        ClaudeGenerator(api_key=anthropic_api_key),
        CannedAnswerGenerator(),
    ])
