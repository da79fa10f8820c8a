from unittest.mock import MagicMock, patch

import pytest
import requests

from core.domain import GenerationRequest
from infrastructure.answer_generators import CannedAnswerGenerator, ClaudeGenerator, GeminiGenerator
from services.llm_service import GenerationChain, build_generation_chain


@pytest.fixture
def request_pair():
    return GenerationRequest(
        system_prompt="system",
        user_prompt="user",
        canned_answer="canned text",
        max_tokens=100,
    )


def _json_response(payload):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


class TestGenerationChain:
    async def test_first_available_generator_wins(self, make_generator, request_pair):
        first = make_generator("first", text="from first")
        second = make_generator("second", text="from second")
        chain = GenerationChain([first, second])

        result = await chain.generate(request_pair)

        assert (result.text, result.provider) == ("from first", "first")
        assert second.requests == []

    async def test_failure_falls_through(self, make_generator, request_pair):
        broken = make_generator("broken", error=RuntimeError("boom"))
        timeout = make_generator("slow", error=requests.exceptions.Timeout())
        working = make_generator("working", text="ok")
        chain = GenerationChain([broken, timeout, working])

        result = await chain.generate(request_pair)

        assert result.provider == "working"
        assert len(broken.requests) == 1
        assert len(timeout.requests) == 1

    async def test_unavailable_generators_skipped(self, make_generator, request_pair):
        missing_key = make_generator("missing", available=False)
        chain = GenerationChain([missing_key])

        result = await chain.generate(request_pair)

        assert missing_key.requests == []
        assert result.provider == "canned"
        assert result.text == "canned text"

    async def test_everything_failing_yields_canned_answer(self, make_generator, request_pair):
        chain = GenerationChain([
            make_generator("a", error=requests.exceptions.ConnectionError()),
            make_generator("b", error=ValueError("empty")),
        ])

        result = await chain.generate(request_pair)

        assert result.text == "canned text"
        assert result.provider == "canned"

    def test_canned_stub_appended_once(self, make_generator):
        chain = GenerationChain([make_generator("x")])
        assert [g.name for g in chain.generators] == ["x", "canned"]

        explicit = GenerationChain([make_generator("x"), CannedAnswerGenerator()])
        assert [g.name for g in explicit.generators] == ["x", "canned"]

    def test_default_chain_order(self):
        chain = build_generation_chain(gemini_api_key="g", anthropic_api_key="a")
        assert chain.provider_names == ["gemini", "claude", "canned"]

    def test_default_chain_without_keys(self):
        chain = build_generation_chain(gemini_api_key=None, anthropic_api_key=None)
        assert chain.provider_names == ["canned"]


class TestGeminiGenerator:
    async def test_joins_candidate_parts(self, request_pair):
        payload = {"candidates": [{"content": {"parts": [{"text": "첫 "}, {"text": "답변"}]}}]}
        generator = GeminiGenerator(api_key="key", model="gemini-test", base_url="https://example.test/models")

        with patch("infrastructure.answer_generators.requests.post",
                   return_value=_json_response(payload)) as post:
            text = await generator.generate(request_pair)

        assert text == "첫 답변"
        args, kwargs = post.call_args
        assert args[0] == "https://example.test/models/gemini-test:generateContent"
        assert kwargs["params"] == {"key": "key"}
        assert kwargs["json"]["generationConfig"]["maxOutputTokens"] == 100

    async def test_empty_text_raises(self, request_pair):
        payload = {"candidates": [{"content": {"parts": [{"text": "  "}]}}]}
        generator = GeminiGenerator(api_key="key")

        with patch("infrastructure.answer_generators.requests.post", return_value=_json_response(payload)):
            with pytest.raises(ValueError):
                await generator.generate(request_pair)

    def test_requires_key(self):
        assert not GeminiGenerator(api_key=None).is_available()


class TestClaudeGenerator:
    async def test_returns_first_text_block(self, request_pair):
        payload = {"content": [{"type": "tool_use"}, {"type": "text", "text": "claude answer"}]}
        generator = ClaudeGenerator(api_key="key")

        with patch("infrastructure.answer_generators.requests.post",
                   return_value=_json_response(payload)) as post:
            text = await generator.generate(request_pair)

        assert text == "claude answer"
        _, kwargs = post.call_args
        assert kwargs["headers"]["x-api-key"] == "key"
        assert kwargs["json"]["system"] == "system"
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "user"}]

    async def test_no_text_block_raises(self, request_pair):
        generator = ClaudeGenerator(api_key="key")
        with patch("infrastructure.answer_generators.requests.post",
                   return_value=_json_response({"content": []})):
            with pytest.raises(ValueError):
                await generator.generate(request_pair)

    async def test_chain_falls_back_from_http_error(self, request_pair):
        error_response = MagicMock(status_code=529)
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=error_response)
        chain = GenerationChain([ClaudeGenerator(api_key="key")])

        with patch("infrastructure.answer_generators.requests.post", return_value=response):
            result = await chain.generate(request_pair)

        assert result.provider == "canned"
