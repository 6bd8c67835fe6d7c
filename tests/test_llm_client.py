"""Tests for the OpenAI-compatible chat client wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from openai import OpenAIError

from venture_sourcer import config
from venture_sourcer.llm_client import LLMClient, get_llm_client, get_research_client
from venture_sourcer.results import ResultStatus


def _response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


def _client_with(create):
    client = LLMClient(api_key="test_key", base_url="https://example.test/v1", model="test-model")
    sdk = MagicMock()
    sdk.chat.completions.create = create
    return client, sdk


class TestLLMClient:
    """Tests for LLMClient.complete."""

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        client = LLMClient(api_key=None, base_url="https://example.test/v1", model="m")
        result = await client.complete("system", "user")
        assert result.status == ResultStatus.UNCONFIGURED
        assert result.value == ""
        assert client._client is None

    @pytest.mark.asyncio
    async def test_success_strips_content(self):
        create = AsyncMock(return_value=_response("  hello  "))
        client, sdk = _client_with(create)

        with patch.object(client, '_get_client', return_value=sdk):
            result = await client.complete("system", "user", temperature=0.1, max_tokens=50)

        assert result.ok
        assert result.value == "hello"
        kwargs = create.call_args.kwargs
        assert kwargs['model'] == "test-model"
        assert kwargs['messages'][0] == {"role": "system", "content": "system"}
        assert kwargs['max_tokens'] == 50

    @pytest.mark.asyncio
    async def test_api_error_becomes_status(self):
        client, sdk = _client_with(AsyncMock(side_effect=OpenAIError("boom")))

        with patch.object(client, '_get_client', return_value=sdk):
            result = await client.complete("system", "user")

        assert result.status == ResultStatus.CALL_FAILED
        assert result.value == ""

    @pytest.mark.asyncio
    async def test_empty_completion(self):
        client, sdk = _client_with(AsyncMock(return_value=_response(None)))

        with patch.object(client, '_get_client', return_value=sdk):
            result = await client.complete("system", "user")

        assert result.status == ResultStatus.EMPTY


class TestClientFactories:
    """Tests for provider client factories."""

    def test_llm_client_reads_config(self, monkeypatch):
        monkeypatch.setattr(config, 'OPENROUTER_API_KEY', 'or_key')
        client = get_llm_client()
        assert client.configured
        assert client.base_url == config.OPENROUTER_BASE_URL
        assert client.model == config.OPENROUTER_MODEL

    def test_research_client_unconfigured(self):
        assert not get_research_client().configured

    def test_explicit_key_wins(self):
        assert get_research_client(api_key="pplx_key").api_key == "pplx_key"
