"""LLM client and provider error classification"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from sayitright.services.llm_client import (
    LLMClient,
    LLMInvalidCredentialError,
    LLMProviderError,
    LLMQuotaExceededError,
    LLMRateLimitedError,
    classify_provider_error,
)

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def status_error(cls, status_code, code=None, message="provider said no"):
    response = httpx.Response(status_code, request=REQUEST)
    body = {"code": code, "message": message} if code else None
    return cls(message, response=response, body=body)


def test_insufficient_quota():
    error = status_error(openai.RateLimitError, 429, code="insufficient_quota")
    assert isinstance(classify_provider_error(error), LLMQuotaExceededError)


def test_bare_429_is_quota():
    error = status_error(openai.RateLimitError, 429)
    assert isinstance(classify_provider_error(error), LLMQuotaExceededError)


def test_rate_limited():
    error = status_error(openai.RateLimitError, 429, code="rate_limit_exceeded")
    result = classify_provider_error(error)
    assert isinstance(result, LLMRateLimitedError)
    assert result.status_code == 400


def test_invalid_api_key():
    error = status_error(openai.AuthenticationError, 401)
    assert isinstance(classify_provider_error(error), LLMInvalidCredentialError)


def test_other_errors_hide_provider_text():
    error = status_error(openai.InternalServerError, 500, message="upstream exploded")
    result = classify_provider_error(error)
    assert type(result) is LLMProviderError
    assert result.message == LLMProviderError.default_message


def test_timeout_is_provider_error():
    result = classify_provider_error(openai.APITimeoutError(request=REQUEST))
    assert type(result) is LLMProviderError
    assert result.message == "AI 서비스에 일시적인 오류가 발생했습니다."


def make_client(create):
    llm = LLMClient(api_key="test-key", model="test-model", timeout=5)
    llm._client = MagicMock()
    llm._client.chat.completions.create = create
    return llm


async def test_complete_returns_content_and_tokens():
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="Dear team,"))],
        usage=SimpleNamespace(total_tokens=57),
    )
    create = AsyncMock(return_value=completion)
    llm = make_client(create)

    result = await llm.complete("system prompt", "user prompt", 200)

    assert result.content == "Dear team,"
    assert result.tokens_used == 57
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == 200
    assert kwargs["temperature"] == 0.7
    assert kwargs["top_p"] == 0.9
    assert kwargs["messages"][0] == {"role": "system", "content": "system prompt"}


async def test_complete_handles_missing_usage():
    completion = SimpleNamespace(choices=[], usage=None)
    llm = make_client(AsyncMock(return_value=completion))

    result = await llm.complete("s", "u", 100)

    assert result.content == ""
    assert result.tokens_used == 0


async def test_complete_classifies_errors():
    error = status_error(openai.RateLimitError, 429, code="rate_limit_exceeded")
    llm = make_client(AsyncMock(side_effect=error))

    with pytest.raises(LLMRateLimitedError):
        await llm.complete("s", "u", 100)


def test_sdk_client_created_lazily():
    llm = LLMClient(api_key="test-key")
    assert llm._client is None
    assert llm.client is llm.client
    assert llm.client.max_retries == 0
