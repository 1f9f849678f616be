"""Chat completion client

Wraps the OpenAI async client. Provider failures are classified into a few
client-facing errors; calls are never retried.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from openai import APIError, APIStatusError, AsyncOpenAI

from sayitright.core.ai_config import MODEL_TEMPERATURE, MODEL_TOP_P
from sayitright.core.config import get_settings
from sayitright.core.errors import BadRequestError

logger = logging.getLogger(__name__)

settings = get_settings()


class LLMProviderError(BadRequestError):
    default_message = "AI 서비스에 일시적인 오류가 발생했습니다."


class LLMQuotaExceededError(LLMProviderError):
    default_message = "⚠️ OpenAI API 할당량이 부족합니다. 관리자에게 문의해주세요."


class LLMRateLimitedError(LLMProviderError):
    default_message = "⏱️ API 호출 한도를 초과했습니다. 잠시 후 다시 시도해주세요."


class LLMInvalidCredentialError(LLMProviderError):
    default_message = "🔑 API 키가 유효하지 않습니다."


@dataclass
class LLMCompletion:
    content: str
    tokens_used: int


def classify_provider_error(error: Exception) -> LLMProviderError:
    """
    Map an SDK exception to one of the LLM errors.

    Args:
        error: Exception raised by the OpenAI SDK

    Returns:
        The error to raise in its place
    """
    code = getattr(error, "code", None)
    status_code = error.status_code if isinstance(error, APIStatusError) else None

    if code == "insufficient_quota" or (status_code == 429 and code != "rate_limit_exceeded"):
        return LLMQuotaExceededError()
    if code == "rate_limit_exceeded":
        return LLMRateLimitedError()
    if code == "invalid_api_key" or status_code == 401:
        return LLMInvalidCredentialError()

    # Provider text stays in the server log
    return LLMProviderError()


class LLMClient:
    """OpenAI chat completions with fixed sampling parameters"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.openai_timeout_seconds
        self._client = None

    @property
    def client(self) -> AsyncOpenAI:
        """Lazily created SDK client"""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=settings.openai_base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def complete(self, system: str, user: str, max_tokens: int) -> LLMCompletion:
        """
        Run one chat completion.

        Args:
            system: System prompt
            user: User prompt
            max_tokens: Output token budget

        Returns:
            LLMCompletion with the reply text and total tokens used

        Raises:
            LLMProviderError: any provider failure, including timeouts
        """
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=MODEL_TEMPERATURE,
                top_p=MODEL_TOP_P,
                max_tokens=max_tokens,
            )
        except APIError as e:
            logger.error(f"LLM call failed: {type(e).__name__}: {e}")
            raise classify_provider_error(e)

        content = completion.choices[0].message.content if completion.choices else None
        tokens_used = completion.usage.total_tokens if completion.usage else 0

        logger.info(f"LLM tokens used: {tokens_used}")

        return LLMCompletion(content=content or "", tokens_used=tokens_used)


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Shared client, overridable as a FastAPI dependency in tests"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
