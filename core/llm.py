"""
Inference client for OpenRouter-compatible chat completion endpoints, with
Claude (Anthropic) as an alternate provider.

Usage:
    from core.llm import create_inference_client

    client = create_inference_client(config)
    text = await client.infer("You are a Copywriter.", chapter_text)

Every client exposes the same contract:
    infer(system_instruction, user_content) -> str

- user_content is truncated to `max_input_chars` before anything is sent
- a response without content, or an HTTP error reply, yields
  DegradedText("AI Error"), never an exception
- error replies are retried only for 408, 409, 429 and 5xx statuses
- transport failures are retried `max_retries` times, then raised as
  ProviderUnavailable
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

from .errors import AI_ERROR, ConfigurationError, DegradedText, ProviderUnavailable
from .types import InferenceRequest


logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openrouter/free"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"


# Error statuses worth another attempt; anything else will fail the same way again
RETRYABLE_STATUS_CODES = {408, 409, 429}


def is_retryable_status(status_code: Optional[int]) -> bool:
    return status_code in RETRYABLE_STATUS_CODES or (status_code or 0) >= 500


class LLMProvider(Enum):
    OPENROUTER = "openrouter"
    ANTHROPIC = "anthropic"


class BaseInferenceClient(ABC):
    """Shared truncation, retry and degraded-result handling."""

    provider_name = "inference"

    def __init__(
        self,
        model: str,
        max_input_chars: int = 15000,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ):
        self.model = model
        self.max_input_chars = max_input_chars
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @property
    @abstractmethod
    def transport_errors(self) -> Tuple[Type[BaseException], ...]:
        """Exceptions that mean the provider could not be reached."""

    @property
    @abstractmethod
    def status_error(self) -> Type[BaseException]:
        """Exception raised when the provider answered with an HTTP error status."""

    @abstractmethod
    async def _complete(self, request: InferenceRequest) -> Optional[str]:
        """Send one request and return the generated text, or None if absent."""

    def build_request(self, system_instruction: str, user_content: str) -> InferenceRequest:
        return InferenceRequest(
            system_instruction=system_instruction,
            user_content=user_content or "",
            max_chars=self.max_input_chars,
        )

    async def infer(self, system_instruction: str, user_content: str) -> str:
        request = self.build_request(system_instruction, user_content)
        last_error: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                logger.warning(
                    "Retrying %s call (attempt %d/%d): %s",
                    self.provider_name, attempt + 1, self.max_retries + 1, last_error,
                )
                await asyncio.sleep(self.retry_delay * attempt)

            start_time = time.time()
            try:
                content = await self._complete(request)
            except self.status_error as e:
                last_error = e
                if is_retryable_status(getattr(e, "status_code", None)):
                    continue
                break
            except self.transport_errors as e:
                last_error = e
                continue

            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.debug(
                "%s call model=%s chars=%d took %dms",
                self.provider_name, self.model, len(request.user_content), elapsed_ms,
            )
            if not content:
                logger.warning("%s returned no content; substituting placeholder", self.provider_name)
                return DegradedText(AI_ERROR, reason=DegradedText.EMPTY_RESPONSE)
            return content

        if isinstance(last_error, self.status_error):
            # The provider was reached; an error reply is empty content, not an outage
            logger.warning("%s answered with an error status: %s", self.provider_name, last_error)
            return DegradedText(AI_ERROR, reason=DegradedText.HTTP_ERROR)
        raise ProviderUnavailable(self.provider_name, str(last_error))


class InferenceClient(BaseInferenceClient):
    """OpenAI-compatible client pointed at OpenRouter (or any compatible base URL)."""

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = OPENROUTER_BASE_URL,
        max_input_chars: int = 15000,
        timeout: float = 60.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        default_headers: Optional[Dict[str, str]] = None,
        client: Optional[Any] = None,
    ):
        super().__init__(model, max_input_chars, max_retries, retry_delay)
        if client is None:
            if not api_key:
                raise ConfigurationError("OPENROUTER_API_KEY is required")
            from openai import AsyncOpenAI

            # Retries are handled here so the provider SDK must not add its own
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
                default_headers=default_headers,
            )
            logger.info("Inference client using base URL: %s", base_url)
        self.client = client

    @property
    def transport_errors(self) -> Tuple[Type[BaseException], ...]:
        import openai
        return (openai.APIConnectionError,)

    @property
    def status_error(self) -> Type[BaseException]:
        import openai
        return openai.APIStatusError

    async def _complete(self, request: InferenceRequest) -> Optional[str]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=request.to_messages(),
        )
        try:
            return response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            return None


class AnthropicInferenceClient(BaseInferenceClient):
    """Claude client exposing the same infer() contract."""

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_ANTHROPIC_MODEL,
        max_input_chars: int = 15000,
        timeout: float = 60.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        max_tokens: int = 4096,
        client: Optional[Any] = None,
    ):
        super().__init__(model, max_input_chars, max_retries, retry_delay)
        self.max_tokens = max_tokens
        if client is None:
            if not api_key:
                raise ConfigurationError("ANTHROPIC_API_KEY is required")
            from anthropic import AsyncAnthropic

            client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.client = client

    @property
    def transport_errors(self) -> Tuple[Type[BaseException], ...]:
        import anthropic
        return (anthropic.APIConnectionError,)

    @property
    def status_error(self) -> Type[BaseException]:
        import anthropic
        return anthropic.APIStatusError

    async def _complete(self, request: InferenceRequest) -> Optional[str]:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=request.system_instruction,
            messages=[{"role": "user", "content": request.user_content}],
        )
        text = "".join(
            block.text for block in (response.content or []) if hasattr(block, "text")
        )
        return text or None


def create_inference_client(config: Any) -> BaseInferenceClient:
    """
    Create an inference client from application configuration.

    Args:
        config: A `config.Config` instance; the credential is taken from it,
            never from the environment at call time.

    Returns:
        Client implementing infer(system_instruction, user_content)
    """
    try:
        provider = LLMProvider(config.llm_provider)
    except ValueError:
        raise ConfigurationError(f"Unknown provider: {config.llm_provider}")

    if provider == LLMProvider.ANTHROPIC:
        return AnthropicInferenceClient(
            api_key=config.anthropic_api_key,
            model=config.llm_model,
            max_input_chars=config.max_input_chars,
            timeout=config.request_timeout_seconds,
            max_retries=config.max_retries,
        )

    return InferenceClient(
        api_key=config.openrouter_api_key,
        model=config.llm_model,
        base_url=config.llm_base_url,
        max_input_chars=config.max_input_chars,
        timeout=config.request_timeout_seconds,
        max_retries=config.max_retries,
        default_headers={
            "HTTP-Referer": config.http_referer,
            "X-Title": config.app_title,
        },
    )


def get_default_model(provider: LLMProvider) -> str:
    """Get the default model for a provider."""
    defaults = {
        LLMProvider.OPENROUTER: DEFAULT_MODEL,
        LLMProvider.ANTHROPIC: DEFAULT_ANTHROPIC_MODEL,
    }
    return defaults.get(provider, DEFAULT_MODEL)
