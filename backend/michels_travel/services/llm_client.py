"""LLM client for the travel assistant. OpenAI is tried first, Anthropic second."""

import logging

import anthropic
from openai import AsyncOpenAI, OpenAIError

from michels_travel.config import settings

logger = logging.getLogger(__name__)


class LLMClient:
    """Async chat completion over whichever providers have API keys configured."""

    def __init__(self):
        self._openai = AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
        self._anthropic = (
            anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key) if settings.anthropic_api_key else None
        )

    @property
    def is_configured(self) -> bool:
        return self._openai is not None or self._anthropic is not None

    async def complete(
        self,
        system: str,
        messages: list[dict],
        *,
        max_tokens: int = 800,
        temperature: float = 0.4,
        json_mode: bool = False,
    ) -> str:
        """Return the assistant text for a conversation.

        `messages` holds user/assistant turns only; the system prompt is passed
        separately because the two providers place it differently.

        Raises RuntimeError when no provider is configured or all of them fail.
        """
        errors = []

        if self._openai:
            kwargs: dict = {
                "model": settings.openai_model,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "messages": [{"role": "system", "content": system}, *messages],
            }
            if json_mode:
                kwargs["response_format"] = {"type": "json_object"}
            try:
                response = await self._openai.chat.completions.create(**kwargs)
                return (response.choices[0].message.content or "").strip()
            except OpenAIError as e:
                errors.append(f"OpenAI: {e}")
                logger.warning(f"OpenAI completion failed: {e}")

        if self._anthropic:
            try:
                response = await self._anthropic.messages.create(
                    model=settings.anthropic_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=messages,
                )
                return "".join(block.text for block in response.content if block.type == "text").strip()
            except anthropic.AnthropicError as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic completion failed: {e}")

        if not errors:
            raise RuntimeError("No LLM provider configured")
        raise RuntimeError(f"All LLM providers failed: {'; '.join(errors)}")


llm_client = LLMClient()
