"""Generative text clients used to summarize journal entries."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Protocol

import anthropic
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from app.core.config import Config, settings
from app.core.logging_utils import log_llm_call
from app.shared.errors import ConfigurationError, GenerationError

logger = logging.getLogger("QJournal.LLM")


class TextGenerator(Protocol):
    """Anything that turns one instruction into one completion."""

    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: int,
        purpose: str = "completion",
    ) -> str:
        ...


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class ClaudeTextGenerator:
    """Claude completions with the configured model fallbacks."""

    provider = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        models: Optional[List[str]] = None,
        timeout_seconds: Optional[float] = None,
        temperature: float = 0.7,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        self.model_candidates = list(models or settings.CLAUDE_MODEL_OPTIONS)
        self.timeout_seconds = timeout_seconds or settings.LLM_TIMEOUT_SECONDS
        self.temperature = temperature
        self._client: Optional[AsyncAnthropic] = None

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError("ANTHROPIC_API_KEY environment variable not set")
            self._client = AsyncAnthropic(api_key=self._api_key, timeout=self.timeout_seconds)
            logger.info(
                "Claude client initialized with models: %s",
                ", ".join(self.model_candidates),
            )
        return self._client

    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: int,
        purpose: str = "completion",
    ) -> str:
        client = self._get_client()
        return await self._complete_with_fallbacks(client, system, prompt, max_tokens, purpose)

    async def _complete_with_fallbacks(
        self,
        client: AsyncAnthropic,
        system: str,
        prompt: str,
        max_tokens: int,
        purpose: str,
    ) -> str:
        last_error: Optional[Exception] = None

        for model_name in self.model_candidates:
            started = time.monotonic()
            try:
                response = await asyncio.wait_for(
                    client.messages.create(
                        model=model_name,
                        max_tokens=max_tokens,
                        temperature=self.temperature,
                        system=system,
                        messages=[{"role": "user", "content": prompt}],
                    ),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning("Model %s timed out after %gs for %s", model_name, self.timeout_seconds, purpose)
                last_error = GenerationError(
                    f"Generative service timed out after {self.timeout_seconds:g}s ({purpose})"
                )
                continue
            except anthropic.APIError as exc:
                logger.warning("Model %s failed for %s: %s", model_name, purpose, exc)
                last_error = exc
                continue

            usage = getattr(response, "usage", None)
            log_llm_call(
                model=model_name,
                purpose=purpose,
                duration_ms=_elapsed_ms(started),
                input_tokens=getattr(usage, "input_tokens", None),
                output_tokens=getattr(usage, "output_tokens", None),
                provider=self.provider,
            )

            text = "".join(
                block.text for block in response.content if getattr(block, "type", "text") == "text"
            ).strip()
            if not text:
                raise GenerationError(f"Model {model_name} returned an empty completion ({purpose})")
            return text

        raise GenerationError(f"All Claude models failed ({purpose}): {last_error}")


class OpenAITextGenerator:
    """OpenAI chat completions."""

    provider = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        temperature: float = 0.7,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout_seconds = timeout_seconds or settings.LLM_TIMEOUT_SECONDS
        self.temperature = temperature
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError("OPENAI_API_KEY environment variable not set")
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self.timeout_seconds)
            logger.info("OpenAI client initialized with model %s", self.model)
        return self._client

    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: int,
        purpose: str = "completion",
    ) -> str:
        client = self._get_client()
        started = time.monotonic()
        try:
            completion = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self.temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationError(
                f"Generative service timed out after {self.timeout_seconds:g}s ({purpose})"
            ) from exc
        except openai.OpenAIError as exc:
            raise GenerationError(f"OpenAI request failed ({purpose}): {exc}") from exc

        usage = getattr(completion, "usage", None)
        log_llm_call(
            model=self.model,
            purpose=purpose,
            duration_ms=_elapsed_ms(started),
            input_tokens=getattr(usage, "prompt_tokens", None),
            output_tokens=getattr(usage, "completion_tokens", None),
            provider=self.provider,
        )

        if not completion.choices:
            raise GenerationError(f"OpenAI returned no choices ({purpose})")
        text = (completion.choices[0].message.content or "").strip()
        if not text:
            raise GenerationError(f"OpenAI returned an empty completion ({purpose})")
        return text


def build_text_generator(config: Config = settings) -> TextGenerator:
    """Pick the generator for the configured LLM_PROVIDER."""
    provider = (config.LLM_PROVIDER or "anthropic").lower()
    if provider == "anthropic":
        return ClaudeTextGenerator(
            api_key=config.ANTHROPIC_API_KEY or "",
            models=config.CLAUDE_MODEL_OPTIONS,
            timeout_seconds=config.LLM_TIMEOUT_SECONDS,
        )
    if provider == "openai":
        return OpenAITextGenerator(
            api_key=config.OPENAI_API_KEY or "",
            model=config.OPENAI_MODEL,
            timeout_seconds=config.LLM_TIMEOUT_SECONDS,
        )
    raise ConfigurationError(f"Unknown LLM_PROVIDER '{config.LLM_PROVIDER}' (expected 'anthropic' or 'openai')")
