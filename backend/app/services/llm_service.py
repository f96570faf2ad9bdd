import asyncio
import logging
import os
import time
from dataclasses import dataclass, replace
from typing import Any, Optional

# LangChain Imports
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

# Langfuse SDK - @observe decorator for LLM tracing
from langfuse import observe, get_client

import config
from app.exceptions import GenerationFailedError, GenerationTimeoutError

logger = logging.getLogger(__name__)

LANGFUSE_ENABLED = bool(os.getenv("LANGFUSE_PUBLIC_KEY") and os.getenv("LANGFUSE_SECRET_KEY"))

# If LLM_MODEL is set in env, it overrides these.
DEFAULT_MODELS = {
    "gemini": "gemini-2.5-flash",
    "ollama": "gpt-oss:120b-cloud",
    "openrouter": "google/gemini-2.5-flash",
    "openai": "gpt-4o",
}

# Base URLs for OpenAI-compatible providers
PROVIDER_URLS = {
    "openrouter": "https://openrouter.ai/api/v1",
    "openai": None,  # Uses default OpenAI URL
}


@dataclass(frozen=True)
class GenerationSettings:
    """Everything one generator use case needs; built once and passed in."""
    provider: str
    model: str
    api_key: Optional[str] = None
    temperature: float = 0.7
    top_k: Optional[int] = 40
    top_p: Optional[float] = 0.95
    max_tokens: int = 8192
    timeout: float = 30.0
    json_mode: bool = False
    ollama_url: str = "http://localhost:11434"

    @classmethod
    def from_config(cls, **overrides) -> "GenerationSettings":
        provider = config.LLM_PROVIDER
        settings = cls(
            provider=provider,
            model=config.LLM_MODEL or DEFAULT_MODELS.get(provider, DEFAULT_MODELS["gemini"]),
            api_key=config.LLM_API_KEY,
            ollama_url=config.OLLAMA_URL,
        )
        return replace(settings, **overrides)


def get_llm(settings: GenerationSettings):
    """
    Factory function to get a configured LangChain Chat Model instance.
    Supports: Gemini, OpenAI, OpenRouter, Ollama (Local)

    Client-side retries are disabled; retry policy lives in the callers.
    """
    if settings.provider == "gemini":
        if not settings.api_key:
            logger.error("[LLM Service] Missing API key for provider gemini")
        extra = {"response_mime_type": "application/json"} if settings.json_mode else {}
        return ChatGoogleGenerativeAI(
            model=settings.model,
            google_api_key=settings.api_key,
            temperature=settings.temperature,
            top_k=settings.top_k,
            top_p=settings.top_p,
            max_output_tokens=settings.max_tokens,
            timeout=settings.timeout,
            max_retries=0,
            **extra,
        )

    elif settings.provider in ["openrouter", "openai"]:
        if not settings.api_key:
            logger.error(f"[LLM Service] Missing API key for provider {settings.provider}")

        model_kwargs = {}
        if settings.json_mode:
            model_kwargs["response_format"] = {"type": "json_object"}

        return ChatOpenAI(
            model=settings.model,
            api_key=settings.api_key,
            base_url=PROVIDER_URLS.get(settings.provider),
            temperature=settings.temperature,
            top_p=settings.top_p,
            max_tokens=settings.max_tokens,
            model_kwargs=model_kwargs,
            timeout=settings.timeout,
            max_retries=0,
        )

    elif settings.provider == "ollama":
        return ChatOllama(
            base_url=settings.ollama_url,
            model=settings.model,
            temperature=settings.temperature,
            top_k=settings.top_k,
            top_p=settings.top_p,
            num_predict=settings.max_tokens,
            format="json" if settings.json_mode else "",
        )

    raise ValueError(f"Unknown LLM provider '{settings.provider}'")


def _content_text(content: Any) -> str:
    # Some providers return a list of content parts instead of a plain string
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


class GenerationClient:
    """
    Sends one system instruction + user prompt to the generator and returns
    the raw text. Enforces a wall-clock timeout; never retries.
    """

    def __init__(self, settings: GenerationSettings, llm=None):
        self.settings = settings
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = get_llm(self.settings)
        return self._llm

    @observe(name="generate_text", as_type="generation")
    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        logger.info(f"[LLM Service] Calling model {self.settings.model} ({self.settings.provider}), prompt chars: {len(user_prompt)}")

        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt)
        ]

        start = time.monotonic()
        try:
            # wait_for cancels the pending request on timeout, releasing its connection
            response = await asyncio.wait_for(self.llm.ainvoke(messages), timeout=self.settings.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"[LLM Service] Generator timed out after {self.settings.timeout:.0f}s")
            raise GenerationTimeoutError(f"Generator request timed out after {self.settings.timeout:.0f}s") from e
        except Exception as e:
            logger.error(f"[LLM Service] Generator call failed: {e}")
            raise GenerationFailedError(f"Generator call failed: {e}") from e

        elapsed = time.monotonic() - start
        content = _content_text(response.content)
        logger.info(f"[LLM Service] Response received in {elapsed:.1f}s ({len(content)} chars)")

        if not content.strip():
            raise GenerationFailedError("Generator returned an empty response")

        self._record_usage(response)
        return content

    def _record_usage(self, response) -> None:
        usage = getattr(response, "usage_metadata", None) or {}
        input_tokens = usage.get("input_tokens") or 0
        output_tokens = usage.get("output_tokens") or 0

        # Fallback to provider metadata (Ollama: prompt_eval_count / eval_count)
        if input_tokens == 0 and output_tokens == 0:
            metadata = getattr(response, "response_metadata", None) or {}
            input_tokens = metadata.get("prompt_eval_count") or 0
            output_tokens = metadata.get("eval_count") or 0

        total_tokens = input_tokens + output_tokens
        logger.info(f"[LLM Stats] Input: {input_tokens}, Output: {output_tokens}, Total: {total_tokens}")

        if LANGFUSE_ENABLED:
            try:
                get_client().update_current_generation(
                    model=self.settings.model,
                    usage_details={
                        "input": input_tokens,
                        "output": output_tokens,
                        "total": total_tokens
                    },
                    model_parameters={
                        "temperature": self.settings.temperature,
                        "max_tokens": self.settings.max_tokens
                    },
                )
            except Exception as e:
                logger.warning(f"[Langfuse] Failed to update generation: {e}")
