from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

import aisuite as ai  # type: ignore

try:
    import google.generativeai as genai  # type: ignore
except Exception:
    genai = None  # optional

from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

JSON_SYSTEM_PROMPT = "Respond ONLY with a single valid JSON object. No markdown, no comments."

# Environment variable each aisuite provider reads its key from
PROVIDER_KEYS = {
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "google-genai": "GOOGLE_API_KEY",
}


@dataclass(frozen=True)
class ModelParams:
    model: str
    temperature: float = 0.4
    max_tokens: int = 4000
    json_mode: bool = True


class CompletionGateway(Protocol):
    def available(self, model: str | None = None) -> bool:
        """Whether credentials exist for ``model`` (or for the planning models)."""
        ...

    async def complete(self, prompt: str, params: ModelParams) -> str:
        """Return the model's raw text, or an empty string on any failure."""
        ...


def has_credentials(model: str) -> bool:
    provider = model.split(":", 1)[0] if ":" in model else ""
    env_var = PROVIDER_KEYS.get(provider)
    if env_var is None:
        return True
    return bool(os.getenv(env_var))


def supports_response_format(model: str) -> bool:
    """Open-weight ``openai/`` models served by Groq reject ``response_format``."""
    model_id = model.split(":", 1)[1] if ":" in model else model
    return not model_id.startswith("openai/")


class LLMProvider:
    def __init__(self, model: str) -> None:
        self.model = model
        self._client = None
        self._genai_model: Any | None = None

        # Route to google-generativeai if model starts with google-genai:
        if self.model.startswith("google-genai:"):
            if genai is None:
                raise RuntimeError("google-generativeai is not installed")
            api_key = os.getenv("GOOGLE_API_KEY")
            if not api_key:
                raise RuntimeError("GOOGLE_API_KEY is not set")
            genai.configure(api_key=api_key)
            model_id = self.model.split(":", 1)[1]
            self._genai_model = genai.GenerativeModel(model_id)
        else:
            try:
                self._client = ai.Client()
            except Exception as exc:  # fail fast if aisuite cannot initialize
                raise RuntimeError("Failed to initialize aisuite client") from exc

    def chat(
        self,
        messages: list[dict[str, Any]],
        temperature: float = 1.0,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Send a chat completion request. messages: list of dicts with keys: role (system|user|assistant), content (str)"""
        if self._genai_model is not None:
            # Map OpenAI-style messages to a single prompt for simplicity
            prompt = "\n".join(
                f"{m.get('role','user')}: {m.get('content','')}" for m in messages
            )
            config: dict[str, Any] = {"temperature": temperature}
            if max_tokens:
                config["max_output_tokens"] = max_tokens
            if json_mode:
                config["response_mime_type"] = "application/json"
            response = self._genai_model.generate_content(prompt, generation_config=config)
            return response.text or ""

        kwargs: dict[str, Any] = {}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if json_mode and supports_response_format(self.model):
            # Constrains syntax only; fields can still be missing or mistyped
            kwargs["response_format"] = {"type": "json_object"}
        resp = self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            **kwargs,
        )
        return resp.choices[0].message.content or ""

    async def chat_async(
        self,
        messages: list[dict[str, Any]],
        temperature: float = 1.0,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Async version of chat completion request. Runs the sync client in a worker thread."""
        return await asyncio.to_thread(
            self.chat, messages, temperature, max_tokens, json_mode
        )


class LLMGateway:
    """
    Completion gateway backed by aisuite.

    Every failure mode (missing key, provider error, timeout) is reported as an
    empty string so callers can move on to their next fallback.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._providers: dict[str, LLMProvider] = {}

    def available(self, model: str | None = None) -> bool:
        models = [model] if model else [self.settings.skeleton_model, self.settings.fill_model]
        return all(has_credentials(m) for m in models)

    def _provider(self, model: str) -> LLMProvider:
        if model not in self._providers:
            self._providers[model] = LLMProvider(model=model)
        return self._providers[model]

    async def complete(self, prompt: str, params: ModelParams) -> str:
        if not has_credentials(params.model):
            logger.warning("No API key configured for %s, skipping call", params.model)
            return ""

        messages = []
        if params.json_mode:
            messages.append({"role": "system", "content": JSON_SYSTEM_PROMPT})
        messages.append({"role": "user", "content": prompt})

        try:
            provider = self._provider(params.model)
            # Timed-out calls keep running in their thread; the result is discarded
            text = await asyncio.wait_for(
                provider.chat_async(
                    messages,
                    temperature=params.temperature,
                    max_tokens=params.max_tokens,
                    json_mode=params.json_mode,
                ),
                timeout=self.settings.llm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "LLM call to %s timed out after %ss", params.model, self.settings.llm_timeout_seconds
            )
            return ""
        except Exception as e:
            logger.error(f"LLM call to {params.model} failed: {e}")
            return ""

        return (text or "").strip()
