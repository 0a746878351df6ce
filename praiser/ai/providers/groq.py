"""Groq chat provider over Groq's OpenAI-compatible API.

Implements the ChatProvider contract with the openai SDK pointed at
Groq's base URL. Every SDK failure is normalized into ProviderCallError
so the praise engine can classify it.

SDK-level retries are disabled: a 429 or 503 on one model should move
the engine to the next model straight away, not stall on backoff.

Imports from base.py + errors.py + models.py + the openai SDK.
"""

import logging
from typing import Any

import openai

from praiser.ai.errors import ProviderCallError
from praiser.ai.providers.base import ChatProvider, Completion, UsageInfo
from praiser.models import TRANSCRIPTION_MODEL

logger = logging.getLogger(__name__)

_TRANSCRIPTION_TEMPERATURE = 0.2
_DEFAULT_AUDIO_TYPE = "audio/webm"


def _to_provider_error(exc: openai.OpenAIError) -> ProviderCallError:
    """Maps an openai SDK exception to a ProviderCallError.

    APIStatusError bodies look like
    ``{"message": ..., "type": ..., "code": ...}`` (the SDK already
    unwraps the outer ``"error"`` key). Transport failures carry no
    status code.
    """
    if isinstance(exc, openai.APIStatusError):
        body = exc.body if isinstance(exc.body, dict) else {}
        message = body.get("message") or exc.message or str(exc)
        return ProviderCallError(
            str(message),
            status_code=exc.status_code,
            code=body.get("code") or getattr(exc, "code", None),
            type=body.get("type") or getattr(exc, "type", None),
        )
    if isinstance(exc, openai.APIConnectionError):
        return ProviderCallError(
            str(exc) or "Connection error.", code="connection_error",
        )
    return ProviderCallError(str(exc) or type(exc).__name__)


class GroqProvider(ChatProvider):
    """Groq provider using the openai SDK.

    Args:
        api_key: Groq API key.
        base_url: OpenAI-compatible endpoint root.
    """

    def __init__(self, api_key: str, base_url: str) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
        )

    async def list_models(self) -> list[str]:
        """Returns every model id in the Groq listing."""
        try:
            page = await self._client.models.list()
        except openai.OpenAIError as exc:
            raise _to_provider_error(exc) from exc
        return [model.id for model in page.data if getattr(model, "id", None)]

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        json_mode: bool = False,
    ) -> Completion:
        """Runs one chat completion against one model.

        Args:
            model: Groq model id.
            messages: Provider-neutral message dicts.
            temperature: Sampling temperature.
            json_mode: Request ``response_format={"type": "json_object"}``.

        Returns:
            The first choice's content (empty string if none) and usage.
        """
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            raise _to_provider_error(exc) from exc

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        prompt_tokens = 0
        completion_tokens = 0
        if response.usage is not None:
            prompt_tokens = response.usage.prompt_tokens or 0
            completion_tokens = response.usage.completion_tokens or 0

        return Completion(
            text=text,
            usage=UsageInfo(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
            ),
        )

    async def transcribe(
        self,
        *,
        audio: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> str:
        """Transcribes audio with Whisper. Pass-through, no post-processing."""
        try:
            result = await self._client.audio.transcriptions.create(
                file=(filename, audio, content_type or _DEFAULT_AUDIO_TYPE),
                model=TRANSCRIPTION_MODEL,
                response_format="json",
                temperature=_TRANSCRIPTION_TEMPERATURE,
            )
        except openai.OpenAIError as exc:
            raise _to_provider_error(exc) from exc
        return getattr(result, "text", "") or ""
