"""Praise engine — prompt assembly plus the sequential model fallback loop.

Two paths per request:

1. No person (absent or unnamed profile): one call to the top catalog
   model with a plain-assistant system prompt and the last 10 messages.
   Any failure degrades to a static friendly reply. Never raises.
2. Praise: walk the catalog in order, one call in flight at a time.
   Each attempt asks for a JSON object, parses it, and validates it
   against CompletionResult. The first valid answer wins and the loop
   stops. Retryable failures (rate limit, over capacity, request too
   large, model unavailable, malformed response) advance to the next
   model; anything else aborts at once.

Consumed by:
- POST /groq/praise (praiser.api.chat)
- ChatSession (praiser.session)
"""

from __future__ import annotations

import json
import logging
import random
import time
from collections.abc import Sequence

from pydantic import ValidationError

from praiser.ai.catalog import ModelCatalog
from praiser.ai.errors import (
    AllModelsFailedError,
    Fatal,
    FatalProviderError,
    MalformedResponseError,
    ModelsOverCapacityError,
    ProviderCallError,
    RetryReason,
    classify_error,
)
from praiser.ai.prompts import (
    PraiseBand,
    build_assistant_messages,
    build_praise_messages,
    clamp_volume,
    classify_band,
)
from praiser.ai.providers.base import ChatProvider
from praiser.ai.usage import log_ai_call
from praiser.schemas import (
    CompletionResult,
    ConversationMessage,
    ImageMessage,
    PersonProfile,
    PraiseReply,
)

logger = logging.getLogger(__name__)

ASSISTANT_TEMPERATURE = 0.7
BASE_TEMPERATURE = 0.7

ASSISTANT_FALLBACK_MESSAGE = "I'm here to help! What would you like to know?"


def praise_temperature(volume: int) -> float:
    """0.7 at volume 0 up to 1.2 at volume 100."""
    return BASE_TEMPERATURE + clamp_volume(volume) / 200


def fallback_caption(name: str) -> str:
    return f"Look at this photo of {name}"


def parse_completion(text: str) -> CompletionResult:
    """Parses and validates a model's JSON answer.

    Raises:
        MalformedResponseError: Empty text, invalid JSON, or a payload
            that does not match CompletionResult.
    """
    if not text:
        raise MalformedResponseError("Model returned an empty response.")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Invalid JSON from model: {exc.msg}") from exc
    try:
        return CompletionResult.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Unable to parse model response: {exc.error_count()} validation error(s)"
        ) from exc


class PraiseEngine:
    """Runs one chat request against the provider with model fallback.

    Args:
        provider: Chat provider (MockProvider in tests, GroqProvider in
            production).
        catalog: Ranked model candidates.
        rng: Random source for picking the image to attach.
    """

    def __init__(
        self,
        provider: ChatProvider,
        catalog: ModelCatalog,
        rng: random.Random | None = None,
    ) -> None:
        self._provider = provider
        self._catalog = catalog
        self._rng = rng or random.Random()

    @property
    def provider(self) -> ChatProvider:
        return self._provider

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    async def respond(
        self,
        person: PersonProfile | None,
        volume: int,
        messages: Sequence[ConversationMessage],
    ) -> PraiseReply:
        """Produces the assistant reply for a conversation.

        Args:
            person: The profile to praise, or None.
            volume: Praise intensity, 0-100 (validated upstream).
            messages: The conversation, oldest first. Never empty.

        Returns:
            The reply, with an optional companion image message.

        Raises:
            FatalProviderError: A non-retryable provider failure.
            ModelsOverCapacityError: Every candidate was over capacity.
            AllModelsFailedError: Every candidate failed otherwise.
        """
        if classify_band(volume, person) is PraiseBand.NO_PERSON:
            return await self._respond_as_assistant(messages)
        return await self._respond_with_praise(person, volume, messages)

    # -- No-person path -----------------------------------------------------

    async def _respond_as_assistant(
        self, messages: Sequence[ConversationMessage],
    ) -> PraiseReply:
        model = ""
        start = time.monotonic()
        try:
            models = await self._catalog.get_available_models()
            model = models[0]
            completion = await self._provider.complete(
                model=model,
                messages=build_assistant_messages(messages),
                temperature=ASSISTANT_TEMPERATURE,
            )
        except Exception:
            # Never raises on this path.
            logger.exception("Normal assistant response error (model=%s)", model or "?")
            return PraiseReply(assistant_message=ASSISTANT_FALLBACK_MESSAGE)

        log_ai_call(
            model_id=model,
            prompt_tokens=completion.usage.prompt_tokens,
            completion_tokens=completion.usage.completion_tokens,
            latency_ms=(time.monotonic() - start) * 1000,
            call_type="assistant",
            outcome="ok",
        )
        return PraiseReply(
            assistant_message=completion.text or ASSISTANT_FALLBACK_MESSAGE,
            model=model,
        )

    # -- Praise path --------------------------------------------------------

    async def _respond_with_praise(
        self,
        person: PersonProfile,
        volume: int,
        messages: Sequence[ConversationMessage],
    ) -> PraiseReply:
        models = await self._catalog.get_available_models()
        payload = build_praise_messages(person, volume, messages)
        temperature = praise_temperature(volume)

        failures: list[RetryReason] = []
        last_error: Exception | None = None

        for model in models:
            start = time.monotonic()
            try:
                completion = await self._provider.complete(
                    model=model,
                    messages=payload,
                    temperature=temperature,
                    json_mode=True,
                )
                result = parse_completion(completion.text)
            except (ProviderCallError, MalformedResponseError) as exc:
                latency_ms = (time.monotonic() - start) * 1000
                verdict = classify_error(exc)
                if isinstance(verdict, Fatal):
                    log_ai_call(
                        model_id=model, prompt_tokens=0, completion_tokens=0,
                        latency_ms=latency_ms, call_type="praise", outcome="fatal",
                    )
                    logger.error("Model %s failed fatally: %s", model, exc)
                    raise FatalProviderError(
                        "Failed to generate praise response.", detail=str(exc),
                    ) from exc

                log_ai_call(
                    model_id=model, prompt_tokens=0, completion_tokens=0,
                    latency_ms=latency_ms, call_type="praise", outcome=verdict.reason,
                )
                logger.warning(
                    "Model %s failed (%s), trying next...", model, verdict.reason,
                )
                failures.append(verdict.reason)
                last_error = exc
                continue

            log_ai_call(
                model_id=model,
                prompt_tokens=completion.usage.prompt_tokens,
                completion_tokens=completion.usage.completion_tokens,
                latency_ms=(time.monotonic() - start) * 1000,
                call_type="praise",
                outcome="ok",
            )
            return self._build_reply(result, person, model)

        detail = str(last_error) if last_error is not None else "Unknown error"
        if failures and all(reason == "over_capacity" for reason in failures):
            logger.error("All %d models over capacity", len(models))
            raise ModelsOverCapacityError(
                "All models are currently over capacity. Please try again in a few moments.",
                detail=detail,
            )

        logger.error("All %d models failed. Last error: %s", len(models), detail)
        raise AllModelsFailedError(
            f"All {len(models)} models failed. Last error: {detail}",
            detail=detail,
            attempts=len(failures),
        )

    def _build_reply(
        self,
        result: CompletionResult,
        person: PersonProfile,
        model: str,
    ) -> PraiseReply:
        image_message = None
        if result.should_send_image and person.images:
            image = self._rng.choice(person.images)
            caption = result.image_praise
            if not caption or not caption.strip():
                caption = fallback_caption(person.display_name)
            image_message = ImageMessage(content=caption, images=[image])

        return PraiseReply(
            assistant_message=result.message,
            separate_image_message=image_message,
            model=model,
        )
