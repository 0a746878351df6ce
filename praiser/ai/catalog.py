"""Model catalog — ranked, cached list of chat model candidates.

The catalog answers one question for the praise engine: which models to
try, in which order. It fetches the provider's listing, drops models that
can't chat, re-ranks survivors by the fixed priority tables in
praiser.models, and caches the result for an hour.

The list is never empty. Without a credential, on any fetch failure, or
when the listing holds nothing usable, the static FALLBACK_MODELS list is
served instead.

The catalog is an explicit object (one per engine), with the clock and
the fetcher injected so tests can drive expiry and failures directly.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from praiser.models import (
    COMPOUND_SYSTEM_MARKER,
    DECOMMISSIONED_MODELS,
    FALLBACK_MODELS,
    NON_CHAT_MARKERS,
    PREVIEW_MODEL_ORDER,
    PRODUCTION_MODEL_ORDER,
    TRANSCRIPTION_MARKER,
    TTS_MARKER,
)
from praiser.schemas import ModelDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60

ModelFetcher = Callable[[], Awaitable[list[str]]]


def _is_excluded(lower_id: str) -> bool:
    """Speech synthesis, compound systems and decommissioned ids never chat."""
    if TTS_MARKER in lower_id and TRANSCRIPTION_MARKER not in lower_id:
        return True
    if COMPOUND_SYSTEM_MARKER in lower_id:
        return True
    return any(dead in lower_id for dead in DECOMMISSIONED_MODELS)


def _is_chat_model(lower_id: str) -> bool:
    return not any(marker in lower_id for marker in NON_CHAT_MARKERS)


def rank_models(raw_ids: Iterable[str]) -> list[str]:
    """Filters and orders a raw provider listing.

    Order of the result:
    1. Production table entries present in the listing, table order.
    2. Preview table entries present in the listing, table order.
    3. Any other chat-capable id, lexical order.
    4. Each fallback id not already included.

    Transcription, guard and tts ids are never emitted, even when a
    priority table lists them. Lookups are case-insensitive; the
    provider's own casing is kept.

    Args:
        raw_ids: Model ids exactly as the provider listed them.

    Returns:
        The ranked candidate list. Never empty.
    """
    available: dict[str, str] = {}
    for model_id in raw_ids:
        lower_id = model_id.lower()
        if _is_excluded(lower_id):
            continue
        available[lower_id] = model_id

    ordered: list[str] = []
    for table in (PRODUCTION_MODEL_ORDER, PREVIEW_MODEL_ORDER):
        for model_id in table:
            original = available.pop(model_id.lower(), None)
            if original is not None and _is_chat_model(model_id.lower()):
                ordered.append(original)

    remaining = sorted(
        model_id
        for lower_id, model_id in available.items()
        if _is_chat_model(lower_id)
    )

    included = {model_id.lower() for model_id in (*ordered, *remaining)}
    for fallback in FALLBACK_MODELS:
        if fallback.lower() not in included:
            remaining.append(fallback)

    return ordered + remaining


class ModelCatalog:
    """TTL-cached model candidate list.

    Args:
        fetcher: Coroutine function returning the raw listing, or None
            when no credential is configured (fetch is skipped).
        clock: Monotonic clock in seconds.
        ttl: Cache lifetime in seconds. A list whose age is >= ttl is
            stale.
    """

    def __init__(
        self,
        fetcher: ModelFetcher | None,
        clock: Callable[[], float] = time.monotonic,
        ttl: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._clock = clock
        self._ttl = ttl
        self._models: list[str] | None = None
        self._fetched: frozenset[str] = frozenset()
        self._fetched_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._models is not None
            and self._clock() - self._fetched_at < self._ttl
        )

    async def get_available_models(self) -> list[str]:
        """Returns the ranked candidate list, refreshing it when stale.

        At most one refresh runs at a time; callers that queued behind it
        get the list it produced.
        """
        if self._is_fresh():
            return list(self._models)

        async with self._lock:
            if not self._is_fresh():
                self._models, self._fetched = await self._load()
                self._fetched_at = self._clock()
        return list(self._models)

    async def _load(self) -> tuple[list[str], frozenset[str]]:
        if self._fetcher is None:
            logger.warning("GROQ_API_KEY not configured, using fallback models")
            return list(FALLBACK_MODELS), frozenset()

        try:
            raw_ids = await self._fetcher()
        except Exception:
            logger.exception("Failed to fetch model listing, using fallback models")
            return list(FALLBACK_MODELS), frozenset()

        if not raw_ids:
            logger.warning("Model listing was empty, using fallback models")
            return list(FALLBACK_MODELS), frozenset()

        ranked = rank_models(raw_ids)
        logger.info("Model catalog refreshed: %d candidates", len(ranked))
        return ranked, frozenset(raw_ids)

    async def descriptors(self) -> list[ModelDescriptor]:
        """Returns the current list annotated with provenance and rank."""
        models = await self.get_available_models()
        return [
            ModelDescriptor(
                model_id=model_id,
                source="fetched" if model_id in self._fetched else "fallback",
                rank=rank,
            )
            for rank, model_id in enumerate(models)
        ]

    def invalidate(self) -> None:
        """Forces the next call to refresh."""
        self._models = None
        self._fetched = frozenset()
