"""Tests for praiser.ai.catalog — ranking, TTL cache, and fallbacks."""

import asyncio

import pytest

from praiser.ai.catalog import ModelCatalog, rank_models
from praiser.models import FALLBACK_MODELS, PRODUCTION_MODEL_ORDER


class TestRankModels:
    def test_production_before_preview_before_unranked(self) -> None:
        ranked = rank_models([
            "zeta-chat",
            "openai/gpt-oss-120b",
            "llama-3.1-8b-instant",
            "alpha-chat",
            "llama-3.3-70b-versatile",
        ])
        production = [m for m in PRODUCTION_MODEL_ORDER if m in ranked]
        assert ranked[: len(production)] == production
        assert ranked.index("alpha-chat") < ranked.index("zeta-chat")
        assert ranked.index("llama-3.1-8b-instant") < ranked.index("alpha-chat")

    def test_excludes_tts_and_compound_systems(self) -> None:
        ranked = rank_models([
            "playai-tts",
            "groq/compound",
            "groq/compound-mini",
            "llama-3.3-70b-versatile",
        ])
        assert "playai-tts" not in ranked
        assert not any("groq/compound" in m for m in ranked)

    def test_excludes_decommissioned(self) -> None:
        ranked = rank_models(["llama-3.1-70b-versatile", "llama-3.3-70b-versatile"])
        assert "llama-3.1-70b-versatile" not in ranked

    def test_unlisted_whisper_models_are_dropped(self) -> None:
        ranked = rank_models(["distil-whisper-large-v3-en", "mystery-model"])
        assert "distil-whisper-large-v3-en" not in ranked
        assert "mystery-model" in ranked

    def test_ranked_whisper_and_guard_models_never_chat(self) -> None:
        ranked = rank_models([
            "whisper-large-v3",
            "whisper-large-v3-turbo",
            "meta-llama/llama-guard-4-12b",
            "meta-llama/llama-prompt-guard-2-86m",
            "qwen/qwen3-32b",
        ])
        assert "whisper-large-v3" not in ranked
        assert "whisper-large-v3-turbo" not in ranked
        assert "meta-llama/llama-guard-4-12b" not in ranked
        assert "meta-llama/llama-prompt-guard-2-86m" not in ranked
        assert ranked[0] == "qwen/qwen3-32b"

    def test_ranked_tts_models_never_chat(self) -> None:
        ranked = rank_models(["playai-tts", "playai-tts-arabic", "qwen/qwen3-32b"])
        assert not any("tts" in m for m in ranked)

    def test_safeguard_chat_model_is_kept(self) -> None:
        ranked = rank_models(["openai/gpt-oss-safeguard-20b"])
        assert ranked[0] == "openai/gpt-oss-safeguard-20b"

    def test_case_insensitive_lookup_keeps_provider_casing(self) -> None:
        ranked = rank_models(["LLAMA-3.3-70B-Versatile"])
        assert ranked[0] == "LLAMA-3.3-70B-Versatile"

    def test_fallbacks_appended_once(self) -> None:
        ranked = rank_models(["mystery-model"])
        for fallback in FALLBACK_MODELS:
            assert ranked.count(fallback) == 1
        assert ranked[0] == "mystery-model"

    def test_never_empty(self) -> None:
        assert rank_models([]) == list(FALLBACK_MODELS)


class TestModelCatalog:
    @pytest.mark.asyncio
    async def test_without_fetcher_serves_fallback(self) -> None:
        catalog = ModelCatalog(fetcher=None)
        assert await catalog.get_available_models() == list(FALLBACK_MODELS)

    @pytest.mark.asyncio
    async def test_fetch_failure_serves_fallback(self, mock_provider) -> None:
        provider = mock_provider(models_error=RuntimeError("boom"))
        catalog = ModelCatalog(fetcher=provider.list_models)
        assert await catalog.get_available_models() == list(FALLBACK_MODELS)

    @pytest.mark.asyncio
    async def test_empty_listing_serves_fallback(self, mock_provider) -> None:
        catalog = ModelCatalog(fetcher=mock_provider(models=[]).list_models)
        assert await catalog.get_available_models() == list(FALLBACK_MODELS)

    @pytest.mark.asyncio
    async def test_cached_within_ttl(self, mock_provider, fake_clock) -> None:
        provider = mock_provider(models=["llama-3.3-70b-versatile"])
        catalog = ModelCatalog(fetcher=provider.list_models, clock=fake_clock, ttl=3600)

        first = await catalog.get_available_models()
        fake_clock.advance(3599)
        second = await catalog.get_available_models()

        assert first == second
        assert provider.list_calls == 1

    @pytest.mark.asyncio
    async def test_refreshes_at_ttl(self, mock_provider, fake_clock) -> None:
        provider = mock_provider(models=["llama-3.3-70b-versatile"])
        catalog = ModelCatalog(fetcher=provider.list_models, clock=fake_clock, ttl=3600)

        await catalog.get_available_models()
        fake_clock.advance(3600)
        await catalog.get_available_models()

        assert provider.list_calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self, mock_provider) -> None:
        provider = mock_provider(models=["llama-3.3-70b-versatile"])
        catalog = ModelCatalog(fetcher=provider.list_models)

        results = await asyncio.gather(
            *(catalog.get_available_models() for _ in range(5))
        )

        assert provider.list_calls == 1
        assert all(result == results[0] for result in results)

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self, mock_provider) -> None:
        catalog = ModelCatalog(fetcher=mock_provider().list_models)
        models = await catalog.get_available_models()
        models.clear()
        assert await catalog.get_available_models()

    @pytest.mark.asyncio
    async def test_invalidate_forces_refresh(self, mock_provider) -> None:
        provider = mock_provider()
        catalog = ModelCatalog(fetcher=provider.list_models)
        await catalog.get_available_models()
        catalog.invalidate()
        await catalog.get_available_models()
        assert provider.list_calls == 2

    @pytest.mark.asyncio
    async def test_descriptors_mark_provenance(self, mock_provider) -> None:
        catalog = ModelCatalog(fetcher=mock_provider(models=["mystery-model"]).list_models)
        descriptors = await catalog.descriptors()

        assert descriptors[0].model_id == "mystery-model"
        assert descriptors[0].source == "fetched"
        assert descriptors[0].rank == 0
        assert {d.source for d in descriptors[1:]} == {"fallback"}

    @pytest.mark.asyncio
    async def test_fetch_failure_is_cached_for_the_hour(self, mock_provider, fake_clock) -> None:
        provider = mock_provider(models_error=RuntimeError("boom"))
        catalog = ModelCatalog(fetcher=provider.list_models, clock=fake_clock)

        first = await catalog.get_available_models()
        fake_clock.advance(59 * 60)
        second = await catalog.get_available_models()

        assert first == second == list(FALLBACK_MODELS)
        assert len(first) == 3
        assert provider.list_calls == 1
