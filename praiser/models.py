"""Model ID registry — single source of truth for Groq model identifiers.

Every completion and transcription call resolves its model ID through this
module. The rest of the codebase imports the priority tables and fallback
constants from here — no raw model ID strings anywhere else.

Three layers:
  Layer 1: FALLBACK_MODELS — the static list used when the live listing
           is unavailable (no credential, network failure, empty payload)
  Layer 2: PRODUCTION_MODEL_ORDER / PREVIEW_MODEL_ORDER — ranked tables,
           ordered for multilingual (notably Greek) fluency
  Layer 3: exclusion markers — ids that never take part in chat

To re-rank: move a line in one of the tables below.
"""

# ---------------------------------------------------------------------------
# Layer 1: Static fallback (always present in the final catalog)
# ---------------------------------------------------------------------------

LLAMA_3_3_70B: str = "llama-3.3-70b-versatile"
LLAMA_3_1_8B: str = "llama-3.1-8b-instant"
LLAMA_3_3_8B: str = "llama-3.3-8b-instant"

FALLBACK_MODELS: tuple[str, ...] = (
    LLAMA_3_3_70B,
    LLAMA_3_1_8B,
    LLAMA_3_3_8B,
)

# --- Audio ---
WHISPER_TURBO: str = "whisper-large-v3-turbo"
TRANSCRIPTION_MODEL: str = WHISPER_TURBO


# ---------------------------------------------------------------------------
# Layer 2: Priority tables (descending preference)
# ---------------------------------------------------------------------------
# Larger models first: they hold Greek grammar and register far better.
# Guard, whisper and tts entries are recorded for completeness only; the
# catalog filters them out with NON_CHAT_MARKERS before ranking.

PRODUCTION_MODEL_ORDER: tuple[str, ...] = (
    "openai/gpt-oss-120b",
    LLAMA_3_3_70B,
    "openai/gpt-oss-20b",
    LLAMA_3_1_8B,
    "meta-llama/llama-guard-4-12b",
    "whisper-large-v3",
    WHISPER_TURBO,
)

PREVIEW_MODEL_ORDER: tuple[str, ...] = (
    "qwen/qwen3-32b",
    "openai/gpt-oss-safeguard-20b",
    "meta-llama/llama-4-maverick-17b-128e-instruct",
    "meta-llama/llama-4-scout-17b-16e-instruct",
    "moonshotai/kimi-k2-instruct-0905",  # Chinese-first, weak Greek
    "meta-llama/llama-prompt-guard-2-22m",
    "meta-llama/llama-prompt-guard-2-86m",
    "playai-tts",
    "playai-tts-arabic",
)


# ---------------------------------------------------------------------------
# Layer 3: Exclusion markers (matched against lower-cased ids)
# ---------------------------------------------------------------------------

TTS_MARKER: str = "tts"
TRANSCRIPTION_MARKER: str = "whisper"
COMPOUND_SYSTEM_MARKER: str = "groq/compound"
COMPOUND_MARKER: str = "compound"
GUARD_MARKERS: tuple[str, ...] = ("llama-guard", "prompt-guard")

# Listed by the provider but never selected for chat.
NON_CHAT_MARKERS: tuple[str, ...] = (
    TTS_MARKER,
    TRANSCRIPTION_MARKER,
    COMPOUND_MARKER,
    *GUARD_MARKERS,
)
DECOMMISSIONED_MODELS: tuple[str, ...] = ("llama-3.1-70b-versatile",)
