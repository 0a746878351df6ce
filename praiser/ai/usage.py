"""Structured usage logging for AI calls.

Emits one structured log line per completion attempt with the fields
needed for cost and reliability analysis. Machine-parseable via the
``extra`` dict — standard JSON log formatters pick these up.

Logger name: ``praiser.ai.usage``
"""

import logging

logger = logging.getLogger("praiser.ai.usage")


def log_ai_call(
    *,
    model_id: str,
    prompt_tokens: int,
    completion_tokens: int,
    latency_ms: float,
    call_type: str,
    outcome: str,
) -> None:
    """Emits a structured INFO log for one completion attempt.

    Args:
        model_id: The model identifier used for this call.
        prompt_tokens: Number of input tokens consumed (0 on failure).
        completion_tokens: Number of output tokens generated (0 on failure).
        latency_ms: Wall-clock duration of the call in milliseconds.
        call_type: "praise" or "assistant".
        outcome: "ok", a retry reason, or "fatal".
    """
    logger.info(
        "AI call: %s %s outcome=%s tokens_in=%d tokens_out=%d latency=%.0fms",
        call_type,
        model_id,
        outcome,
        prompt_tokens,
        completion_tokens,
        latency_ms,
        extra={
            "model_id": model_id,
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "latency_ms": latency_ms,
            "call_type": call_type,
            "outcome": outcome,
        },
    )
