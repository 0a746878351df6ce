"""Provider error taxonomy and the fallback classifier.

Providers raise ProviderCallError (a normalized view of whatever the SDK
raised). The engine raises MalformedResponseError when a model answers
with something that is not the JSON object we asked for. classify_error()
turns either into Retry (advance to the next model) or Fatal (stop now).

Terminal errors surfaced to callers all derive from PraiseError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

RetryReason = Literal[
    "rate_limited",
    "over_capacity",
    "request_too_large",
    "model_unavailable",
    "malformed_response",
]

OVER_CAPACITY_RETRY_AFTER = 30  # seconds


# ---------------------------------------------------------------------------
# Raised by providers / the engine during one attempt
# ---------------------------------------------------------------------------


class ProviderCallError(Exception):
    """A failed provider call, normalized from the SDK's exception.

    Attributes:
        status_code: HTTP status, or None for transport failures.
        code: Provider error code (e.g. "rate_limit_exceeded").
        type: Provider error type (e.g. "tokens").
        message: Provider error message.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.type = type


class MalformedResponseError(Exception):
    """The model answered, but not with a valid CompletionResult JSON."""


# ---------------------------------------------------------------------------
# Terminal errors surfaced by the engine
# ---------------------------------------------------------------------------


class PraiseError(Exception):
    """Base for every terminal praise-path failure.

    Attributes:
        detail: Human-readable diagnostic string for the caller.
    """

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail


class FatalProviderError(PraiseError):
    """A non-retryable provider failure aborted the fallback loop."""


class ModelsOverCapacityError(PraiseError):
    """Every candidate failed because the provider was over capacity."""

    retry_after = OVER_CAPACITY_RETRY_AFTER


class AllModelsFailedError(PraiseError):
    """Every candidate failed; detail carries the last underlying error."""

    def __init__(self, message: str, detail: str = "", attempts: int = 0) -> None:
        super().__init__(message, detail)
        self.attempts = attempts


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Retry:
    reason: RetryReason


@dataclass(frozen=True)
class Fatal:
    reason: str


Classification = Retry | Fatal


def _lower_message(exc: ProviderCallError) -> str:
    return (exc.message or "").lower()


def is_rate_limited(exc: ProviderCallError) -> bool:
    return (
        exc.code == "rate_limit_exceeded"
        or exc.type == "tokens"
        or exc.status_code == 429
    )


def is_over_capacity(exc: ProviderCallError) -> bool:
    return exc.status_code == 503 or "over capacity" in _lower_message(exc)


def is_request_too_large(exc: ProviderCallError) -> bool:
    return exc.status_code == 413 or (
        exc.code == "rate_limit_exceeded"
        and "request too large" in _lower_message(exc)
    )


def is_model_unavailable(exc: ProviderCallError) -> bool:
    if exc.code in ("model_decommissioned", "model_not_found"):
        return True
    message = exc.message or ""
    return "decommissioned" in message or "no longer supported" in message


def classify_error(exc: Exception) -> Classification:
    """Decides whether a failed attempt should fall through to the next model.

    Precedence matters only for the reason label: request-too-large beats
    over-capacity beats rate-limit beats model-unavailable. Anything that
    matches none of them is fatal.

    Args:
        exc: The exception raised during one attempt.

    Returns:
        Retry(reason) or Fatal(reason).
    """
    if isinstance(exc, MalformedResponseError):
        return Retry("malformed_response")
    if not isinstance(exc, ProviderCallError):
        return Fatal(type(exc).__name__)

    if is_request_too_large(exc):
        return Retry("request_too_large")
    if is_over_capacity(exc):
        return Retry("over_capacity")
    if is_rate_limited(exc):
        return Retry("rate_limited")
    if is_model_unavailable(exc):
        return Retry("model_unavailable")
    return Fatal(exc.code or exc.type or "provider_error")
