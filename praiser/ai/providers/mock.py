"""Mock chat provider for testing and development.

Deterministic, zero-cost ChatProvider implementation driven by a script
of per-call outcomes. Used by:
- Engine, catalog and route tests (via conftest.mock_provider fixture)
- Reference implementation of the ChatProvider contract

Imports only from base.py.
"""

from dataclasses import dataclass

from praiser.ai.providers.base import ChatProvider, Completion, UsageInfo

_DEFAULT_RESPONSE = '{"message": "Hello from MockProvider"}'
_DEFAULT_MODELS = ["mock-large", "mock-small"]
_DEFAULT_USAGE = UsageInfo(prompt_tokens=10, completion_tokens=5)


@dataclass(frozen=True)
class RecordedCall:
    """One complete() call as seen by the mock."""

    model: str
    messages: list[dict[str, str]]
    temperature: float
    json_mode: bool


class MockProvider(ChatProvider):
    """Scripted provider for tests.

    Each complete() call consumes the next outcome: a string is returned
    as the completion text, an exception is raised. Once the script runs
    out, the last outcome repeats.

    Args:
        outcomes: Per-call results. Defaults to one JSON message.
        models: Ids returned by list_models().
        models_error: If set, list_models() raises it.
        transcript: Text returned by transcribe().
    """

    def __init__(
        self,
        outcomes: list[str | Exception] | None = None,
        models: list[str] | None = None,
        models_error: Exception | None = None,
        transcript: str = "mock transcript",
    ) -> None:
        self.outcomes = outcomes if outcomes is not None else [_DEFAULT_RESPONSE]
        self.models = models if models is not None else list(_DEFAULT_MODELS)
        self.models_error = models_error
        self.transcript = transcript
        self.calls: list[RecordedCall] = []
        self.list_calls = 0

    async def list_models(self) -> list[str]:
        self.list_calls += 1
        if self.models_error is not None:
            raise self.models_error
        return list(self.models)

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        json_mode: bool = False,
    ) -> Completion:
        """Records the call, then returns or raises the next outcome."""
        self.calls.append(
            RecordedCall(
                model=model,
                messages=messages,
                temperature=temperature,
                json_mode=json_mode,
            )
        )
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return Completion(text=outcome, usage=_DEFAULT_USAGE)

    async def transcribe(
        self,
        *,
        audio: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> str:
        return self.transcript
