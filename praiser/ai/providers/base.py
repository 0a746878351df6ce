"""Base chat provider interface.

Defines the contract that every provider implementation (Groq, Mock)
must satisfy: list the models it serves, run one chat completion
against one named model, and transcribe audio.

Leaf module — imports only stdlib.
No schemas, no config, no framework imports.

Failures MUST surface as praiser.ai.errors.ProviderCallError so the
fallback classifier can read status, code, type and message without
knowing which SDK produced them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UsageInfo:
    """Token usage from a completed call. Used for usage logging."""

    prompt_tokens: int
    completion_tokens: int


@dataclass(frozen=True)
class Completion:
    """Text payload of one completion plus its usage."""

    text: str
    usage: UsageInfo


class ChatProvider(ABC):
    """Abstract base for chat model providers.

    One call = one model. Providers never fall back across models on
    their own; the praise engine owns that loop.
    """

    @abstractmethod
    async def list_models(self) -> list[str]:
        """Returns the raw model ids the provider currently serves.

        Raises:
            ProviderCallError: On any transport or API failure.
        """

    @abstractmethod
    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        json_mode: bool = False,
    ) -> Completion:
        """Runs one chat completion.

        Args:
            model: Model id to call.
            messages: {"role": ..., "content": ...} dicts, system first.
            temperature: Sampling temperature.
            json_mode: Ask the provider for a JSON-object response.

        Returns:
            The completion text (may be empty) and its usage.

        Raises:
            ProviderCallError: On any transport or API failure.
        """

    @abstractmethod
    async def transcribe(
        self,
        *,
        audio: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> str:
        """Transcribes an audio clip to text.

        Raises:
            ProviderCallError: On any transport or API failure.
        """
