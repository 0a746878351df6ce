"""Chat session controller — message ordering and the in-flight guard.

A ChatSession owns one conversation. send() appends the user message,
asks the engine for a reply, and appends the assistant message plus the
optional companion image message. Only one send() may be outstanding per
session: a submission that arrives while another is in flight is dropped,
not queued.

Failures never escape send(). They become exactly one system-role message
in the conversation, and the processing flag is always cleared.

PraiseVolumeSchedule drives the praise volume from the number of user
questions asked so far (manual, auto-random, crescendo modes).
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Literal

from praiser.ai.errors import ModelsOverCapacityError, PraiseError
from praiser.ai.praise import PraiseEngine
from praiser.schemas import ConversationMessage, MessageImage, PersonProfile

logger = logging.getLogger(__name__)

PraiseMode = Literal["manual", "auto-random", "crescendo"]

GENERIC_FAILURE = "Something went wrong. Please try again."

AUTO_RANDOM_VALUES = (100, 25, 50, 75)
AUTO_RANDOM_WINDOW = 5
CRESCENDO_LENGTH = 10

CRESCENDO_MESSAGES = (
    "Wow... that was intense! 😊",
    "Phew! That felt amazing! 😌",
    "Incredible! I need a moment... 😅",
    "That was something else! 😊",
    "Amazing! Let me catch my breath... 😌",
)


def failure_message(detail: str) -> str:
    return f"I couldn't reach the AI: {detail}. Please try again."


class PraiseVolumeSchedule:
    """Computes the praise volume for the Nth user question.

    Modes:
        manual: always ``manual_volume``.
        auto-random: question 1 is 0; questions 2-5 take 100/25/50/75 in a
            shuffled order; afterwards the four values cycle.
        crescendo: climbs linearly to 100 over 10 questions, then emits a
            completion message and restarts at 0 on the next question.

    Args:
        mode: One of the modes above.
        manual_volume: Volume for manual mode, 0-100.
        rng: Random source for shuffling and message choice.
    """

    def __init__(
        self,
        mode: PraiseMode = "manual",
        manual_volume: int = 50,
        rng: random.Random | None = None,
    ) -> None:
        if not 0 <= manual_volume <= 100:
            raise ValueError(f"manual_volume must be in [0, 100], got {manual_volume}")
        self.mode = mode
        self.manual_volume = manual_volume
        self._rng = rng or random.Random()
        self.reset()

    def reset(self) -> None:
        """Starts over, e.g. when the user opens a new chat."""
        self._sequence: list[int] = []
        self._cycle_start = 0
        self._cycle_complete = False
        self.pending_message: str | None = None

    def volume_for(self, question_count: int) -> int:
        """Returns the volume for the given number of user questions.

        In crescendo mode, reaching the top sets ``pending_message``.
        """
        self.pending_message = None
        if question_count <= 0:
            return 0 if self.mode != "manual" else self.manual_volume

        if self.mode == "auto-random":
            return self._auto_random(question_count)
        if self.mode == "crescendo":
            return self._crescendo(question_count)
        return self.manual_volume

    def _auto_random(self, question_count: int) -> int:
        if question_count == 1 or not self._sequence:
            shuffled = list(AUTO_RANDOM_VALUES)
            self._rng.shuffle(shuffled)
            self._sequence = [0, *shuffled]
            if question_count == 1:
                return 0
        if question_count <= AUTO_RANDOM_WINDOW:
            return self._sequence[question_count - 1]
        index = ((question_count - 1) % (len(self._sequence) - 1)) + 1
        return self._sequence[index]

    def _crescendo(self, question_count: int) -> int:
        if self._cycle_complete:
            self._cycle_start = question_count
            self._cycle_complete = False
            return 0

        position = question_count - self._cycle_start
        position = max(0, min(CRESCENDO_LENGTH, position))
        if position == CRESCENDO_LENGTH:
            self._cycle_complete = True
            self.pending_message = self._rng.choice(CRESCENDO_MESSAGES)
        return round(position / CRESCENDO_LENGTH * 100)


class ChatSession:
    """One conversation plus its in-flight guard.

    Args:
        engine: The praise engine.
        person: Profile to praise, or None for a plain assistant.
        schedule: Volume schedule; defaults to manual at 50.
    """

    def __init__(
        self,
        engine: PraiseEngine,
        person: PersonProfile | None = None,
        schedule: PraiseVolumeSchedule | None = None,
    ) -> None:
        self._engine = engine
        self.person = person
        self.schedule = schedule or PraiseVolumeSchedule()
        self.messages: list[ConversationMessage] = []
        self.processing = False
        self._in_flight = False

    @property
    def question_count(self) -> int:
        return sum(1 for message in self.messages if message.role == "user")

    def reset(self) -> None:
        """Clears the conversation. Refused while a request is in flight."""
        if self._in_flight:
            raise RuntimeError("Cannot reset a session with a request in flight")
        self.messages = []
        self.schedule.reset()

    async def send(
        self,
        content: str,
        images: Sequence[MessageImage] | None = None,
    ) -> list[ConversationMessage] | None:
        """Submits one user message and waits for the reply.

        Args:
            content: The user's text. Leading/trailing whitespace is trimmed.
            images: Optional attachments.

        Returns:
            The messages appended after the user message, or None if the
            submission was dropped (empty, or another one in flight).
        """
        trimmed = content.strip()
        if (not trimmed and not images) or self._in_flight:
            return None

        self._in_flight = True
        self.processing = True
        try:
            self.messages.append(
                ConversationMessage(
                    role="user", content=trimmed, images=list(images) if images else None,
                )
            )
            volume = self.schedule.volume_for(self.question_count)
            appended = await self._exchange(volume)
            if self.schedule.pending_message:
                appended.append(
                    ConversationMessage(role="assistant", content=self.schedule.pending_message)
                )
            self.messages.extend(appended)
            return appended
        finally:
            self.processing = False
            self._in_flight = False

    async def _exchange(self, volume: int) -> list[ConversationMessage]:
        history = [m for m in self.messages if m.role in ("user", "assistant")]
        try:
            reply = await self._engine.respond(self.person, volume, history)
        except ModelsOverCapacityError as exc:
            logger.warning("Chat request failed: %s", exc)
            return [ConversationMessage(role="system", content=failure_message(str(exc)))]
        except PraiseError as exc:
            logger.warning("Chat request failed: %s", exc)
            detail = exc.detail or str(exc)
            return [ConversationMessage(role="system", content=failure_message(detail))]
        except Exception:
            logger.exception("Chat request failed unexpectedly")
            return [ConversationMessage(role="system", content=GENERIC_FAILURE)]

        appended: list[ConversationMessage] = []
        last_assistant = next(
            (m for m in reversed(self.messages) if m.role == "assistant"), None,
        )
        duplicate = (
            last_assistant is not None
            and last_assistant.content == reply.assistant_message
        )
        if reply.assistant_message and not duplicate:
            appended.append(
                ConversationMessage(role="assistant", content=reply.assistant_message)
            )
        if reply.separate_image_message is not None:
            appended.append(
                ConversationMessage(
                    role="assistant",
                    content=reply.separate_image_message.content,
                    images=reply.separate_image_message.images,
                )
            )
        return appended
