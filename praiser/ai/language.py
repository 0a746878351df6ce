"""Conversation language detection.

Two independent checks feed the prompt layer:

- Greek gets a three-signal "sticky" policy over the conversation: once a
  conversation has gone Greek it stays Greek instead of flip-flopping
  between turns.
- Every other script (Cyrillic, Arabic, Hebrew, CJK) gets a single-pass
  scan of the whole text blob, with no continuation logic.

Only Greek is sticky.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Literal

from praiser.schemas import ConversationMessage

LanguageTag = Literal["Greek", "Cyrillic", "Arabic", "Hebrew", "CJK"]

# Greek and Coptic + Greek Extended.
GREEK_PATTERN = re.compile(r"[\u0370-\u03FF\u1F00-\u1FFF]")

# Checked in order; the first hit wins.
_SCRIPT_PATTERNS: tuple[tuple[LanguageTag, re.Pattern[str]], ...] = (
    ("Greek", GREEK_PATTERN),
    ("Cyrillic", re.compile(r"[\u0400-\u04FF]")),
    ("Arabic", re.compile(r"[\u0600-\u06FF]")),
    ("Hebrew", re.compile(r"[\u0590-\u05FF]")),
    ("CJK", re.compile(r"[\u4E00-\u9FFF\u3040-\u309F\u30A0-\u30FF\uAC00-\uD7AF]")),
)

# How many of the most recent user / assistant turns count as "recent".
RECENT_TURNS = 3

# More Greek codepoints than this anywhere in the conversation forces Greek.
GREEK_CHAR_THRESHOLD = 5


def has_greek(text: str) -> bool:
    return GREEK_PATTERN.search(text) is not None


def count_greek(text: str) -> int:
    return len(GREEK_PATTERN.findall(text))


def _joined(messages: Iterable[ConversationMessage]) -> str:
    return " ".join(message.content for message in messages)


def _recent_text(messages: Sequence[ConversationMessage], role: str) -> str:
    same_role = [message for message in messages if message.role == role]
    return _joined(same_role[-RECENT_TURNS:])


def should_use_greek(messages: Sequence[ConversationMessage]) -> bool:
    """Applies the sticky Greek policy to a conversation.

    Greek wins if any of these hold:
    - one of the last 3 user messages contains Greek,
    - one of the last 3 assistant messages contains Greek,
    - the whole conversation holds more than 5 Greek codepoints.

    Args:
        messages: The conversation, oldest first.

    Returns:
        True when the reply must be forced into Greek.
    """
    if has_greek(_recent_text(messages, "user")):
        return True
    if has_greek(_recent_text(messages, "assistant")):
        return True
    return count_greek(_joined(messages)) > GREEK_CHAR_THRESHOLD


def detect_script(text: str) -> LanguageTag | None:
    """Single-pass script scan. Returns None for Latin/unknown text."""
    for tag, pattern in _SCRIPT_PATTERNS:
        if pattern.search(text):
            return tag
    return None


def detect_language(messages: Sequence[ConversationMessage]) -> LanguageTag | None:
    """Resolves the language the reply must be written in.

    Greek goes through the sticky policy; everything else through the
    one-shot scan of all message contents. None means "no forcing".
    """
    if should_use_greek(messages):
        return "Greek"
    return detect_script(_joined(messages))
