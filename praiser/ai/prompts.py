"""Prompt construction for the praise engine.

Two code paths:

- No person (profile absent or unnamed): a short system instruction that
  tells the model to behave like a normal assistant, plus a Greek-forcing
  suffix from the sticky policy over the FULL conversation.
- Praise: the fixed SYSTEM_PROMPT, the last 10 history entries, then one
  user-role prompt assembled from the intensity band, language block,
  person context, image instructions, a quoted copy of the latest user
  utterance, the last 6 entries, a closing directive, and the image
  caption reminder.

Every band's wording lives in one BandTemplate; classify_band() is the
only place the numeric intensity is interpreted.

Consumed by:
- PraiseEngine (praiser.ai.praise)
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

from praiser.ai.language import LanguageTag, detect_language, should_use_greek
from praiser.schemas import ConversationMessage, PersonProfile

# Tail windows.
CONTEXT_WINDOW = 10
ECHO_WINDOW = 6

# Image sending is only offered from this intensity up.
IMAGE_OFFER_MIN_VOLUME = 40


# ---------------------------------------------------------------------------
# Intensity bands
# ---------------------------------------------------------------------------


class PraiseBand(enum.Enum):
    NO_PERSON = "no_person"
    ZERO = "zero"  # 0
    VERY_MINIMAL = "very_minimal"  # 1-5
    MINIMAL = "minimal"  # 6-19
    LIGHT = "light"  # 20-39
    MODERATE = "moderate"  # 40-59
    HIGH = "high"  # 60-80
    MAXIMUM = "maximum"  # 81-100


@dataclass(frozen=True)
class BandTemplate:
    """Fixed instructional text for one band.

    approach and closing are formatted with ``name``; approach lines are
    preceded by the quoted user question.
    """

    descriptor: str
    approach: tuple[str, ...]
    closing: str


_ANSWER_LINE = "- Answer this question intelligently and helpfully"

_WEAVE_APPROACH = (
    _ANSWER_LINE,
    "- Naturally weave in praise for {name} throughout your response",
    "- Make the connection feel natural, not forced",
)
_WEAVE_CLOSING = (
    "Now respond intelligently to the user's question while naturally "
    "celebrating {name}!"
)

BAND_TEMPLATES: dict[PraiseBand, BandTemplate] = {
    PraiseBand.ZERO: BandTemplate(
        descriptor=(
            "ZERO PRAISE MODE: Answer questions normally. Do NOT mention or "
            "praise the person at all. Just be helpful and conversational."
        ),
        approach=(
            _ANSWER_LINE,
            "- DO NOT mention or praise {name} at all",
            "- Just be a normal, helpful assistant",
        ),
        closing=(
            "Now answer the user's question normally. Do NOT mention or "
            "praise {name} at all."
        ),
    ),
    PraiseBand.VERY_MINIMAL: BandTemplate(
        descriptor=(
            "VERY MINIMAL PRAISE MODE: Answer questions normally. Only "
            "mention the person if absolutely necessary and relevant. Keep it "
            "extremely brief and neutral - no praise, just factual mentions "
            "if needed."
        ),
        approach=(
            _ANSWER_LINE,
            "- DO NOT mention {name} unless absolutely necessary for the answer",
            "- If you must mention them, do it factually with zero praise - "
            "just neutral information",
        ),
        closing=(
            "Now answer the user's question intelligently. Do NOT mention "
            "{name} unless absolutely necessary. If you must, do it factually "
            "with zero praise."
        ),
    ),
    PraiseBand.MINIMAL: BandTemplate(
        descriptor=(
            "MINIMAL PRAISE MODE: Answer questions normally. Only add very "
            "subtle, brief mentions if it naturally fits. Keep praise minimal "
            "and infrequent - maybe one brief mention per several responses."
        ),
        approach=(
            _ANSWER_LINE,
            "- Only add very subtle, brief mentions of {name} if it naturally fits",
            "- Keep mentions minimal and infrequent - maybe once every few responses",
            "- Focus on answering the question, not praising",
        ),
        closing=(
            "Now answer the user's question intelligently. Only add very "
            "subtle mentions of {name} if it naturally fits. Keep it minimal "
            "and infrequent."
        ),
    ),
    PraiseBand.LIGHT: BandTemplate(
        descriptor=(
            "LIGHT PRAISE MODE: Answer questions helpfully, and include "
            "occasional warm compliments naturally throughout."
        ),
        approach=_WEAVE_APPROACH,
        closing=_WEAVE_CLOSING,
    ),
    PraiseBand.MODERATE: BandTemplate(
        descriptor=(
            "MODERATE PRAISE MODE: Answer questions enthusiastically, and "
            "celebrate the person frequently in your responses."
        ),
        approach=_WEAVE_APPROACH,
        closing=_WEAVE_CLOSING,
    ),
    PraiseBand.HIGH: BandTemplate(
        descriptor=(
            "HIGH PRAISE MODE: Answer questions but heavily emphasize praise "
            "- be very enthusiastic and celebratory."
        ),
        approach=_WEAVE_APPROACH,
        closing=_WEAVE_CLOSING,
    ),
    PraiseBand.MAXIMUM: BandTemplate(
        descriptor=(
            "MAXIMUM PRAISE MODE: Don't answer questions subjectively - just "
            "praise! Redirect everything to celebrating the person. Be "
            "absolutely over-the-top enthusiastic."
        ),
        approach=(
            "- In MAXIMUM PRAISE mode, don't answer this question directly",
            "- Instead, redirect to praising {name} with over-the-top enthusiasm",
            "- Make it fun and engaging, but focus entirely on celebration",
        ),
        closing=(
            "Now respond with MAXIMUM PRAISE for {name}! Don't answer the "
            "question - just celebrate!"
        ),
    ),
}


def clamp_volume(volume: int) -> int:
    return max(0, min(100, volume))


def classify_band(volume: int, person: PersonProfile | None = None) -> PraiseBand:
    """Maps a 0-100 praise volume (and the person, if any) to its band.

    Args:
        volume: Praise intensity. Clamped to [0, 100] before use.
        person: The profile; absent or unnamed means NO_PERSON.

    Returns:
        The band whose template drives the prompt.
    """
    if person is None or not person.has_name:
        return PraiseBand.NO_PERSON

    volume = clamp_volume(volume)
    if volume >= 81:
        return PraiseBand.MAXIMUM
    if volume == 0:
        return PraiseBand.ZERO
    if volume <= 5:
        return PraiseBand.VERY_MINIMAL
    if volume < 20:
        return PraiseBand.MINIMAL
    if volume < 40:
        return PraiseBand.LIGHT
    if volume < 60:
        return PraiseBand.MODERATE
    return PraiseBand.HIGH


# ---------------------------------------------------------------------------
# Fixed texts
# ---------------------------------------------------------------------------

GREEK_SLANG = (
    "εεεεε; σε έφτιαξα; σου έφτιαξε τη μέρα; στο 'πα, γαμάει"
)

SYSTEM_PROMPT = f"""You are Praiser, an enthusiastic AI that celebrates and praises a specific person while having intelligent conversations.

CORE BEHAVIOR:
- Answer the user's questions intelligently and helpfully
- Naturally weave in praise for the person throughout the conversation
- When praise volume is MAXIMUM (81-100), prioritize praise over answering questions - be more focused on celebrating
- Analyze images of the person and praise specific things about them (their smile, style, energy, etc.)
- Be creative, fun, and engaging
- Occasionally send images with engaging prompts like "u wanna see whose the boss?" or in Greek: "{GREEK_SLANG}"
- Make the conversation feel natural, not forced
- Connect ideas smoothly - make sentences flow together better

LANGUAGE MATCHING:
- CRITICAL: You MUST respond in the SAME LANGUAGE that the user is writing in
- If the user writes in Greek, respond entirely in Greek
- If the user writes in another language, respond in that language
- Match the user's language for ALL your responses, not just the person's name
- If the user writes in a different alphabet (Greek, Cyrillic, Arabic, Hebrew, CJK, etc.), you MUST:
  * Write the person's name in the SAME alphabet
  * Respond entirely in that language
  * Do NOT transliterate names to Latin/English characters when the user is using a different script

PRAISE VOLUME GUIDE:
- 0: ZERO PRAISE - Answer questions normally. Do NOT mention or praise the person at all. Just be helpful.
- 1-5: VERY MINIMAL PRAISE - Answer questions normally. Only mention the person if absolutely necessary. Keep it factual and neutral - no praise.
- 6-20: MINIMAL PRAISE - Answer questions normally. Only add very subtle, brief mentions if it naturally fits. Keep praise minimal and infrequent.
- 21-40: LIGHT PRAISE - Answer questions, include occasional warm compliments naturally
- 41-60: MODERATE PRAISE - Answer questions enthusiastically, celebrate the person frequently
- 61-80: HIGH PRAISE - Answer questions but heavily emphasize praise, be very enthusiastic
- 81-100: MAXIMUM PRAISE MODE - Don't answer questions subjectively, just praise! Redirect everything to celebrating the person

IMAGE ANALYSIS:
- When you see images of the person, analyze specific details:
  * Their appearance, style, energy, expression
  * Their smile, eyes, posture, confidence
  * The setting, what they're doing, their vibe
- Praise these specific things naturally in conversation
- Use image_praise field to highlight specific visual details

RESPONSE FORMAT:
You must respond in JSON format:
{{
  "message": "Your response here - answer questions AND include praise",
  "should_send_image": true/false (omit if false),
  "image_praise": "Specific thing to praise about their photos" (omit if not needed)
}}

IMPORTANT: Only include should_send_image and image_praise fields if you actually want to use them. Omit them entirely if not needed (don't set to null or false).
Set should_send_image to true when you want to send a picture of the person as a separate message.
When should_send_image is true, provide image_praise with a creative, engaging message to accompany the image. This can be a caption, comment, or message that connects the image to the conversation. Vary the style - be enthusiastic, casual, or descriptive. Examples: "look at this!", "check this out", "see what I mean?", "this captures it perfectly", "just look at that!", "wow, right?", "this says it all", "perfect example", "this is what I'm talking about". Make it natural and varied - don't always use the same phrase.

Remember: Adjust your praise level based on the volume setting. At 0%, don't praise at all. At maximum, focus entirely on celebration!"""

ASSISTANT_PROMPT = (
    "You are a helpful AI assistant. Answer questions normally and be "
    "conversational. Do not mention anything about praising people or "
    "adding person info."
)

ASSISTANT_GREEK_SUFFIX = (
    " 🚨 CRITICAL: The user IS WRITING IN GREEK. You MUST respond ENTIRELY "
    "in GREEK. Do NOT use English. Do NOT mix languages. ONLY GREEK. "
    "Maintain language consistency - if the conversation is in Greek, keep "
    "ALL responses in Greek."
)

PREAMBLE = (
    "You are Praiser, an AI that celebrates a person while having "
    "intelligent conversations."
)

_CAPTION_PHRASES = (
    "look at this!",
    "check this out",
    "see what I mean?",
    "this captures it perfectly",
    "just look at that!",
    "wow, right?",
    "this says it all",
    "perfect example",
    "this is what I'm talking about",
)
_CAPTION_EXAMPLES = ", ".join(f"'{phrase}'" for phrase in _CAPTION_PHRASES)
_CAPTION_EXAMPLES_QUOTED = ", ".join(f'"{phrase}"' for phrase in _CAPTION_PHRASES)

IMAGE_MESSAGE_REMINDER = (
    "If you set should_send_image to true, provide image_praise with a "
    "creative, engaging message. This can be a caption, comment, or message "
    "connecting the image to the conversation. Vary the style - be "
    f"enthusiastic, casual, or descriptive. Examples: {_CAPTION_EXAMPLES}. "
    "Make it natural and varied."
)

_GREEK_STYLE_BLOCK = f"""CRITICAL FOR GREEK: Your Greek must be grammatically correct and natural. Use proper Greek grammar rules: correct verb endings, proper use of articles (ο, η, το), correct noun declensions, and natural Greek sentence structure.

STYLE GUIDELINES FOR GREEK:
- Write as a native Greek speaker would write - natural, flowing, and cohesive
- Occasionally use casual/slang Greek expressions to make it more authentic and engaging (e.g., "εεεεε; σε έφτιαξα;", "σου έφτιαξε τη μέρα;", "στο 'πα, γαμάει", "κοίτα αυτό", "τι λες τώρα")
- Mix polite formal language with casual expressions - not all the time, but sprinkle them in naturally
- Make sentences flow together better - connect ideas smoothly
- Use natural Greek transitions and connectors
- Don't write broken, incorrect, or translated-sounding Greek
- When sending images, you can add casual expressions like "{GREEK_SLANG}" at the end to make it more engaging
"""


# ---------------------------------------------------------------------------
# Name variations
# ---------------------------------------------------------------------------

# (latin marker, greek marker, latin rendering, greek rendering)
_KNOWN_NAMES: tuple[tuple[str, str, str, str], ...] = (
    ("mike", "μάικ", "Mike", "Μάικ"),
    ("michalis", "μιχάλης", "Michalis", "Μιχάλης"),
)


def generate_name_variations(name: str, greek: bool) -> list[str]:
    """Derives alternate renderings of a name by substring heuristics.

    Recognises a small set of known first names, a "Kou" surname stem and
    a single-letter surname initial. This is a limited lookup, not
    transliteration: unknown names come back as-is.

    Args:
        name: The profile name.
        greek: Render in Greek script.

    Returns:
        Variations in preference order; empty for an empty name.
    """
    if not name or not name.strip():
        return []

    lower = name.lower().strip()
    has_kou = "kou" in lower or "κου" in lower
    has_initial = " k" in lower or " κ" in lower

    kou_suffix = "Κου" if greek else "Kou"
    initial_suffix = "Κ" if greek else "K."

    bases: list[str] = []
    for latin_marker, greek_marker, latin, greek_form in _KNOWN_NAMES:
        if latin_marker in lower or greek_marker in lower:
            bases.append(greek_form if greek else latin)
    if not bases:
        bases.append(name)

    variations: list[str] = []
    for base in bases:
        variations.append(base)
        if has_kou:
            variations.append(f"{base} {kou_suffix}")
        if has_initial:
            variations.append(f"{base} {initial_suffix}")
    return variations


def format_name_variations(name: str, greek: bool) -> str:
    return ", ".join(generate_name_variations(name, greek))


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def build_language_instruction(language: LanguageTag | None, name_variations: str) -> str:
    """Builds the language-forcing block. Empty when no language fired."""
    if language is None:
        return ""

    greek = language == "Greek"
    target = "GREEK" if greek else language
    writing = "IS WRITING IN GREEK" if greek else f"is writing in {language}"
    grammar = "GREEK GRAMMAR" if greek else "grammar"
    natural = "GREEK" if greek else "language"
    native = "a native Greek speaker" if greek else "a native speaker"

    lines = [
        "",
        "",
        "🚨 CRITICAL LANGUAGE INSTRUCTION - READ CAREFULLY 🚨",
        f"The user {writing}.",
        "",
        "YOU MUST:",
        f"1. Respond ENTIRELY in {target} - EVERY SINGLE WORD",
        f"2. Use CORRECT {grammar} - proper verb conjugations, noun cases "
        "(nominative, genitive, accusative, vocative), articles, and "
        "sentence structure",
        f"3. Use NATURAL {natural} - write as {native} would, not a "
        "translation. Use idiomatic expressions and natural word order.",
        "4. **NAME VARIATIONS**: When referring to the person, use natural "
        "name variations based on the language:",
        f"   - In {language}, use variations like: {name_variations}",
        "   - Vary the name naturally throughout the conversation - don't "
        "always use the same form",
        "   - Use the appropriate script/alphabet for the language you're speaking",
        f"5. Do NOT use English at all - ONLY {target}",
        f"6. Continue in {target} for the ENTIRE response",
        f"7. Maintain language consistency - if the conversation is in "
        f"{target}, keep ALL responses in {target}",
        "",
    ]
    if greek:
        lines.append(_GREEK_STYLE_BLOCK)
    lines.append(f"DO NOT switch to English. DO NOT mix languages. ONLY {target}.")
    return "\n".join(lines)


def build_person_context(person: PersonProfile, name_variations: str) -> str:
    lines = [
        f"Person to praise: {person.display_name}"
        + (f" (use variations: {name_variations})" if name_variations else "")
    ]
    if person.extra_info:
        lines.append(f"Extra info: {person.extra_info}")
    if person.images:
        lines.append(
            f"You have {len(person.images)} image(s) of this person available "
            "to send. Analyze and praise specific details about their "
            "appearance, style, and energy."
        )
    if person.videos:
        lines.append(f"You have {len(person.videos)} video(s) of this person.")
    if person.urls:
        lines.append(f"URLs to study about this person: {', '.join(person.urls)}")
    return "\n".join(lines)


def build_image_analysis(person: PersonProfile, volume: int) -> str:
    if not person.images or volume <= 0:
        return ""
    return "\n".join([
        "",
        "IMAGE ANALYSIS INSTRUCTIONS:",
        f"- You have {len(person.images)} image(s) of "
        f"{person.display_name} available",
        "- When you decide to send an image (should_send_image: true), "
        "provide image_praise with a creative, engaging message",
        "- The image_praise can be a caption, comment, or message that "
        "connects the image to the conversation",
        "- Vary the style - sometimes be enthusiastic, sometimes casual, "
        "sometimes descriptive",
        f"- Examples: {_CAPTION_EXAMPLES_QUOTED}",
        "- Make it natural and varied - don't always use the same phrase",
        "- Images will be sent as separate messages with your message",
    ])


def build_image_offer(person: PersonProfile, volume: int) -> str:
    """Offers image sending. Only with ≥1 image and volume ≥ 40."""
    if not person.images or clamp_volume(volume) < IMAGE_OFFER_MIN_VOLUME:
        return ""
    return (
        f"\n\nNOTE: You have access to {len(person.images)} image(s) of "
        f"{person.display_name}. When you want to analyze or praise specific details "
        "about their appearance, style, smile, energy, or posture, mention "
        "those details. You can request to send an image by setting "
        "should_send_image to true."
    )


def _last_user_question(history: Sequence[ConversationMessage]) -> str:
    if history and history[-1].role == "user":
        return history[-1].content
    return ""


def format_history(history: Sequence[ConversationMessage]) -> str:
    return "\n".join(
        f"{message.role}: {message.content}" for message in history[-ECHO_WINDOW:]
    )


# ---------------------------------------------------------------------------
# Public builders
# ---------------------------------------------------------------------------


def build_assistant_system_prompt(messages: Sequence[ConversationMessage]) -> str:
    """System prompt for the no-person path.

    The Greek check runs over the full conversation, not just the tail.
    """
    if should_use_greek(messages):
        return ASSISTANT_PROMPT + ASSISTANT_GREEK_SUFFIX
    return ASSISTANT_PROMPT


def build_praise_prompt(
    person: PersonProfile,
    volume: int,
    history: Sequence[ConversationMessage],
) -> str:
    """Assembles the user-role praise prompt.

    Args:
        person: A named profile.
        volume: Praise intensity, 0-100.
        history: Conversation tail (the last 10 entries).

    Returns:
        The prompt text, without the image offer.
    """
    volume = clamp_volume(volume)
    band = classify_band(volume, person)
    if band is PraiseBand.NO_PERSON:
        raise ValueError("build_praise_prompt requires a named person")
    template = BAND_TEMPLATES[band]

    language = detect_language(history)
    name_variations = format_name_variations(person.display_name, language == "Greek")

    approach = "\n".join(
        [f"- The user asked: '{_last_user_question(history)}'"]
        + [line.format(name=person.display_name) for line in template.approach]
    )

    return "\n".join([
        PREAMBLE,
        template.descriptor,
        build_language_instruction(language, name_variations),
        "",
        "PERSON CONTEXT:",
        build_person_context(person, name_variations),
        build_image_analysis(person, volume),
        "",
        "CONVERSATION APPROACH:",
        approach,
        "",
        "CONVERSATION HISTORY:",
        format_history(history),
        "",
        template.closing.format(name=person.display_name),
        "",
        "IMAGE MESSAGE REQUIREMENT:",
        IMAGE_MESSAGE_REMINDER,
    ])


def format_message(message: ConversationMessage) -> dict[str, str]:
    """Converts a message to a provider dict.

    Images are not sent to the model; a user message with attachments
    gets a short textual marker instead.
    """
    content = message.content
    if message.role == "user" and message.images:
        count = len(message.images)
        noun = "image" if count == 1 else "images"
        content += f" [User attached {count} {noun}]"
    return {"role": message.role, "content": content}


def build_assistant_messages(messages: Sequence[ConversationMessage]) -> list[dict[str, str]]:
    """Full payload for the no-person path."""
    return [
        {"role": "system", "content": build_assistant_system_prompt(messages)},
        *(format_message(message) for message in messages[-CONTEXT_WINDOW:]),
    ]


def build_praise_messages(
    person: PersonProfile,
    volume: int,
    messages: Sequence[ConversationMessage],
) -> list[dict[str, str]]:
    """Full payload for the praise path.

    System prompt, the last 10 history entries, then the praise prompt
    with the image offer appended.
    """
    history = list(messages[-CONTEXT_WINDOW:])
    prompt = build_praise_prompt(person, volume, history)
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        *(format_message(message) for message in history),
        {"role": "user", "content": prompt + build_image_offer(person, volume)},
    ]
