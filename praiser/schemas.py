"""Core data models — shared Pydantic types for the Praiser backend.

Every chat request, person profile, model reply and API response flows
through these types. Wire names follow the browser client (camelCase);
Python code uses snake_case attributes. Both spellings are accepted on
input.

This is a leaf module: it imports only from pydantic and the stdlib.
No project imports allowed — everything else imports from here.

Usage:
    from praiser.schemas import ChatRequest, PersonProfile, ApiResponse
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


class MessageImage(BaseModel):
    """An image (or video) attachment referenced by URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    type: str
    name: str | None = None


class ConversationMessage(BaseModel):
    """One chat turn. Immutable once created.

    Ordering inside a conversation is significant: every window the
    prompt layer takes (last 10 for model context, last 6 echoed in the
    prompt body) is taken from the tail.
    """

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"]
    content: str
    images: list[MessageImage] | None = None


# ---------------------------------------------------------------------------
# Person
# ---------------------------------------------------------------------------


class PersonProfile(BaseModel):
    """The person being praised. Read-only per request.

    Owned by the caller (session/UI layer). An empty or whitespace-only
    name means "no person" — the engine degrades to a plain assistant.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    extra_info: str = Field(default="", alias="extraInfo")
    images: list[MessageImage] = Field(default_factory=list)
    videos: list[MessageImage] = Field(default_factory=list)
    urls: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name.strip()

    @property
    def has_name(self) -> bool:
        return bool(self.display_name)


# ---------------------------------------------------------------------------
# Chat request / reply
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """Request body for POST /groq/praise.

    praise_volume outside [0, 100] is a validation error — it is never
    clamped here.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ConversationMessage] = Field(min_length=1)
    person_info: PersonProfile | None = Field(default=None, alias="personInfo")
    praise_volume: int = Field(ge=0, le=100, alias="praiseVolume")


class CompletionResult(BaseModel):
    """The JSON object the model must return on the praise path.

    Strict: a model that answers ``"should_send_image": "yes"`` fails
    validation and the orchestrator moves on to the next model.
    """

    model_config = ConfigDict(strict=True)

    message: str
    should_send_image: bool | None = None
    image_praise: str | None = None


class ImageMessage(BaseModel):
    """Companion assistant message carrying one image of the person."""

    model_config = ConfigDict(frozen=True)

    content: str
    images: list[MessageImage]


class PraiseReply(BaseModel):
    """What the engine hands back to the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    assistant_message: str = Field(alias="assistantMessage")
    separate_image_message: ImageMessage | None = Field(
        default=None, alias="separateImageMessage",
    )
    model: str | None = None


class ModelDescriptor(BaseModel):
    """A catalog entry: model id, where it came from, and its rank."""

    model_config = ConfigDict(frozen=True)

    model_id: str
    source: Literal["fetched", "fallback"]
    rank: int


# ---------------------------------------------------------------------------
# Storage payloads
# ---------------------------------------------------------------------------


class UploadResult(BaseModel):
    """Returned by POST /upload."""

    model_config = ConfigDict(frozen=True)

    url: str
    filename: str
    type: str
    name: str


class PersonInfoBody(BaseModel):
    """Request body for POST /person-info."""

    model_config = ConfigDict(populate_by_name=True)

    person_info: PersonProfile | None = Field(default=None, alias="personInfo")


class SettingsBody(BaseModel):
    """Request body for POST /settings. Settings are an opaque document."""

    settings: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# API envelope
# ---------------------------------------------------------------------------


class ApiError(BaseModel):
    """Error detail inside ApiResponse.error.

    code is an uppercase string like "VALIDATION_ERROR", "PRAISE_FAILED",
    "MODELS_OVER_CAPACITY". Not an enum — error codes grow with features.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    details: str | None = None
    retry_after: int | None = None


class ApiResponse(BaseModel):
    """Universal response envelope — every API endpoint returns this shape."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    data: Any | None = None
    error: ApiError | None = None
