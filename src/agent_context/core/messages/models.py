"""Message and content part models.

Content parts are an explicit tagged union discriminated by ``type``. Parts
whose ``type`` is missing or unrecognized are kept as ``UnknownPart`` so they
round-trip unchanged, and every consumer handles them explicitly.

The block-insertion cache marker (``{"cachePoint": {"type": "default"}}``)
has no ``type`` key on the wire; it is recognized by its ``cachePoint`` key
and modeled as ``CachePointPart``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)


class Role(str, Enum):
    """Message author roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


_ROLE_ALIASES = {
    "human": Role.USER,
    "ai": Role.ASSISTANT,
}


def resolve_role(value: Union[str, Role]) -> Role:
    """Resolve a role name, case-insensitively and with aliases, to a Role.

    Raises:
        ValueError: If the name is not a known role or alias
    """
    if isinstance(value, Role):
        return value
    lowered = value.lower()
    return _ROLE_ALIASES.get(lowered) or Role(lowered)


class ContentType(str, Enum):
    """Wire values of the ``type`` field on content parts."""

    TEXT = "text"
    IMAGE_URL = "image_url"
    TOOL_CALL = "tool_call"
    THINKING = "thinking"
    REASONING_CONTENT = "reasoning_content"
    REDACTED_THINKING = "redacted_thinking"
    ERROR = "error"


CACHE_POINT_KEY = "cachePoint"
CACHE_POINT_TAG = "cache_point"
UNKNOWN_TAG = "unknown"

_TYPE_ALIASES = {"image": ContentType.IMAGE_URL.value}


class CacheControl(BaseModel):
    """Inline cache marker (``cache_control`` property on a part)."""

    model_config = ConfigDict(frozen=True)

    type: str = "ephemeral"


class _Part(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cache_control: Optional[CacheControl] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the wire shape, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class TextPart(_Part):
    type: Literal["text"] = "text"
    text: str = ""


class ImagePart(_Part):
    type: Literal["image_url"] = "image_url"
    image_url: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        return _TYPE_ALIASES.get(value, value)


class ToolCall(BaseModel):
    """Tool invocation carried inside a ``tool_call`` part."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: Optional[str] = None
    args: Union[str, Dict[str, Any], None] = None
    output: Optional[str] = None


class ToolCallPart(_Part):
    type: Literal["tool_call"] = "tool_call"
    tool_call: Optional[ToolCall] = None


class ThinkingPart(_Part):
    type: Literal["thinking"] = "thinking"
    thinking: str = ""
    signature: Optional[str] = None


class ReasoningText(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    signature: Optional[str] = None


class ReasoningPart(_Part):
    """Bedrock-style reasoning block."""

    type: Literal["reasoning_content"] = "reasoning_content"
    reasoning_text: Optional[ReasoningText] = Field(default=None, alias="reasoningText")


class RedactedThinkingPart(_Part):
    type: Literal["redacted_thinking"] = "redacted_thinking"
    data: str = ""


class ErrorPart(_Part):
    type: Literal["error"] = "error"
    error: Any = None


class CachePointPart(BaseModel):
    """Block-insertion cache marker."""

    model_config = ConfigDict(frozen=True)

    kind: str = "default"

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, value: Any) -> Any:
        if isinstance(value, Mapping) and CACHE_POINT_KEY in value:
            marker = value[CACHE_POINT_KEY] or {}
            return {"kind": marker.get("type", "default")}
        return value

    def to_payload(self) -> Dict[str, Any]:
        return {CACHE_POINT_KEY: {"type": self.kind}}


class UnknownPart(_Part):
    """A part with a missing or unrecognized ``type``; extra fields are kept."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Any = None


_KNOWN_TAGS = frozenset(item.value for item in ContentType) | {CACHE_POINT_TAG}


def _part_tag(value: Any) -> str:
    if isinstance(value, Mapping):
        if CACHE_POINT_KEY in value and "type" not in value:
            return CACHE_POINT_TAG
        kind = value.get("type")
    elif isinstance(value, CachePointPart):
        return CACHE_POINT_TAG
    else:
        kind = getattr(value, "type", None)
    if isinstance(kind, Enum):
        kind = kind.value
    if not isinstance(kind, str):
        return UNKNOWN_TAG
    kind = _TYPE_ALIASES.get(kind, kind)
    return kind if kind in _KNOWN_TAGS else UNKNOWN_TAG


ContentPart = Annotated[
    Union[
        Annotated[TextPart, Tag(ContentType.TEXT.value)],
        Annotated[ImagePart, Tag(ContentType.IMAGE_URL.value)],
        Annotated[ToolCallPart, Tag(ContentType.TOOL_CALL.value)],
        Annotated[ThinkingPart, Tag(ContentType.THINKING.value)],
        Annotated[ReasoningPart, Tag(ContentType.REASONING_CONTENT.value)],
        Annotated[RedactedThinkingPart, Tag(ContentType.REDACTED_THINKING.value)],
        Annotated[ErrorPart, Tag(ContentType.ERROR.value)],
        Annotated[CachePointPart, Tag(CACHE_POINT_TAG)],
        Annotated[UnknownPart, Tag(UNKNOWN_TAG)],
    ],
    Discriminator(_part_tag),
]

MessageContent = Union[str, Tuple[ContentPart, ...]]


class Message(BaseModel):
    """A single conversation message.

    Messages are immutable. Code that needs a changed message builds a new
    one with ``model_copy(update=...)``.

    Attributes:
        role: Author role
        content: Plain string or ordered tuple of typed content parts
        name: Optional author or tool name
        tool_call_id: Id of the tool call a tool message answers
        tool_calls: Provider-level tool calls on assistant messages
        additional_kwargs: Provider side-channel fields (e.g. reasoning)
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: MessageContent = ""
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: Tuple[ToolCall, ...] = ()
    additional_kwargs: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.lower()
            return _ROLE_ALIASES.get(lowered, lowered)
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return tuple(
                part if isinstance(part, (Mapping, BaseModel)) else {"value": part}
                for part in value
            )
        return value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        """Build a message from its wire-format dict."""
        return cls.model_validate(dict(data))

    def parts(self) -> Tuple[Any, ...]:
        """Content as a tuple of parts (empty for string content)."""
        if isinstance(self.content, str):
            return ()
        return self.content

    def has_part(self, content_type: ContentType) -> bool:
        return any(getattr(part, "type", None) == content_type.value for part in self.parts())

    def with_content(self, content: Union[str, Tuple[Any, ...]]) -> "Message":
        """Return a copy of this message carrying ``content``."""
        return self.model_copy(update={"content": content})

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the common ``{"role", "content"}`` wire shape."""
        payload: Dict[str, Any] = {"role": self.role.value}
        if isinstance(self.content, str):
            payload["content"] = self.content
        else:
            payload["content"] = [part.to_payload() for part in self.content]
        if self.name:
            payload["name"] = self.name
        if self.tool_call_id:
            payload["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            payload["tool_calls"] = [
                call.model_dump(mode="json", exclude_none=True) for call in self.tool_calls
            ]
        return payload


def messages_from_payload(items: Any) -> list[Message]:
    """Parse a list of wire-format message dicts."""
    return [item if isinstance(item, Message) else Message.from_dict(item) for item in items]
