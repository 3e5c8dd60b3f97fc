"""Tests for message and content part models."""

import pytest
from pydantic import ValidationError

from agent_context.core.messages import (
    CacheControl,
    CachePointPart,
    ContentType,
    ErrorPart,
    ImagePart,
    Message,
    ReasoningPart,
    RedactedThinkingPart,
    Role,
    TextPart,
    ThinkingPart,
    ToolCallPart,
    UnknownPart,
    messages_from_payload,
)

# =============================================================================
# Test: Message parsing
# =============================================================================


class TestMessageParsing:
    """Tests for building messages from wire-format dicts."""

    def test_string_content(self):
        """Test string content is kept as a string."""
        message = Message.from_dict({"role": "user", "content": "hello"})
        assert message.role == Role.USER
        assert message.content == "hello"
        assert message.parts() == ()

    def test_role_aliases_and_case(self):
        """Test role aliases and case are normalized."""
        assert Message.from_dict({"role": "human", "content": ""}).role == Role.USER
        assert Message.from_dict({"role": "AI", "content": ""}).role == Role.ASSISTANT
        assert Message.from_dict({"role": "Tool", "content": ""}).role == Role.TOOL

    def test_unknown_role_rejected(self):
        """Test an unknown role is rejected."""
        with pytest.raises(ValidationError):
            Message.from_dict({"role": "narrator", "content": "once upon a time"})

    def test_none_content_becomes_empty_string(self):
        """Test None content becomes an empty string."""
        message = Message.from_dict({"role": "assistant", "content": None})
        assert message.content == ""

    def test_messages_from_payload_keeps_message_instances(self):
        """Test messages_from_payload keeps Message instances."""
        existing = Message(role=Role.SYSTEM, content="rules")
        parsed = messages_from_payload([existing, {"role": "user", "content": "hi"}])
        assert parsed[0] is existing
        assert parsed[1].role == Role.USER

    def test_messages_are_immutable(self):
        """Test messages cannot be mutated."""
        message = Message(role=Role.USER, content="hi")
        with pytest.raises(ValidationError):
            message.content = "changed"

    def test_with_content_returns_copy(self):
        """Test with_content returns a copy."""
        message = Message(role=Role.USER, content="hi", name="alice")
        updated = message.with_content((TextPart(text="bye"),))
        assert message.content == "hi"
        assert updated.content == (TextPart(text="bye"),)
        assert updated.name == "alice"


# =============================================================================
# Test: Content part discrimination
# =============================================================================


class TestContentParts:
    """Tests for the tagged content part union."""

    @pytest.fixture
    def mixed_message(self):
        return Message.from_dict({
            "role": "assistant",
            "content": [
                {"type": "text", "text": "hello"},
                {"type": "image", "image_url": {"url": "https://example.com/a.png"}},
                {"type": "tool_call", "tool_call": {"id": "c1", "name": "search", "args": {"q": "x"}}},
                {"type": "thinking", "thinking": "hmm", "signature": "sig"},
                {"type": "reasoning_content", "reasoningText": {"text": "because"}},
                {"type": "redacted_thinking", "data": "opaque"},
                {"type": "error", "error": {"message": "boom"}},
                {"cachePoint": {"type": "default"}},
                {"type": "video", "url": "https://example.com/v.mp4"},
            ],
        })

    def test_each_part_gets_its_variant(self, mixed_message):
        """Test each part type parses to its own variant."""
        kinds = [type(part) for part in mixed_message.content]
        assert kinds == [
            TextPart,
            ImagePart,
            ToolCallPart,
            ThinkingPart,
            ReasoningPart,
            RedactedThinkingPart,
            ErrorPart,
            CachePointPart,
            UnknownPart,
        ]

    def test_image_alias_normalized(self, mixed_message):
        """Test the image type alias is normalized."""
        assert mixed_message.content[1].type == "image_url"

    def test_reasoning_alias_parsed(self, mixed_message):
        """Test the reasoningText alias is parsed."""
        assert mixed_message.content[4].reasoning_text.text == "because"

    def test_has_part(self, mixed_message):
        """Test has_part checks part types."""
        assert mixed_message.has_part(ContentType.THINKING)
        assert mixed_message.has_part(ContentType.REASONING_CONTENT)
        assert not Message(role=Role.USER, content="x").has_part(ContentType.THINKING)

    def test_part_without_type_is_unknown(self):
        """Test a part without a type is kept as unknown."""
        message = Message.from_dict({"role": "user", "content": [{"text": "no type"}]})
        assert isinstance(message.content[0], UnknownPart)
        assert message.content[0].type is None

    def test_non_mapping_item_is_unknown(self):
        """Test a non-mapping content item is kept as unknown."""
        message = Message.from_dict({"role": "user", "content": ["bare string", 42]})
        assert all(isinstance(part, UnknownPart) for part in message.content)

    def test_inline_cache_control_parsed(self):
        """Test an inline cache_control is parsed."""
        message = Message.from_dict({
            "role": "user",
            "content": [{"type": "text", "text": "hi", "cache_control": {"type": "ephemeral"}}],
        })
        assert message.content[0].cache_control == CacheControl(type="ephemeral")


# =============================================================================
# Test: Payload serialization
# =============================================================================


class TestPayload:
    """Tests for serializing back to the wire shape."""

    def test_string_message(self):
        """Test a string message payload."""
        message = Message(role=Role.TOOL, content="42", tool_call_id="c1")
        assert message.to_payload() == {"role": "tool", "content": "42", "tool_call_id": "c1"}

    def test_unknown_part_keeps_extra_fields(self):
        """Test unknown parts keep their extra fields."""
        raw = {"type": "video", "url": "https://example.com/v.mp4", "duration": 3}
        message = Message.from_dict({"role": "user", "content": [raw]})
        assert message.to_payload()["content"] == [raw]

    def test_cache_point_has_no_type_key(self):
        """Test a cache point serializes without a type key."""
        message = Message.from_dict({
            "role": "user",
            "content": [{"type": "text", "text": "hi"}, {"cachePoint": {"type": "default"}}],
        })
        assert message.to_payload()["content"] == [
            {"type": "text", "text": "hi"},
            {"cachePoint": {"type": "default"}},
        ]

    def test_reasoning_uses_wire_alias(self):
        """Test reasoning parts serialize with the wire alias."""
        part = ReasoningPart.model_validate({"type": "reasoning_content", "reasoningText": {"text": "x"}})
        assert part.to_payload() == {"type": "reasoning_content", "reasoningText": {"text": "x"}}

    def test_cache_control_serialized(self):
        """Test cache_control is serialized."""
        part = TextPart(text="hi", cache_control=CacheControl())
        assert part.to_payload() == {
            "type": "text",
            "text": "hi",
            "cache_control": {"type": "ephemeral"},
        }
