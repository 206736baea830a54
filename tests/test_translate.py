from datetime import datetime, timezone

import pytest

from ollama_claude_proxy import (
    ContentBlock,
    ConversationResponse,
    GenerationOptions,
    GenerationRequest,
    build_conversation_request,
    build_generation_response,
    extract_text,
)

MODEL = "claude-3-haiku-20240307"


def _request(**options) -> GenerationRequest:
    return GenerationRequest(
        model="claude-3-haiku",
        prompt="Test prompt",
        options=GenerationOptions(**options),
    )


def test_single_user_message_wraps_prompt(settings):
    conversation = build_conversation_request(_request(), MODEL, settings)

    assert conversation.model == MODEL
    assert len(conversation.messages) == 1
    message = conversation.messages[0]
    assert message.role == "user"
    assert [b.model_dump() for b in message.content] == [{"type": "text", "text": "Test prompt"}]


def test_configured_system_prompt_wins_over_request(settings):
    request = GenerationRequest(model="claude", prompt="hi", system="Talk like a pirate.")

    conversation = build_conversation_request(request, MODEL, settings)

    assert conversation.system == "You are a test assistant."


def test_empty_system_prompt_is_omitted(settings):
    settings = settings.model_copy(update={"claude_system_prompt": ""})

    wire = build_conversation_request(_request(), MODEL, settings).to_wire()

    assert "system" not in wire


def test_max_tokens_maps_from_num_predict(settings):
    conversation = build_conversation_request(_request(num_predict=100), MODEL, settings)

    assert conversation.max_tokens == 100


def test_positive_options_are_forwarded(settings):
    wire = build_conversation_request(
        _request(temperature=0.7, top_p=0.95, top_k=40, num_predict=100), MODEL, settings
    ).to_wire()

    assert wire["temperature"] == pytest.approx(0.7)
    assert wire["top_p"] == pytest.approx(0.95)
    assert wire["top_k"] == 40
    assert isinstance(wire["top_k"], int)
    assert wire["max_tokens"] == 100


@pytest.mark.parametrize("value", [0, -1, -0.5])
def test_non_positive_options_are_absent(settings, value):
    wire = build_conversation_request(
        _request(temperature=value, top_p=value, top_k=int(value)), MODEL, settings
    ).to_wire()

    assert "temperature" not in wire
    assert "top_p" not in wire
    assert "top_k" not in wire


def test_unset_options_are_absent(settings):
    wire = build_conversation_request(_request(), MODEL, settings).to_wire()

    assert set(wire) == {"model", "messages", "system"}


def test_null_fields_read_as_unset(settings):
    request = GenerationRequest.model_validate(
        {"model": None, "prompt": None, "options": None, "stream": None}
    )

    wire = build_conversation_request(request, MODEL, settings).to_wire()

    assert request.model == ""
    assert wire["messages"] == [{"role": "user", "content": [{"type": "text", "text": ""}]}]
    assert set(wire) == {"model", "messages", "system"}


def test_extract_text_returns_first_text_block():
    response = ConversationResponse(
        id="msg_1",
        role="assistant",
        content=[
            ContentBlock(type="tool_use"),
            ContentBlock(type="text", text="first"),
            ContentBlock(type="text", text="second"),
        ],
    )

    assert extract_text(response) == "first"


@pytest.mark.parametrize(
    "response",
    [
        None,
        ConversationResponse(content=[]),
        ConversationResponse(content=[ContentBlock(type="tool_use"), ContentBlock(type="image")]),
    ],
)
def test_extract_text_without_text_is_empty(response):
    assert extract_text(response) == ""


def test_generation_response_echoes_alias(settings):
    request = _request(temperature=0.7)
    build_conversation_request(request, MODEL, settings)
    reply = ConversationResponse.model_validate(
        {"id": "x", "role": "assistant", "content": [{"type": "text", "text": "hello"}]}
    )
    created = datetime(2025, 3, 26, 17, 0, tzinfo=timezone.utc)

    response = build_generation_response(request, extract_text(reply), created_at=created)

    assert response.model == "claude-3-haiku"
    assert response.response == "hello"
    assert response.done is True
    assert response.created_at == created
