"""
Translation between the Ollama generate protocol and the Claude Messages API.

Both directions are pure functions and never raise: range checking of
sampling values is left to the provider.
"""
from datetime import datetime, timezone
from typing import Optional

from .config import Settings
from .models import (
    ConversationRequest,
    ConversationResponse,
    GenerationRequest,
    GenerationResponse,
    Message,
)


def _positive(value: Optional[float]) -> Optional[float]:
    """Keep a sampling value only if the caller actually set it (> 0)."""
    if value is not None and value > 0:
        return value
    return None


def build_conversation_request(
    request: GenerationRequest,
    model: str,
    settings: Settings,
) -> ConversationRequest:
    """
    Build the Messages API request for a generate request.

    The prompt becomes a single user message. The configured system prompt
    is always used; a per-request `system` field is ignored.
    """
    options = request.options

    return ConversationRequest(
        model=model,
        messages=[Message.user_text(request.prompt)],
        system=settings.claude_system_prompt or None,
        max_tokens=options.num_predict or None,
        temperature=_positive(options.temperature),
        top_p=_positive(options.top_p),
        top_k=_positive(options.top_k),
    )


def extract_text(response: Optional[ConversationResponse]) -> str:
    """Return the text of the first text block, or "" if there is none."""
    if response is None:
        return ""

    for block in response.content:
        if block.type == "text":
            return block.text or ""

    return ""


def build_generation_response(
    request: GenerationRequest,
    text: str,
    created_at: Optional[datetime] = None,
) -> GenerationResponse:
    return GenerationResponse(
        model=request.model,
        created_at=created_at or datetime.now(timezone.utc),
        response=text,
        done=True,
    )
