"""
Pydantic models for both sides of the proxy.

Source protocol: the Ollama-style /api/generate request and response.
Target protocol: the Claude Messages API request and response.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Source protocol (Ollama)
# =============================================================================

class GenerationOptions(BaseModel):
    """Sampling options. Unset and non-positive values are treated alike."""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    num_predict: Optional[int] = None  # max output tokens


class GenerationRequest(BaseModel):
    """Request body for POST /api/generate."""
    model: str = ""
    prompt: str = ""
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    # Accepted for compatibility, never honored: the configured system
    # prompt always applies and responses are never streamed.
    system: Optional[str] = None
    stream: Optional[bool] = False

    @field_validator("model", "prompt", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("options", mode="before")
    @classmethod
    def _null_options_as_unset(cls, value):
        return GenerationOptions() if value is None else value


class GenerationResponse(BaseModel):
    """Response body for POST /api/generate."""
    model: str  # the alias the client asked for, not the resolved ID
    created_at: datetime
    response: str
    done: bool = True


# =============================================================================
# Target protocol (Claude Messages API)
# =============================================================================

class ContentBlock(BaseModel):
    """A single content block. Only text blocks carry `text`."""
    type: str
    text: Optional[str] = None


class Message(BaseModel):
    """A single message in a conversation."""
    role: Literal["user", "assistant"]
    content: list[ContentBlock]

    @classmethod
    def user_text(cls, text: str) -> "Message":
        return cls(role="user", content=[ContentBlock(type="text", text=text)])


class ConversationRequest(BaseModel):
    """
    Request body for the Messages API.

    A None field is absent from the wire body (serialize with
    exclude_none=True) so the provider applies its own default.
    """
    model: str
    messages: list[Message]
    system: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)


class ConversationResponse(BaseModel):
    """Response body from the Messages API."""
    id: str = ""
    type: str = "message"
    role: str = ""
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: Optional[str] = None
