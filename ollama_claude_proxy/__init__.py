"""
Ollama-Claude Proxy - Ollama-compatible API in front of the Claude Messages API.

- Model alias resolution (ModelResolver)
- Request/response translation between the two protocols
- Claude API client with raw passthrough
- FastAPI app factory with the standard endpoints
"""

__version__ = "1.0.0"

from .errors import (
    GatewayError,
    BadRequestError,
    TransportError,
    ProviderError,
    DecodeError,
    ConfigError,
)
from .config import Settings, load_settings
from .models import (
    GenerationOptions,
    GenerationRequest,
    GenerationResponse,
    ContentBlock,
    Message,
    ConversationRequest,
    ConversationResponse,
)
from .resolver import ModelResolver, DEFAULT_MODEL_ALIASES
from .translate import build_conversation_request, extract_text, build_generation_response
from .client import ClaudeClient, RawReply
from .server import create_app

__all__ = [
    # Errors
    "GatewayError",
    "BadRequestError",
    "TransportError",
    "ProviderError",
    "DecodeError",
    "ConfigError",
    # Config
    "Settings",
    "load_settings",
    # API models
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResponse",
    "ContentBlock",
    "Message",
    "ConversationRequest",
    "ConversationResponse",
    # Core
    "ModelResolver",
    "DEFAULT_MODEL_ALIASES",
    "build_conversation_request",
    "extract_text",
    "build_generation_response",
    "ClaudeClient",
    "RawReply",
    # App factory
    "create_app",
]
