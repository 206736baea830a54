"""
Maps Ollama-style model names onto Claude model identifiers.
"""
import logging
from collections.abc import Mapping
from types import MappingProxyType

logger = logging.getLogger(__name__)


DEFAULT_MODEL_ALIASES: Mapping[str, str] = MappingProxyType({
    "claude": "claude-3-opus-20240229",
    "claude-3": "claude-3-opus-20240229",
    "claude-3-opus": "claude-3-opus-20240229",
    "claude-3-sonnet": "claude-3-sonnet-20240229",
    "claude-3-haiku": "claude-3-haiku-20240307",
    "claude-2": "claude-2.0",
    "claude-2.1": "claude-2.1",
    "claude-3.5": "claude-3-5-sonnet-20240620",
    "claude-3.5-sonnet": "claude-3-5-sonnet-20240620",
    "claude-3.7": "claude-3-7-sonnet-20250219",
    "claude-3.7-sonnet": "claude-3-7-sonnet-20250219",
})


class ModelResolver:
    """
    Case-insensitive alias lookup with a default for anything unknown.

    The alias table is copied on construction and exposed read-only, so one
    resolver can be shared by every request handler.
    """

    def __init__(self, default_model: str, aliases: Mapping[str, str] = DEFAULT_MODEL_ALIASES):
        self._default_model = default_model
        self._aliases = MappingProxyType(
            {name.lower(): model_id for name, model_id in aliases.items()}
        )

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._aliases

    def resolve(self, alias: str) -> str:
        """Return the model ID for `alias`, or the default model. Never fails."""
        model_id = self._aliases.get((alias or "").lower())
        if model_id is None:
            logger.debug("Unknown model alias %r, using default %s", alias, self._default_model)
            return self._default_model
        return model_id
