import json

import httpx
import pytest
from fastapi.testclient import TestClient

from ollama_claude_proxy import Settings, create_app

ENDPOINT = "https://claude.test/v1/messages"


def raw_response(status_code: int, content: bytes, headers=()) -> httpx.Response:
    """An unread response, like one coming off the network."""
    headers = list(headers)
    headers.append(("content-length", str(len(content))))
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(content))


HELLO_REPLY = {
    "id": "x",
    "type": "message",
    "role": "assistant",
    "content": [{"type": "text", "text": "hello"}],
    "stop_reason": "end_turn",
}


class ProviderStub:
    """Stands in for the Claude API. Records every request it receives."""

    def __init__(self, status_code: int = 200, body=None, headers=None):
        self.status_code = status_code
        self.body = HELLO_REPLY if body is None else body
        self.headers = headers or {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (bytes, str)):
            content = self.body.encode() if isinstance(self.body, str) else self.body
        else:
            content = json.dumps(self.body).encode()
        headers = {"content-type": "application/json", **self.headers}
        return raw_response(self.status_code, content, headers.items())

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of Settings."""
    for name in (
        "HOST",
        "PORT",
        "ANTHROPIC_API_KEY",
        "CLAUDE_API_VERSION",
        "CLAUDE_API_ENDPOINT",
        "CLAUDE_SYSTEM_PROMPT",
        "CLAUDE_DEFAULT_MODEL",
        "REQUEST_TIMEOUT_SECS",
        "LOG_LEVEL",
        "LOG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        anthropic_api_key="test-api-key",
        claude_api_endpoint=ENDPOINT,
        claude_system_prompt="You are a test assistant.",
        claude_default_model="claude-3-5-sonnet-20240620",
        request_timeout_secs=5,
    )


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def client(settings, provider):
    app = create_app(settings, transport=provider.transport)
    with TestClient(app) as c:
        yield c
