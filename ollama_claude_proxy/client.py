"""
Claude API client.

Handles the outbound HTTP call to the Messages endpoint, both for translated
requests (`send`) and for raw passthrough (`forward`). Each call is made at
most once and is bounded by the configured timeout.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import DecodeError, ProviderError, TransportError
from .models import ConversationRequest, ConversationResponse

logger = logging.getLogger(__name__)


@dataclass
class RawReply:
    """The provider's reply exactly as received."""
    status_code: int
    headers: list[tuple[bytes, bytes]]  # ordered, duplicates kept
    body: bytes


class ClaudeClient:
    """HTTP client for the Claude Messages API."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint = endpoint
        self._api_key = api_key
        self._api_version = api_version
        self._timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

        logger.info("Claude client initialized: %s", self._endpoint)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ClaudeClient":
        return cls(
            endpoint=settings.claude_api_endpoint,
            api_key=settings.anthropic_api_key,
            api_version=settings.claude_api_version,
            timeout=settings.request_timeout_secs,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, content_type: str) -> dict[str, str]:
        return {
            "content-type": content_type,
            "x-api-key": self._api_key,
            "anthropic-version": self._api_version,
        }

    async def send(self, conversation: ConversationRequest) -> ConversationResponse:
        """
        Send a Messages API request and decode the reply.

        Raises:
            TransportError: the call could not complete or timed out
            ProviderError: the provider answered with a non-2xx status
            DecodeError: a 2xx body did not match ConversationResponse
        """
        payload = conversation.to_wire()
        logger.debug("Claude API request: %s", json.dumps(payload, indent=2))

        headers = self._headers("application/json")
        headers["accept"] = "application/json"

        start_time = time.time()
        response = await self._bounded(
            self._exchange(json.dumps(payload).encode("utf-8"), headers)
        )
        latency_ms = int((time.time() - start_time) * 1000)

        if not response.is_success:
            logger.error(
                "Claude API error after %dms: HTTP %d: %s",
                latency_ms, response.status_code, response.text[:200]
            )
            raise ProviderError(response.status_code, response.text)

        try:
            result = ConversationResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("Claude API response did not decode: %s", e)
            raise DecodeError(f"unexpected response body: {e}", body=response.text) from e

        logger.debug(
            "Claude API response: latency=%dms, id=%s, stop_reason=%s",
            latency_ms, result.id, result.stop_reason
        )
        return result

    async def forward(
        self,
        body: bytes,
        content_type: Optional[str] = None,
        accept_encoding: Optional[str] = None,
    ) -> RawReply:
        """
        Relay a native Messages API body unchanged.

        Any HTTP status, including 4xx/5xx, is returned as-is. Only transport
        failures raise TransportError. The reply body is relayed undecoded, so
        only encodings the caller accepts are requested (identity otherwise).
        """
        headers = self._headers(content_type or "application/json")
        headers["accept-encoding"] = accept_encoding or "identity"

        start_time = time.time()
        reply = await self._bounded(self._exchange_raw(body, headers))
        latency_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "Passthrough reply: status=%d, bytes=%d, latency=%dms",
            reply.status_code, len(reply.body), latency_ms
        )
        return reply

    async def _exchange(self, body: bytes, headers: dict[str, str]) -> httpx.Response:
        return await self._client.post(self._endpoint, content=body, headers=headers)

    async def _exchange_raw(self, body: bytes, headers: dict[str, str]) -> RawReply:
        request = self._client.build_request(
            "POST", self._endpoint, content=body, headers=headers
        )
        response = await self._client.send(request, stream=True)
        try:
            # Raw bytes, so a compressed body still matches its content-encoding.
            chunks = [chunk async for chunk in response.aiter_raw()]
        finally:
            await response.aclose()

        return RawReply(
            status_code=response.status_code,
            headers=list(response.headers.raw),
            body=b"".join(chunks),
        )

    async def _bounded(self, call):
        """Await `call` under the overall timeout, mapping failures to TransportError."""
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error("Claude API call timed out after %.1fs", self._timeout)
            raise TransportError(
                f"no reply from {self._endpoint} within {self._timeout:g}s", timed_out=True
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Claude API call failed: %s", e)
            raise TransportError(f"failed to call {self._endpoint}: {e}") from e
