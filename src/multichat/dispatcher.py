"""Resolve a model to its provider, perform the HTTP exchange, and classify failures."""

from __future__ import annotations

from collections.abc import Sequence
import json
import logging
import time
from typing import Any

import httpx

from .attachments import Attachment
from .exceptions import (
    NetworkError,
    ProviderError,
    ResponseParseError,
)
from .messages import Message
from .providers.base import ProviderAdapter
from .providers.registry import ProviderRegistry

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0

NETWORK_ERROR_MESSAGE = (
    "Network error: Please check your internet connection and API key"
)
PARSE_ERROR_MESSAGE = "Failed to parse response: Invalid API response"


def extract_error_message(payload: Any, status_code: int) -> str:
    """Pick the provider-supplied error text, falling back to the status code."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return f"Status {status_code}"


class RequestDispatcher:
    """Send a conversation to the provider owning the selected model."""

    def __init__(
        self,
        registry: ProviderRegistry,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.registry = registry
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def aclose(self) -> None:
        """Close the HTTP client when this dispatcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send(
        self,
        model_id: str,
        secret_key: str,
        history: Sequence[Message],
        pending_attachments: Sequence[Attachment] = (),
    ) -> str:
        """Return the assistant text for ``history`` or raise a MultichatError."""
        model_id = model_id.strip()
        adapter = self.registry.resolve(model_id)
        if not history:
            raise ValueError("Cannot dispatch an empty conversation.")

        body = adapter.build_request(history, pending_attachments, model_id)
        headers = adapter.build_headers(secret_key)
        url = adapter.endpoint(model_id)

        LOGGER.info(
            "dispatcher.request",
            extra={
                "event": "dispatcher.request",
                "provider": adapter.id,
                "endpoint": url,
                "model": model_id,
                # Header names only; values carry the secret key.
                "headers": sorted(headers),
                "message_count": len(history),
                "has_attachments": bool(
                    pending_attachments or history[-1].attachments
                ),
            },
        )

        started = time.monotonic()
        try:
            response = await self._client.post(url, headers=headers, json=body)
        except httpx.TransportError as exc:
            raise self._map_exception(exc, adapter) from exc

        payload = self._parse_body(response, adapter)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        if not response.is_success:
            message = extract_error_message(payload, response.status_code)
            LOGGER.warning(
                "dispatcher.provider_error",
                extra={
                    "event": "dispatcher.provider_error",
                    "provider": adapter.id,
                    "status": response.status_code,
                    "error": message,
                },
            )
            raise ProviderError(message, status_code=response.status_code)

        LOGGER.info(
            "dispatcher.response",
            extra={
                "event": "dispatcher.response",
                "provider": adapter.id,
                "status": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        try:
            return adapter.extract_text(payload)
        except ProviderError as exc:
            LOGGER.warning(
                "dispatcher.provider_error",
                extra={
                    "event": "dispatcher.provider_error",
                    "provider": adapter.id,
                    "status": response.status_code,
                    "error": str(exc),
                },
            )
            raise

    def _parse_body(self, response: httpx.Response, adapter: ProviderAdapter) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            if not response.is_success:
                # Error bodies are not always JSON; the status code still informs.
                return None
            LOGGER.warning(
                "dispatcher.parse_error",
                extra={
                    "event": "dispatcher.parse_error",
                    "provider": adapter.id,
                    "status": response.status_code,
                },
            )
            raise ResponseParseError(PARSE_ERROR_MESSAGE) from exc

    def _map_exception(
        self, exc: httpx.TransportError, adapter: ProviderAdapter
    ) -> NetworkError:
        LOGGER.warning(
            "dispatcher.network_error",
            extra={
                "event": "dispatcher.network_error",
                "provider": adapter.id,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
        return NetworkError(NETWORK_ERROR_MESSAGE)
