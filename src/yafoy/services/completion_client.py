"""HTTP client for the streamed chat completion endpoint."""

import logging
from typing import Any

import httpx

from yafoy.core.config import settings

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Limite de requêtes atteinte, veuillez réessayer plus tard."
CREDITS_EXHAUSTED_MESSAGE = "Crédits IA épuisés, veuillez contacter le support."
UPSTREAM_ERROR_MESSAGE = "Erreur du service IA"


class CompletionError(Exception):
    """The completion endpoint refused or failed a request."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def error_for_status(status_code: int) -> CompletionError:
    if status_code == 429:
        return CompletionError(429, RATE_LIMITED_MESSAGE)
    if status_code == 402:
        return CompletionError(402, CREDITS_EXHAUSTED_MESSAGE)
    return CompletionError(500, UPSTREAM_ERROR_MESSAGE)


class CompletionClient:
    """Client for an OpenAI-compatible streaming chat completion API."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url or settings.COMPLETION_API_URL
        self.api_key = api_key if api_key is not None else settings.COMPLETION_API_KEY
        self.model = model or settings.COMPLETION_MODEL
        self.client = httpx.AsyncClient(
            timeout=timeout or settings.COMPLETION_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def open_stream(self, messages: list[dict[str, Any]]) -> httpx.Response:
        """Start a streamed completion and return the open response.

        The caller reads ``response.aiter_bytes()`` and must close the
        response with ``aclose()``.

        Raises:
            CompletionError: Missing key, transport failure or non-2xx status
        """
        if not self.api_key:
            logger.error("COMPLETION_API_KEY is not configured")
            raise CompletionError(500, UPSTREAM_ERROR_MESSAGE)

        request = self.client.build_request(
            "POST",
            self.api_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"model": self.model, "messages": messages, "stream": True},
        )
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Completion request failed: {e}")
            raise CompletionError(502, UPSTREAM_ERROR_MESSAGE) from e

        if response.is_success:
            return response

        body = await response.aread()
        await response.aclose()
        logger.error(
            f"Completion endpoint error: {response.status_code} "
            f"{body.decode('utf-8', errors='replace')[:500]}"
        )
        raise error_for_status(response.status_code)

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()


_completion_client: CompletionClient | None = None


def get_completion_client() -> CompletionClient:
    """Shared client, created on first use."""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client


async def close_completion_client() -> None:
    global _completion_client
    if _completion_client is not None:
        await _completion_client.close()
        _completion_client = None
