"""HTTP client for the upstream image-generation inference API.

This module provides :class:`InferenceClient`, the single point of contact
with the third-party inference service.  One call to :meth:`generate`
issues exactly one ``POST`` and returns the raw image bytes.

Request Format
--------------
::

    POST {inference_base_url}/{model_id}
    Authorization: Bearer {hf_token}
    Content-Type: application/json

    {"inputs": "<prompt>"}

A successful response body is the binary image.  Any non-2xx status is raised
as :class:`~imagerelay.core.errors.UpstreamError` carrying the status code and
response text so the API layer can pass them through unchanged.

There is no retry or backoff.  The timeout defaults to none at all, so a hung
upstream call blocks the request until an external proxy gives up.

Usage
-----
::

    client = InferenceClient(config)
    image_bytes = await client.generate("a lighthouse at dusk")
    await client.aclose()
"""

from __future__ import annotations

import logging

import httpx

from imagerelay.core.config import RelayConfig
from imagerelay.core.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class InferenceClient:
    """Thin async wrapper around the inference API.

    Attributes:
        _config (RelayConfig):
            Application configuration; supplies the endpoint URL, token, and
            timeout.
        _client (httpx.AsyncClient):
            Shared HTTP connection pool for all upstream calls.
    """

    def __init__(
        self,
        config: RelayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            config: Application configuration instance.
            transport: Optional httpx transport, used by tests to stub the
                upstream service.
        """
        self._config = config
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.upstream_timeout),
            transport=transport,
        )

    @property
    def model_id(self) -> str:
        return self._config.model_id

    async def generate(self, prompt: str) -> bytes:
        """Generate one image for *prompt*.

        Args:
            prompt: Text prompt forwarded verbatim.

        Returns:
            Raw image bytes from the response body.

        Raises:
            ConfigurationError: If no upstream token is configured.
            UpstreamError: If the inference API returns a non-2xx status.
        """
        if not self._config.hf_token:
            raise ConfigurationError("Server is missing the inference API token")

        response = await self._client.post(
            self._config.model_url,
            headers={"Authorization": f"Bearer {self._config.hf_token}"},
            json={"inputs": prompt},
        )

        if not response.is_success:
            logger.warning(
                f"Inference API returned {response.status_code} for model {self.model_id}"
            )
            raise UpstreamError(response.status_code, response.text)

        logger.debug(f"Received {len(response.content)} bytes from {self.model_id}")
        return response.content

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
