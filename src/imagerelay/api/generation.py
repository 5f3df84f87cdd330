"""Generation workflow behind ``POST /generate``.

:class:`GenerationService` ties the inference client, the image helpers, and
the audit log together:

1. Call the inference API ``images_per_request`` times, one after another,
   with the same prompt.  The first failure aborts the whole request.
2. Encode every image as a data URI and hash its bytes.
3. Append a single :class:`~imagerelay.api.models.LogEntry` for the request.

Generation is all-or-nothing.  Nothing is logged unless every call
succeeded, and the log append itself can never fail the request.
"""

from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool

from imagerelay.api.models import LogEntry
from imagerelay.core.imaging import image_digest, to_data_uri
from imagerelay.core.inference import InferenceClient
from imagerelay.core.log_store import LogStore

logger = logging.getLogger(__name__)


class GenerationService:
    """Runs a prompt through the inference API and records the result.

    Attributes:
        _client (InferenceClient): Upstream inference API client.
        _log_store (LogStore): Audit log receiving one entry per success.
        _images_per_request (int): Number of sequential upstream calls.
    """

    def __init__(
        self,
        client: InferenceClient,
        log_store: LogStore,
        images_per_request: int = 3,
    ) -> None:
        self._client = client
        self._log_store = log_store
        self._images_per_request = images_per_request

    async def generate(self, prompt: str) -> list[str]:
        """Generate images for *prompt* and log the request.

        The upstream calls are strictly sequential; the next call is only
        issued once the previous one has returned.

        Args:
            prompt: Non-empty prompt text.

        Returns:
            One data URI per generated image, in generation order.

        Raises:
            ConfigurationError: If the upstream token is not configured.
            UpstreamError: On the first failing upstream call.
        """
        images: list[bytes] = []
        for index in range(self._images_per_request):
            images.append(await self._client.generate(prompt))
            logger.debug(f"Image {index + 1}/{self._images_per_request} received")

        data_uris = [to_data_uri(image) for image in images]

        entry = LogEntry(
            prompt=prompt,
            image_hashes=[image_digest(image) for image in images],
            model=self._client.model_id,
        )
        await run_in_threadpool(self._log_store.append, entry.to_record())

        logger.info(f"Generated {len(images)} image(s) with {self._client.model_id}")
        return data_uris
