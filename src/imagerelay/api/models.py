"""Pydantic request and response models for the Image Relay API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Models
------
GenerateRequest
    Payload for ``POST /generate``.
GenerateResponse
    Result of ``POST /generate`` — one data URI, or a list of them.
LogEntry
    One audit record, as stored in the log file and returned by
    ``GET /admin/logs``.
LogsResponse
    Result of ``GET /admin/logs``.
ErrorResponse
    Body of every error response.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Request body for the ``POST /generate`` endpoint.

    ``prompt`` is optional at the schema level so that a missing prompt is
    reported by the handler as a plain 400 rather than a validation error.

    Attributes:
        prompt: Text prompt forwarded verbatim to the inference API.
    """

    prompt: str | None = Field(
        default=None,
        description="Text prompt to generate images from.",
    )


class GenerateResponse(BaseModel):
    """Response body for a successful ``POST /generate``.

    Attributes:
        image: A list of ``data:image/png;base64,...`` URIs, or a single URI
            when the server is configured for one image per request.
    """

    image: list[str] | str = Field(
        ...,
        description="Generated image(s) as base64 data URIs.",
    )


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LogEntry(BaseModel):
    """One audit record for a single successful generation request.

    Field names are camelCase on the wire (``imageHashes``) to match the
    persisted log format; Python code may use either name.

    Attributes:
        timestamp: ISO-8601 UTC creation time.
        prompt: Prompt text exactly as submitted.
        image_hashes: Hex SHA-256 digest of each generated image, in order.
        model: Inference model identifier.
    """

    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(
        default_factory=_utc_now_iso,
        description="ISO-8601 creation time of the entry.",
    )
    prompt: str = Field(
        ...,
        description="Prompt text exactly as submitted.",
    )
    image_hashes: list[str] = Field(
        ...,
        alias="imageHashes",
        description="Hex SHA-256 digest per generated image.",
    )
    model: str = Field(
        ...,
        description="Inference model identifier.",
    )

    def to_record(self) -> dict:
        """Return the JSON-ready dict written to the log file."""
        return self.model_dump(by_alias=True)


class LogsResponse(BaseModel):
    """Response body for ``GET /admin/logs``."""

    logs: list[dict] = Field(
        default_factory=list,
        description="Every stored log entry in append order.",
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
