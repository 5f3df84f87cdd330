"""Configuration management for Image Relay.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the IMAGERELAY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (IMAGERELAY_* prefix)
2. .env file in the project root
3. Default values defined in RelayConfig

The credential, model and port fields also accept the bare names used by
common hosting platforms (``HF_TOKEN``, ``HF_MODEL``, ``ADMIN_PASSWORD``,
``PORT``), so an existing deployment can be pointed at this server without
renaming its variables.

Example .env file:
    IMAGERELAY_HF_TOKEN=hf_xxx
    IMAGERELAY_ADMIN_PASSWORD=change-me
    IMAGERELAY_IMAGES_PER_REQUEST=3
    IMAGERELAY_LOG_FILE=data/generation_log.json

Immutability
------------
``RelayConfig`` is frozen.  It is built once at process start and handed to
:func:`imagerelay.api.main.create_app`; route handlers read it from the
application state rather than from module globals.

Usage Example
-------------
    from imagerelay.core.config import RelayConfig

    config = RelayConfig()
    print(config.model_id)
    print(config.missing_credentials())
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL_ID = "black-forest-labs/FLUX.1-dev"
DEFAULT_INFERENCE_BASE_URL = "https://api-inference.huggingface.co/models"


class RelayConfig(BaseSettings):
    """Main configuration for Image Relay.

    Attributes
    ----------
    Upstream Settings:
        model_id : str
            Hugging Face model identifier the prompts are forwarded to
        hf_token : str | None
            Bearer token for the inference API (generation is refused without it)
        inference_base_url : str
            Base URL of the inference API; the model id is appended to it
        images_per_request : int
            Number of sequential upstream calls per ``POST /generate``
        upstream_timeout : float | None
            Per-call timeout in seconds; ``None`` waits indefinitely

    Admin Settings:
        admin_password : str | None
            Shared secret for ``GET /admin/logs`` (endpoint disabled without it)

    Storage:
        log_file : Path
            JSON array file holding the generation audit log

    Server Settings:
        server_host : str
            Bind address
        server_port : int
            Listen port
        static_dir : Path | None
            Optional front-end directory served at ``/``
        cors_origins : list[str]
            Origins allowed by the CORS middleware
        log_level : str
            Root logging level used by the ``imagerelay`` CLI

    Notes
    -----
    - Missing credentials are reported as startup warnings, not failures
    - Configuration is immutable after initialization
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMAGERELAY_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    # Upstream settings
    model_id: str = Field(
        default=DEFAULT_MODEL_ID,
        validation_alias=AliasChoices("IMAGERELAY_MODEL_ID", "HF_MODEL"),
        description="Hugging Face model ID used for generation",
    )
    hf_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("IMAGERELAY_HF_TOKEN", "HF_TOKEN"),
        description="Bearer token for the inference API",
    )
    inference_base_url: str = Field(
        default=DEFAULT_INFERENCE_BASE_URL,
        description="Inference API base URL (model id is appended)",
    )
    images_per_request: int = Field(
        default=3,
        description="Sequential upstream calls per generation request",
        ge=1,
        le=8,
    )
    upstream_timeout: float | None = Field(
        default=None,
        description="Upstream call timeout in seconds (None = no timeout)",
        gt=0,
    )

    # Admin settings
    admin_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("IMAGERELAY_ADMIN_PASSWORD", "ADMIN_PASSWORD"),
        description="Shared secret for the admin log endpoint",
    )

    # Storage
    log_file: Path = Field(
        default=Path("data/generation_log.json"),
        description="JSON array file holding the audit log",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("IMAGERELAY_SERVER_PORT", "PORT"),
        description="Server port",
        ge=1,
        le=65535,
    )
    static_dir: Path | None = Field(
        default=None,
        description="Optional front-end directory served at /",
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed by the CORS middleware",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level for the CLI entry point",
    )

    @property
    def model_url(self) -> str:
        """Full inference endpoint URL for :attr:`model_id`."""
        return f"{self.inference_base_url.rstrip('/')}/{self.model_id}"

    def missing_credentials(self) -> list[str]:
        """Return the names of credentials that are not configured.

        Empty strings count as missing, since that is what an unset
        variable in a ``.env`` file looks like.
        """
        missing = []
        if not self.hf_token:
            missing.append("hf_token")
        if not self.admin_password:
            missing.append("admin_password")
        return missing
