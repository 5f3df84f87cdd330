"""Core components for Image Relay.

This package contains everything that does not depend on the web framework:
configuration, the error hierarchy, the upstream inference client, image
encoding helpers, and the file-backed audit log.
"""

from .config import RelayConfig
from .errors import (
    ConfigurationError,
    ForbiddenError,
    LogStoreError,
    MissingPromptError,
    RelayError,
    UpstreamError,
)
from .imaging import image_digest, to_data_uri
from .inference import InferenceClient
from .log_store import LogStore

__all__ = [
    "RelayConfig",
    "RelayError",
    "MissingPromptError",
    "ConfigurationError",
    "ForbiddenError",
    "UpstreamError",
    "LogStoreError",
    "InferenceClient",
    "LogStore",
    "image_digest",
    "to_data_uri",
]
