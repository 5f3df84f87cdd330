"""Image Relay - prompt-to-image relay with a hashed audit log."""

__version__ = "0.1.0"

from imagerelay.core.config import RelayConfig
from imagerelay.core.log_store import LogStore

__all__ = [
    "LogStore",
    "RelayConfig",
]
