"""Document storage backends and the upsert logic."""

from .base import DocumentBackend
from .configmap import ConfigMapBackend
from .memory import InMemoryBackend
from .manager import DocumentStore

__all__ = ["DocumentBackend", "ConfigMapBackend", "InMemoryBackend", "DocumentStore"]
