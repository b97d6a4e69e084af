"""
In-memory backend for Rancher Scriba.

Keeps documents in a dictionary and mimics the resource-version checks of the
Kubernetes API. Used for dry runs and tests.
"""

from typing import Dict, Tuple

from ..errors import DocumentNotFoundError, StoreConflictError
from ..models import Document
from .base import DocumentBackend


class InMemoryBackend(DocumentBackend):
    """
    Dictionary-backed document store.
    """

    def __init__(self):
        self.documents: Dict[Tuple[str, str], Document] = {}
        self._version = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def get(self, name: str, namespace: str) -> Document:
        try:
            return self.documents[(namespace, name)].model_copy(deep=True)
        except KeyError:
            raise DocumentNotFoundError(f"Document '{namespace}/{name}' not found", status_code=404)

    def create(self, document: Document) -> Document:
        key = (document.namespace, document.name)
        if key in self.documents:
            raise StoreConflictError(f"Document '{document.namespace}/{document.name}' already exists", status_code=409)
        stored = document.model_copy(deep=True, update={"resource_version": self._next_version()})
        self.documents[key] = stored
        return stored.model_copy(deep=True)

    def update(self, document: Document) -> Document:
        key = (document.namespace, document.name)
        current = self.documents.get(key)
        if current is None:
            raise DocumentNotFoundError(f"Document '{document.namespace}/{document.name}' not found", status_code=404)
        if document.resource_version is not None and document.resource_version != current.resource_version:
            raise StoreConflictError(
                f"Document '{document.namespace}/{document.name}' was modified "
                f"(expected version {document.resource_version}, found {current.resource_version})",
                status_code=409
            )
        stored = document.model_copy(deep=True, update={"resource_version": self._next_version()})
        self.documents[key] = stored
        return stored.model_copy(deep=True)
