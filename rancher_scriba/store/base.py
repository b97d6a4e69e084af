"""
Base backend interface for the document store.

This module defines the three primitive operations the upsert logic needs
from a backing key-value store.
"""

from abc import ABC, abstractmethod

from ..models import Document


class DocumentBackend(ABC):
    """
    Abstract base class for document storage backends.

    Implementations raise DocumentNotFoundError from get() when the document
    does not exist, and StoreError for every other failure.
    """

    @abstractmethod
    def get(self, name: str, namespace: str) -> Document:
        """
        Read a document.

        Raises:
            DocumentNotFoundError: If no document with that name exists
            StoreError: On any other failure
        """
        pass

    @abstractmethod
    def create(self, document: Document) -> Document:
        """
        Create a new document.

        Returns:
            The document as stored, with its resource version
        """
        pass

    @abstractmethod
    def update(self, document: Document) -> Document:
        """
        Replace an existing document.

        Returns:
            The document as stored, with its new resource version
        """
        pass
