"""
Document upsert logic for Rancher Scriba.

Reads the named document, creates it if absent, or overwrites only the
sections this collector owns and writes it back. Sections written by anyone
else are carried over unchanged.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from ..composer import OWNED_SECTIONS
from ..errors import DocumentNotFoundError
from ..models import Document
from .base import DocumentBackend


class DocumentStore:
    """
    Get-or-create plus merge of the collector's document.

    This is a plain read-modify-write. The only protection against a
    concurrent writer is the resource version the backend sends back on
    update; callers must ensure a single pass runs at a time.
    """

    def __init__(self, backend: DocumentBackend, owned_sections: Iterable[str] = OWNED_SECTIONS):
        """
        Initialize the store.

        Args:
            backend: Backing key-value store
            owned_sections: Section names this collector may write
        """
        self.backend = backend
        self.owned_sections: Tuple[str, ...] = tuple(owned_sections)
        self.last_action: Optional[str] = None

    def _check_sections(self, sections: Dict[str, str]) -> None:
        foreign = sorted(set(sections) - set(self.owned_sections))
        if foreign:
            raise ValueError(f"Refusing to write sections not owned by this collector: {', '.join(foreign)}")

    def upsert(self, name: str, namespace: str, sections: Dict[str, str]) -> Document:
        """
        Write the owned sections into the named document.

        Args:
            name: Document name
            namespace: Document namespace
            sections: Section name to body; every key must be an owned section

        Returns:
            The document as stored

        Raises:
            ValueError: If sections contains a key that is not owned
            StoreError: If reading (other than not-found) or writing fails
        """
        self._check_sections(sections)

        try:
            document = self.backend.get(name, namespace)
        except DocumentNotFoundError:
            logging.info(f"Document '{namespace}/{name}' not found, attempting to create")
            created = self.backend.create(Document(name=name, namespace=namespace, data=dict(sections)))
            self.last_action = "created"
            logging.info(f"Successfully created document '{namespace}/{name}'")
            return created

        logging.info(f"Document '{namespace}/{name}' found, updating")
        merged = dict(document.data)
        merged.update(sections)
        updated = self.backend.update(document.model_copy(update={"data": merged}))
        self.last_action = "updated"
        logging.info(f"Successfully updated document '{namespace}/{name}'")
        return updated
