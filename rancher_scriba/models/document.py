"""
Document model for Rancher Scriba.

The document is the persisted artifact read by the policy engine: a named
record holding section name to section body text.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class Document(BaseModel):
    """
    A named, namespaced key-value document in the cluster-state store.
    """

    name: str = Field(
        ...,
        description="Document name (e.g. 'rancher-data')"
    )

    namespace: str = Field(
        ...,
        description="Namespace the document lives in (e.g. 'kube-system')"
    )

    data: Dict[str, str] = Field(
        default_factory=dict,
        description="Section name to section body"
    )

    resource_version: Optional[str] = Field(
        default=None,
        description="Store-assigned version of the document as last read"
    )

    source: Optional[Any] = Field(
        default=None,
        exclude=True,
        repr=False,
        description="Backend object the document was read from; carries fields the collector does not own"
    )
