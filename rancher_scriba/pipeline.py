"""
Collection pass for Rancher Scriba.

One pass is fetch -> aggregate -> compose -> upsert. Nothing is written until
the whole snapshot has been collected, so a failed fetch leaves the document
exactly as it was.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .aggregator import SnapshotAggregator
from .composer import DocumentComposer
from .fetchers import BaseFetcher
from .models import Snapshot
from .retry import BackoffRetrier
from .store import DocumentStore


@dataclass
class PassResult:
    """
    Outcome of one collection pass.
    """
    clusters: int
    projects: int
    skipped: int
    sections: Dict[str, str] = field(default_factory=dict)
    action: Optional[str] = None
    resource_version: Optional[str] = None

    @property
    def written(self) -> bool:
        return self.action is not None


class CollectionPass:
    """
    Runs one full refresh of the document.
    """

    def __init__(self, fetcher: BaseFetcher, store: Optional[DocumentStore],
                 document_name: str = "rancher-data", namespace: str = "kube-system",
                 cluster_type: str = "cluster", composer: Optional[DocumentComposer] = None,
                 upsert_retrier: Optional[BackoffRetrier] = None):
        """
        Initialize the pass.

        Args:
            fetcher: Source of clusters and projects
            store: Document store; None renders the sections without writing them
            document_name: Name of the target document
            namespace: Namespace of the target document
            cluster_type: Type discriminator of genuine clusters
            composer: Section renderer
            upsert_retrier: When given, the upsert is retried with this policy
        """
        self.aggregator = SnapshotAggregator(fetcher, cluster_type=cluster_type)
        self.composer = composer or DocumentComposer()
        self.store = store
        self.document_name = document_name
        self.namespace = namespace
        self.upsert_retrier = upsert_retrier

    def collect(self) -> Snapshot:
        return self.aggregator.aggregate()

    def run(self) -> PassResult:
        """
        Execute the pass.

        Returns:
            PassResult describing what was collected and written

        Raises:
            RetriesExhaustedError: If fetching (or a retried upsert) gave up
            StoreError: If the document could not be read or written
        """
        logging.info(f"Starting collection pass for document '{self.namespace}/{self.document_name}'")

        snapshot = self.collect()
        sections = self.composer.compose(snapshot)
        result = PassResult(
            clusters=len(snapshot.clusters()),
            projects=len(snapshot.projects()),
            skipped=len(self.aggregator.skipped),
            sections=sections
        )

        if self.store is None:
            logging.info("No document store configured, skipping write")
            return result

        if self.upsert_retrier is not None:
            document = self.upsert_retrier.call(
                self.store.upsert, self.document_name, self.namespace, sections,
                description=f"Writing document {self.namespace}/{self.document_name}"
            )
        else:
            document = self.store.upsert(self.document_name, self.namespace, sections)

        result.action = self.store.last_action
        result.resource_version = document.resource_version
        logging.info(
            f"Pass completed: {result.clusters} clusters, {result.projects} projects, "
            f"{result.skipped} skipped; document {result.action}"
        )
        return result
