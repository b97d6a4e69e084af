"""
Rancher Scriba: publishes Rancher cluster and project metadata.

Collects clusters and projects (with annotations) from the Rancher API and
writes them into a ConfigMap that a policy engine reads.
"""

__version__ = "0.1.0"
__author__ = "Rancher Scriba Project"

# Import main components
from .models import Cluster, Project, Snapshot, Document
from .retry import BackoffRetrier
from .fetchers import BaseFetcher, RancherFetcher, StaticFetcher
from .aggregator import SnapshotAggregator
from .composer import DocumentComposer
from .store import DocumentStore, ConfigMapBackend, InMemoryBackend
from .pipeline import CollectionPass, PassResult

__all__ = [
    "Cluster",
    "Project",
    "Snapshot",
    "Document",
    "BackoffRetrier",
    "BaseFetcher",
    "RancherFetcher",
    "StaticFetcher",
    "SnapshotAggregator",
    "DocumentComposer",
    "DocumentStore",
    "ConfigMapBackend",
    "InMemoryBackend",
    "CollectionPass",
    "PassResult"
]
