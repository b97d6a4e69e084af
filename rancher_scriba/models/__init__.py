"""Data models for Rancher Scriba."""

from .entities import Cluster, Project
from .snapshot import ClusterEntry, ProjectEntry, SnapshotEntry, Snapshot
from .document import Document

__all__ = [
    "Cluster",
    "Project",
    "ClusterEntry",
    "ProjectEntry",
    "SnapshotEntry",
    "Snapshot",
    "Document"
]
