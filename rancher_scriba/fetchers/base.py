"""
Base fetcher interface for Rancher Scriba.

This module defines the abstract interface that all entity sources must implement.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import Cluster, Project


class BaseFetcher(ABC):
    """
    Abstract base class for entity sources.

    A fetcher returns decoded Cluster and Project records. It raises on
    failure and never returns a partial list.
    """

    @abstractmethod
    def fetch_clusters(self) -> List[Cluster]:
        """
        Retrieve every node from the clusters collection.

        Returns:
            List of Cluster records, including non-cluster node kinds
        """
        pass

    @abstractmethod
    def fetch_projects(self, cluster_id: str) -> List[Project]:
        """
        Retrieve the projects owned by one cluster.

        Args:
            cluster_id: Identifier of the owning cluster

        Returns:
            List of Project records
        """
        pass

    def close(self) -> None:
        """Release any resources held by the fetcher."""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
