"""
Snapshot aggregation for Rancher Scriba.

Folds the clusters and per-cluster projects returned by a fetcher into one
Snapshot value.
"""

import logging
from typing import List

from .fetchers import BaseFetcher
from .models import Cluster, ClusterEntry, ProjectEntry, Snapshot
from .models.snapshot import CLUSTER_KIND


class SnapshotAggregator:
    """
    Builds a Snapshot from a fetcher.

    Only nodes whose type equals ``cluster_type`` are kept; other node kinds are
    neither added to the snapshot nor queried for projects. Fetch errors
    propagate, so a failed pass never yields a partial snapshot.
    """

    def __init__(self, fetcher: BaseFetcher, cluster_type: str = CLUSTER_KIND):
        self.fetcher = fetcher
        self.cluster_type = cluster_type
        self.skipped: List[Cluster] = []

    def is_cluster(self, cluster: Cluster) -> bool:
        return cluster.type == self.cluster_type

    def aggregate(self) -> Snapshot:
        """
        Fetch everything and return a fresh Snapshot.

        Returns:
            Snapshot holding one ClusterEntry per genuine cluster and one
            ProjectEntry per project of those clusters
        """
        snapshot = Snapshot()
        self.skipped = []

        for cluster in self.fetcher.fetch_clusters():
            if not self.is_cluster(cluster):
                logging.debug(f"Skipping {cluster.id}: type {cluster.type!r} is not {self.cluster_type!r}")
                self.skipped.append(cluster)
                continue

            snapshot.add(ClusterEntry.from_cluster(cluster))

            for project in self.fetcher.fetch_projects(cluster.id):
                snapshot.add(ProjectEntry.from_project(project, cluster.id))

        logging.info(
            f"Aggregated {len(snapshot.clusters())} clusters and {len(snapshot.projects())} projects "
            f"({len(self.skipped)} non-cluster nodes skipped)"
        )
        return snapshot
