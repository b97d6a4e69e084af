"""
Static fetcher for Rancher Scriba.

This module serves clusters and projects from in-memory data or a fixture
file, so a pass can run without a Rancher server (dry runs, local testing).
"""

import json
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import ConfigurationError
from ..models import Cluster, Project
from .base import BaseFetcher
from .rancher import decode_collection


class StaticFetcher(BaseFetcher):
    """
    Fetcher that returns fixed records.

    The fixture shape mirrors the API envelopes::

        clusters: [{id, name, type}, ...]
        projects:
          <clusterId>: [{id, name, clusterId, annotations}, ...]
    """

    def __init__(self, clusters: Optional[List[Any]] = None,
                 projects: Optional[Dict[str, List[Any]]] = None):
        """
        Initialize the fetcher.

        Args:
            clusters: Cluster records or raw dictionaries
            projects: Cluster identifier to project records or raw dictionaries
        """
        self._clusters = decode_collection({"data": list(clusters or [])}, Cluster, "fixture clusters")
        self._projects = {
            cluster_id: decode_collection({"data": list(items or [])}, Project, f"fixture projects of {cluster_id}")
            for cluster_id, items in (projects or {}).items()
        }
        self.requested_projects: List[str] = []

    @classmethod
    def from_file(cls, path: str) -> "StaticFetcher":
        """
        Load fixture data from a YAML or JSON file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        fixture_path = Path(path)
        try:
            with open(fixture_path, 'r', encoding='utf-8') as f:
                if fixture_path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load fixture {fixture_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Fixture {fixture_path} must be a mapping")
        return cls(clusters=data.get("clusters"), projects=data.get("projects"))

    def fetch_clusters(self) -> List[Cluster]:
        return list(self._clusters)

    def fetch_projects(self, cluster_id: str) -> List[Project]:
        self.requested_projects.append(cluster_id)
        return list(self._projects.get(cluster_id, []))
