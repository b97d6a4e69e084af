"""
Snapshot models for Rancher Scriba.

A snapshot is the in-memory result of one collection pass. Each entry carries
its own kind, so the document sections are chosen from the entry itself and
never guessed from the shape of the identifier.
"""

from typing import Dict, Iterator, List, Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

from .entities import Cluster, Project

CLUSTER_KIND = "cluster"
PROJECT_KIND = "project"


class ClusterEntry(BaseModel):
    """
    Snapshot entry for a genuine cluster.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["cluster"] = CLUSTER_KIND

    id: str = Field(..., description="Cluster identifier")

    name: str = Field(default="", description="Cluster display name")

    @classmethod
    def from_cluster(cls, cluster: Cluster) -> "ClusterEntry":
        return cls(id=cluster.id, name=cluster.name)

    @property
    def description(self) -> str:
        """One-line summary of the entry."""
        return f"Cluster ID: {self.id}, Name: {self.name}"


class ProjectEntry(BaseModel):
    """
    Snapshot entry for a project and its annotations.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["project"] = PROJECT_KIND

    id: str = Field(..., description="Project identifier")

    name: str = Field(default="", description="Project display name")

    cluster_id: str = Field(..., description="Identifier of the cluster the project was fetched for")

    annotations: Dict[str, str] = Field(default_factory=dict, description="Project annotations")

    @classmethod
    def from_project(cls, project: Project, cluster_id: str) -> "ProjectEntry":
        return cls(
            id=project.id,
            name=project.name,
            cluster_id=project.cluster_id or cluster_id,
            annotations=dict(project.annotations)
        )

    def sorted_annotations(self) -> List[Tuple[str, str]]:
        """Annotations ordered by key."""
        return sorted(self.annotations.items())

    @property
    def description(self) -> str:
        """One-line summary of the entry, annotations included."""
        parts = [f"Project ID: {self.id}, Name: {self.name}"]
        for key, value in self.sorted_annotations():
            parts.append(f"Annotation: {key} = {value}")
        return ", ".join(parts)


SnapshotEntry = Union[ClusterEntry, ProjectEntry]


class Snapshot:
    """
    Entries collected during one pass, keyed by (kind, identifier).

    Keying by kind means a cluster and a project that share a raw identifier
    are both kept. Adding an entry whose kind and identifier already exist
    replaces the earlier one.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, str], SnapshotEntry] = {}

    def add(self, entry: SnapshotEntry) -> None:
        self._entries[(entry.kind, entry.id)] = entry

    def get(self, kind: str, entity_id: str) -> SnapshotEntry:
        return self._entries[(kind, entity_id)]

    def clusters(self) -> List[ClusterEntry]:
        """Cluster entries ordered by identifier."""
        return sorted(
            (e for e in self._entries.values() if isinstance(e, ClusterEntry)),
            key=lambda e: e.id
        )

    def projects(self) -> List[ProjectEntry]:
        """Project entries ordered by identifier."""
        return sorted(
            (e for e in self._entries.values() if isinstance(e, ProjectEntry)),
            key=lambda e: e.id
        )

    def descriptions(self) -> Dict[Tuple[str, str], str]:
        """One-line description of every entry."""
        return {key: entry.description for key, entry in self._entries.items()}

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[SnapshotEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Snapshot(clusters={len(self.clusters())}, projects={len(self.projects())})"
