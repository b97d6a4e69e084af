"""
Document rendering for Rancher Scriba.

Turns a Snapshot into the "clusters" and "projects" section bodies read by the
policy engine. Each entry becomes a YAML-compatible block:

    c-m-abc123:
      Cluster ID: c-m-abc123
      Name: "production"

    c-m-abc123:p-xyz:
      Project ID: c-m-abc123:p-xyz
      Name: "Default"
      Annotation1: "env = prod"

Blocks are ordered by identifier and annotations by key, so the same snapshot
always renders to the same bytes.
"""

from typing import Dict, List

from .models import ClusterEntry, ProjectEntry, Snapshot

CLUSTERS_SECTION = "clusters"
PROJECTS_SECTION = "projects"
OWNED_SECTIONS = (CLUSTERS_SECTION, PROJECTS_SECTION)

_ESCAPES = {
    "\\": "\\\\",
    "\"": "\\\"",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _escape_char(char: str) -> str:
    if char in _ESCAPES:
        return _ESCAPES[char]
    code = ord(char)
    # C0, DEL and C1 controls are not printable in YAML
    if code < 0x20 or 0x7f <= code <= 0x9f:
        return f"\\x{code:02x}"
    return char


def escape(value: str) -> str:
    """Escape a value for use inside a double-quoted string."""
    return "".join(_escape_char(char) for char in value)


def quote(value: str) -> str:
    return f"\"{escape(value)}\""


class DocumentComposer:
    """
    Renders Snapshot entries into document sections.
    """

    def render_cluster(self, entry: ClusterEntry) -> str:
        lines = [
            f"{entry.id}:",
            f"  Cluster ID: {entry.id}",
            f"  Name: {quote(entry.name)}",
        ]
        return "\n".join(lines) + "\n"

    def render_project(self, entry: ProjectEntry) -> str:
        lines = [
            f"{entry.id}:",
            f"  Project ID: {entry.id}",
            f"  Name: {quote(entry.name)}",
        ]
        for number, (key, value) in enumerate(entry.sorted_annotations(), 1):
            lines.append(f"  Annotation{number}: {quote(f'{key} = {value}')}")
        return "\n".join(lines) + "\n"

    def compose(self, snapshot: Snapshot) -> Dict[str, str]:
        """
        Render both owned sections.

        Args:
            snapshot: The collected entries

        Returns:
            Mapping with exactly the "clusters" and "projects" section bodies
        """
        clusters: List[str] = [self.render_cluster(entry) for entry in snapshot.clusters()]
        projects: List[str] = [self.render_project(entry) for entry in snapshot.projects()]
        return {
            CLUSTERS_SECTION: "".join(clusters),
            PROJECTS_SECTION: "".join(projects),
        }
