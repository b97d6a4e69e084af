"""
Entity models for Rancher Scriba.

This module defines the records decoded from the Rancher API. Only the fields
the collector needs are declared; everything else in the payload is ignored.
"""

from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Cluster(BaseModel):
    """
    A node returned by the clusters collection endpoint.

    The same endpoint can return node kinds that are not real clusters, which
    is why the type discriminator is kept.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(
        ...,
        description="Globally unique cluster identifier (e.g. 'c-m-abc123' or 'local')"
    )

    name: str = Field(
        default="",
        description="Display name of the cluster"
    )

    type: str = Field(
        default="",
        description="Type discriminator; genuine clusters use 'cluster'"
    )

    @field_validator("name", "type", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class Project(BaseModel):
    """
    A project belonging to a cluster, with its free-form annotations.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(
        ...,
        description="Globally unique project identifier (e.g. 'c-m-abc123:p-xyz')"
    )

    name: str = Field(
        default="",
        description="Display name of the project"
    )

    cluster_id: Optional[str] = Field(
        default=None,
        alias="clusterId",
        description="Identifier of the owning cluster"
    )

    annotations: Dict[str, str] = Field(
        default_factory=dict,
        description="Annotation key to value; unordered"
    )

    @field_validator("name", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("annotations", mode="before")
    @classmethod
    def _null_annotations(cls, value):
        # The API sends null for projects that never had annotations
        return {} if value is None else value
