"""
Rancher API fetcher for Rancher Scriba.

This module talks to the Rancher v3 API over HTTP. Every request goes through
the BackoffRetrier; any failure inside an attempt (transport error, non-200
status, bad JSON, missing envelope, invalid record) triggers a retry.
"""

import httpx
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import FetchError
from ..models import Cluster, Project
from ..retry import BackoffRetrier
from .base import BaseFetcher

ModelT = TypeVar("ModelT", bound=BaseModel)


class RancherFetcher(BaseFetcher):
    """
    Fetches clusters and projects from a Rancher server.
    """

    def __init__(self, base_url: str, token: str, retrier: Optional[BackoffRetrier] = None,
                 verify_tls: bool = True, timeout: float = 30.0,
                 client: Optional[httpx.Client] = None):
        """
        Initialize the fetcher.

        Args:
            base_url: API base URL, including the version path (e.g. https://rancher.example/v3)
            token: Bearer token for the API
            retrier: Retry policy for each request (defaults to 5 retries)
            verify_tls: Verify the server certificate. Disabling this accepts any
                certificate and should only be used for trusted internal endpoints.
            timeout: Per-request timeout in seconds
            client: Preconfigured httpx client; when given, verify_tls and timeout are ignored
        """
        self.base_url = base_url.rstrip('/')
        self.retrier = retrier or BackoffRetrier()
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        }

        if client is None:
            if not verify_tls:
                logging.warning(
                    "TLS certificate verification is disabled for the Rancher API; "
                    "any certificate presented by the server will be accepted"
                )
            client = httpx.Client(verify=verify_tls, timeout=timeout)
        self.client = client

    def close(self) -> None:
        self.client.close()

    def fetch_clusters(self) -> List[Cluster]:
        """
        Fetch every node from GET {base}/clusters.

        Raises:
            RetriesExhaustedError: If every attempt failed
        """
        logging.info("Fetching clusters from Rancher API")
        clusters = self.retrier.call(
            self._get_collection, "/clusters", None, Cluster,
            description="Fetching clusters"
        )
        logging.info(f"Fetched {len(clusters)} clusters from Rancher API")
        return clusters

    def fetch_projects(self, cluster_id: str) -> List[Project]:
        """
        Fetch the projects of one cluster from GET {base}/projects?clusterId=...

        Raises:
            RetriesExhaustedError: If every attempt failed
        """
        logging.info(f"Fetching projects for cluster ID: {cluster_id}")
        projects = self.retrier.call(
            self._get_collection, "/projects", {"clusterId": cluster_id}, Project,
            description=f"Fetching projects for cluster {cluster_id}"
        )
        logging.info(f"Fetched {len(projects)} projects for cluster ID {cluster_id} from Rancher API")
        return projects

    def _get_collection(self, path: str, params: Optional[Dict[str, str]],
                        model: Type[ModelT]) -> List[ModelT]:
        """
        One attempt at reading a {"data": [...]} collection.

        Raises:
            FetchError: On any failure; the caller decides whether to retry
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            raise FetchError(f"Error sending request to {url}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise FetchError(
                f"Unexpected status code from Rancher API for {path}: {response.status_code}",
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Error decoding response body from {path}: {e}") from e

        return decode_collection(payload, model, path)


def decode_collection(payload: Any, model: Type[ModelT], source: str = "response") -> List[ModelT]:
    """
    Decode the entity array from a {"data": [...]} envelope.

    Args:
        payload: Parsed JSON body
        model: Pydantic model for each element
        source: Label used in error messages

    Raises:
        FetchError: If the envelope or any element is malformed
    """
    if not isinstance(payload, dict) or "data" not in payload:
        raise FetchError(f"Response from {source} has no 'data' envelope")

    items = payload["data"]
    if items is None:
        return []
    if not isinstance(items, list):
        raise FetchError(f"'data' in response from {source} is not a list")

    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as e:
        raise FetchError(f"Invalid record in response from {source}: {e}") from e
