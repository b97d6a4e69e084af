"""
Kubernetes ConfigMap backend for Rancher Scriba.

Documents are stored as ConfigMaps. The service account needs get, create and
update on configmaps in the target namespace.
"""

import logging
from typing import Any, Callable, Optional

import urllib3

from kubernetes import client, config as kube_config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from ..errors import ConfigurationError, DocumentNotFoundError, StoreConflictError, StoreError
from ..models import Document
from .base import DocumentBackend


def _store_error(action: str, document: str, error: ApiException) -> StoreError:
    message = f"Failed to {action} ConfigMap '{document}': {error.status} {error.reason}"
    if error.status == 404:
        return DocumentNotFoundError(message, status_code=404)
    if error.status == 409:
        return StoreConflictError(message, status_code=409)
    return StoreError(message, status_code=error.status)


class ConfigMapBackend(DocumentBackend):
    """
    Stores documents as ConfigMaps through the Kubernetes API.
    """

    def __init__(self, core_api: Optional[client.CoreV1Api] = None):
        """
        Initialize the backend.

        Args:
            core_api: CoreV1Api client; built from the default configuration when omitted
        """
        self.core_api = core_api or client.CoreV1Api()

    @classmethod
    def from_environment(cls, in_cluster: bool = True, kubeconfig: Optional[str] = None) -> "ConfigMapBackend":
        """
        Build a backend from the in-cluster service account or a kubeconfig.

        Raises:
            ConfigurationError: If no usable Kubernetes configuration is found
        """
        try:
            if in_cluster:
                kube_config.load_incluster_config()
                logging.info("Loaded in-cluster Kubernetes configuration")
            else:
                kube_config.load_kube_config(config_file=kubeconfig)
                logging.info(f"Loaded Kubernetes configuration from {kubeconfig or 'default kubeconfig'}")
        except ConfigException as e:
            raise ConfigurationError(f"Error creating Kubernetes client configuration: {e}") from e

        return cls(client.CoreV1Api())

    def get(self, name: str, namespace: str) -> Document:
        config_map = self._request(
            "read", f"{namespace}/{name}",
            self.core_api.read_namespaced_config_map, name=name, namespace=namespace
        )
        return self._to_document(config_map, namespace)

    def create(self, document: Document) -> Document:
        created = self._request(
            "create", f"{document.namespace}/{document.name}",
            self.core_api.create_namespaced_config_map,
            namespace=document.namespace, body=self._to_config_map(document)
        )
        return self._to_document(created, document.namespace)

    def update(self, document: Document) -> Document:
        updated = self._request(
            "update", f"{document.namespace}/{document.name}",
            self.core_api.replace_namespaced_config_map,
            name=document.name, namespace=document.namespace, body=self._to_config_map(document)
        )
        return self._to_document(updated, document.namespace)

    @staticmethod
    def _request(action: str, document: str, method: Callable[..., Any], **kwargs: Any) -> Any:
        try:
            return method(**kwargs)
        except ApiException as e:
            raise _store_error(action, document, e) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise StoreError(f"Failed to {action} ConfigMap '{document}': {e}") from e

    @staticmethod
    def _to_config_map(document: Document) -> client.V1ConfigMap:
        source = document.source if isinstance(document.source, client.V1ConfigMap) else None
        if source is None:
            metadata = client.V1ObjectMeta(name=document.name, namespace=document.namespace)
            config_map = client.V1ConfigMap(metadata=metadata)
        else:
            # Labels, annotations, owner references and binary_data are carried over from the read
            metadata = client.V1ObjectMeta(**{
                attribute: getattr(source.metadata, attribute)
                for attribute in client.V1ObjectMeta.openapi_types
            })
            config_map = client.V1ConfigMap(
                api_version=source.api_version,
                kind=source.kind,
                metadata=metadata,
                binary_data=source.binary_data,
                immutable=source.immutable
            )

        # resource_version makes the API server reject a replace that lost a race
        config_map.metadata.resource_version = document.resource_version
        config_map.data = dict(document.data)
        return config_map

    @staticmethod
    def _to_document(config_map, namespace: str) -> Document:
        metadata = config_map.metadata
        return Document(
            name=metadata.name,
            namespace=metadata.namespace or namespace,
            data=dict(config_map.data or {}),
            resource_version=metadata.resource_version,
            source=config_map
        )
