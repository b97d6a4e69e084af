"""
Tests for the document store: upsert/merge logic and the backends.
"""

import unittest
from unittest.mock import MagicMock, patch

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from rancher_scriba.errors import ConfigurationError, DocumentNotFoundError, StoreConflictError, StoreError
from rancher_scriba.models import Document
from rancher_scriba.store import ConfigMapBackend, DocumentStore, InMemoryBackend
from rancher_scriba.store.base import DocumentBackend

SECTIONS = {"clusters": "c-1:\n  Cluster ID: c-1\n", "projects": "c-1:p-1:\n  Project ID: c-1:p-1\n"}


class TestDocumentStore(unittest.TestCase):
    """Test get-or-create and non-destructive merge."""

    def setUp(self):
        """Set up an in-memory backend."""
        self.backend = InMemoryBackend()
        self.store = DocumentStore(self.backend)

    def test_create_when_absent(self):
        """Test the first upsert creates the document with the final content."""
        document = self.store.upsert("rancher-data", "kube-system", SECTIONS)

        self.assertEqual(self.store.last_action, "created")
        self.assertEqual(document.data, SECTIONS)
        self.assertEqual(self.backend.get("rancher-data", "kube-system").data, SECTIONS)

    def test_create_is_single_write(self):
        """Test creation does not write an empty document first."""
        backend = MagicMock(spec=DocumentBackend)
        backend.get.side_effect = DocumentNotFoundError("not found", status_code=404)
        backend.create.side_effect = lambda document: document

        DocumentStore(backend).upsert("rancher-data", "kube-system", SECTIONS)

        backend.create.assert_called_once()
        created = backend.create.call_args[0][0]
        self.assertEqual(created.data, SECTIONS)
        backend.update.assert_not_called()

    def test_update_preserves_foreign_sections(self):
        """Test an unrelated section 'foo' survives the upsert unchanged."""
        self.backend.create(Document(name="rancher-data", namespace="kube-system",
                                     data={"foo": "bar", "clusters": "old", "projects": "old"}))

        self.store.upsert("rancher-data", "kube-system", SECTIONS)

        data = self.backend.get("rancher-data", "kube-system").data
        self.assertEqual(self.store.last_action, "updated")
        self.assertEqual(data["foo"], "bar")
        self.assertEqual(data["clusters"], SECTIONS["clusters"])
        self.assertEqual(data["projects"], SECTIONS["projects"])

    def test_update_sends_read_version(self):
        """Test the update carries the resource version that was read."""
        backend = MagicMock(spec=DocumentBackend)
        backend.get.return_value = Document(name="rancher-data", namespace="kube-system",
                                            data={"foo": "bar"}, resource_version="41")
        backend.update.side_effect = lambda document: document

        DocumentStore(backend).upsert("rancher-data", "kube-system", SECTIONS)

        written = backend.update.call_args[0][0]
        self.assertEqual(written.resource_version, "41")
        self.assertEqual(written.data, {"foo": "bar", **SECTIONS})

    def test_read_error_is_not_treated_as_absent(self):
        """Test a read failure other than not-found aborts without creating."""
        backend = MagicMock(spec=DocumentBackend)
        backend.get.side_effect = StoreError("forbidden", status_code=403)

        with self.assertRaises(StoreError):
            DocumentStore(backend).upsert("rancher-data", "kube-system", SECTIONS)

        backend.create.assert_not_called()
        backend.update.assert_not_called()

    def test_write_errors_propagate(self):
        """Test create and update failures reach the caller."""
        backend = MagicMock(spec=DocumentBackend)
        backend.get.side_effect = DocumentNotFoundError("not found", status_code=404)
        backend.create.side_effect = StoreError("quota exceeded", status_code=403)

        with self.assertRaises(StoreError):
            DocumentStore(backend).upsert("rancher-data", "kube-system", SECTIONS)
        self.assertEqual(backend.create.call_count, 1)

    def test_foreign_section_rejected(self):
        """Test the store refuses to write sections it does not own."""
        with self.assertRaises(ValueError):
            self.store.upsert("rancher-data", "kube-system", {"foo": "overwrite"})

        self.assertEqual(self.backend.documents, {})

    def test_concurrent_write_detected(self):
        """Test a write based on a stale read is rejected by the backend."""
        self.backend.create(Document(name="rancher-data", namespace="kube-system"))
        stale = self.backend.get("rancher-data", "kube-system")
        self.store.upsert("rancher-data", "kube-system", SECTIONS)

        with self.assertRaises(StoreConflictError):
            self.backend.update(stale.model_copy(update={"data": {"clusters": "lost"}}))


class TestInMemoryBackend(unittest.TestCase):
    """Test the dictionary-backed store."""

    def test_get_missing(self):
        """Test a missing document raises DocumentNotFoundError."""
        with self.assertRaises(DocumentNotFoundError):
            InMemoryBackend().get("rancher-data", "kube-system")

    def test_returned_documents_are_copies(self):
        """Test callers cannot mutate stored documents in place."""
        backend = InMemoryBackend()
        backend.create(Document(name="d", namespace="n", data={"a": "1"}))

        backend.get("d", "n").data["a"] = "changed"

        self.assertEqual(backend.get("d", "n").data, {"a": "1"})

    def test_duplicate_create(self):
        """Test creating an existing document is a conflict."""
        backend = InMemoryBackend()
        backend.create(Document(name="d", namespace="n"))

        with self.assertRaises(StoreConflictError):
            backend.create(Document(name="d", namespace="n"))


class TestConfigMapBackend(unittest.TestCase):
    """Test the Kubernetes ConfigMap backend against a mocked CoreV1Api."""

    def setUp(self):
        """Set up a backend with a mocked API."""
        self.api = MagicMock()
        self.backend = ConfigMapBackend(core_api=self.api)

    @staticmethod
    def config_map(data=None, version="10"):
        return client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name="rancher-data", namespace="kube-system", resource_version=version),
            data=data
        )

    def test_get(self):
        """Test a ConfigMap is converted to a Document."""
        self.api.read_namespaced_config_map.return_value = self.config_map({"foo": "bar"})

        document = self.backend.get("rancher-data", "kube-system")

        self.api.read_namespaced_config_map.assert_called_once_with(name="rancher-data", namespace="kube-system")
        self.assertEqual(document.data, {"foo": "bar"})
        self.assertEqual(document.resource_version, "10")

    def test_get_empty_config_map(self):
        """Test a ConfigMap without data yields an empty mapping."""
        self.api.read_namespaced_config_map.return_value = self.config_map(None)

        self.assertEqual(self.backend.get("rancher-data", "kube-system").data, {})

    def test_get_not_found(self):
        """Test a 404 maps to DocumentNotFoundError."""
        self.api.read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with self.assertRaises(DocumentNotFoundError):
            self.backend.get("rancher-data", "kube-system")

    def test_get_forbidden(self):
        """Test other API errors map to StoreError, not not-found."""
        self.api.read_namespaced_config_map.side_effect = ApiException(status=403, reason="Forbidden")

        with self.assertRaises(StoreError) as ctx:
            self.backend.get("rancher-data", "kube-system")

        self.assertNotIsInstance(ctx.exception, DocumentNotFoundError)
        self.assertEqual(ctx.exception.status_code, 403)

    def test_create(self):
        """Test creation sends a ConfigMap with the sections."""
        self.api.create_namespaced_config_map.side_effect = lambda namespace, body: body

        document = self.backend.create(Document(name="rancher-data", namespace="kube-system", data=SECTIONS))

        kwargs = self.api.create_namespaced_config_map.call_args.kwargs
        self.assertEqual(kwargs["namespace"], "kube-system")
        self.assertEqual(kwargs["body"].metadata.name, "rancher-data")
        self.assertEqual(kwargs["body"].data, SECTIONS)
        self.assertEqual(document.data, SECTIONS)

    def test_update_carries_resource_version(self):
        """Test the replace request includes the version that was read."""
        self.api.replace_namespaced_config_map.return_value = self.config_map(SECTIONS, version="11")

        document = self.backend.update(Document(name="rancher-data", namespace="kube-system",
                                                data=SECTIONS, resource_version="10"))

        kwargs = self.api.replace_namespaced_config_map.call_args.kwargs
        self.assertEqual(kwargs["name"], "rancher-data")
        self.assertEqual(kwargs["body"].metadata.resource_version, "10")
        self.assertEqual(document.resource_version, "11")

    def test_update_conflict(self):
        """Test a 409 maps to StoreConflictError."""
        self.api.replace_namespaced_config_map.side_effect = ApiException(status=409, reason="Conflict")

        with self.assertRaises(StoreConflictError):
            self.backend.update(Document(name="rancher-data", namespace="kube-system", resource_version="9"))

    def test_upsert_keeps_unowned_config_map_fields(self):
        """Test labels, annotations and binary data survive an update."""
        existing = client.V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=client.V1ObjectMeta(
                name="rancher-data", namespace="kube-system", resource_version="10",
                labels={"policy": "kyverno"}, annotations={"owner": "ops"}
            ),
            data={"foo": "bar", "clusters": "old"},
            binary_data={"blob": "AAAA"}
        )
        self.api.read_namespaced_config_map.return_value = existing
        self.api.replace_namespaced_config_map.side_effect = lambda name, namespace, body: body

        DocumentStore(self.backend).upsert("rancher-data", "kube-system", SECTIONS)

        body = self.api.replace_namespaced_config_map.call_args.kwargs["body"]
        self.assertEqual(body.metadata.labels, {"policy": "kyverno"})
        self.assertEqual(body.metadata.annotations, {"owner": "ops"})
        self.assertEqual(body.metadata.resource_version, "10")
        self.assertEqual(body.binary_data, {"blob": "AAAA"})
        self.assertEqual(body.data, {"foo": "bar", **SECTIONS})
        self.assertEqual(body.kind, "ConfigMap")

    def test_connection_failures_become_store_errors(self):
        """Test transport errors from every call are reported as StoreError."""
        unreachable = MaxRetryError(None, "/api/v1/namespaces/kube-system/configmaps", "connection refused")
        self.api.read_namespaced_config_map.side_effect = unreachable
        self.api.create_namespaced_config_map.side_effect = ConnectionRefusedError("connection refused")
        self.api.replace_namespaced_config_map.side_effect = unreachable
        document = Document(name="rancher-data", namespace="kube-system", data=SECTIONS)

        for call in (lambda: self.backend.get("rancher-data", "kube-system"),
                     lambda: self.backend.create(document),
                     lambda: self.backend.update(document)):
            with self.assertRaises(StoreError) as ctx:
                call()
            self.assertNotIsInstance(ctx.exception, DocumentNotFoundError)
            self.assertIsNone(ctx.exception.status_code)

    def test_unreachable_store_is_not_treated_as_absent(self):
        """Test a connection failure on read aborts the upsert without creating."""
        self.api.read_namespaced_config_map.side_effect = MaxRetryError(None, "/api", "timed out")

        with self.assertRaises(StoreError):
            DocumentStore(self.backend).upsert("rancher-data", "kube-system", SECTIONS)

        self.api.create_namespaced_config_map.assert_not_called()

    @patch("rancher_scriba.store.configmap.kube_config.load_incluster_config")
    def test_from_environment_without_cluster(self, load_incluster_config):
        """Test a missing service account is a configuration error."""
        load_incluster_config.side_effect = ConfigException("Service host/port is not set.")

        with self.assertRaises(ConfigurationError):
            ConfigMapBackend.from_environment(in_cluster=True)

    @patch("rancher_scriba.store.configmap.client.CoreV1Api")
    @patch("rancher_scriba.store.configmap.kube_config.load_kube_config")
    def test_from_environment_with_kubeconfig(self, load_kube_config, core_v1_api):
        """Test out-of-cluster configuration loads the given kubeconfig."""
        backend = ConfigMapBackend.from_environment(in_cluster=False, kubeconfig="/tmp/kubeconfig")

        load_kube_config.assert_called_once_with(config_file="/tmp/kubeconfig")
        self.assertIs(backend.core_api, core_v1_api.return_value)


if __name__ == '__main__':
    unittest.main()
