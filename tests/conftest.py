"""Shared test fixtures for guardrails-deploy tests."""

import time
from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException

from guardrails_deploy.charts.repositories import RepositoryRef
from guardrails_deploy.exceptions import RepositoryError
from guardrails_deploy.models import ChartEntry


class StaticRepository(RepositoryRef):
    """Repository returning a fixed listing, optionally failing or slow."""

    def __init__(self, name, charts=(), *, error=False, delay=0.0):
        super().__init__(name, f"https://charts.example.com/{name}")
        self.charts = list(charts)
        self.error = error
        self.delay = delay
        self.calls = 0

    def query(self, *, timeout=None):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise RepositoryError("connection refused", repository=self.name, url=self.url)
        entries = []
        for chart in self.charts:
            name, _, version = chart.partition("@")
            entries.append(ChartEntry(repository=self.name, name=name, version=version))
        return entries


class FakeCluster:
    """In-memory stand-in for Cluster tracking namespaces and secrets."""

    def __init__(self):
        self.context = "test-context"
        self.namespaces = set()
        self.secrets = {}
        self.create_error = None

    def ensure_namespace(self, name):
        if name in self.namespaces:
            return False
        self.namespaces.add(name)
        return True

    def read_secret(self, name, namespace):
        return self.secrets.get((namespace, name))

    def delete_secret(self, name, namespace):
        return self.secrets.pop((namespace, name), None) is not None

    def create_secret(self, namespace, body):
        if self.create_error is not None:
            raise self.create_error
        key = (namespace, body.metadata.name)
        if key in self.secrets:
            raise ApiException(status=409, reason="AlreadyExists")
        self.secrets[key] = body


@pytest.fixture
def fake_cluster():
    """In-memory cluster."""
    return FakeCluster()


@pytest.fixture
def static_repository():
    """Factory for static repositories."""
    return StaticRepository


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}, {"name": "other"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def mock_core_v1_api():
    """Mock CoreV1Api."""
    with patch("kubernetes.client.CoreV1Api") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        yield api_instance


@pytest.fixture
def mock_version_api():
    """Mock VersionApi for connectivity probes."""
    with patch("kubernetes.client.VersionApi") as mock:
        api_instance = MagicMock()
        api_instance.get_code.return_value.git_version = "v1.29.4"
        mock.return_value = api_instance
        yield api_instance


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock


@pytest.fixture
def sample_values_yaml():
    """Sample Helm values content."""
    return """guardrails:
  enabled: true
nim:
  enabled: true
  image:
    repository: nvcr.io/nim/meta/llama-3.1-8b-instruct
"""
