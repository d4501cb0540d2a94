"""Kubernetes cluster interaction utilities.

This module provides the Cluster class, a thin wrapper around the official
kubernetes client covering the few calls the deployment needs: a
connectivity probe, namespace creation and secret replacement.

Methods report raw client failures (ApiException, MaxRetryError); callers
translate them into deployment errors.
"""

from icecream import ic
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from guardrails_deploy import console
from guardrails_deploy.exceptions import ClusterUnreachableError

_NOT_FOUND = 404
_CONFLICT = 409


class Cluster:
    """Manages Kubernetes cluster interactions for the deployment.

    Attributes:
        context: The active Kubernetes context name.

    """

    def __init__(self, *, context: str | None = None) -> None:
        """Load kubeconfig for the given or current context.

        Args:
            context: Context name to use. The current context is used when None.
                     Must be passed as a keyword argument.

        Raises:
            ClusterUnreachableError: If kubeconfig is invalid or missing.

        """
        self.context: str = self._set_context(context=context)
        try:
            config.load_kube_config(context=self.context)
        except ConfigException as e:
            raise ClusterUnreachableError(f"Cannot load kubeconfig for context {self.context}: {e}") from e

    @staticmethod
    def _set_context(*, context: str | None) -> str:
        """Resolve the Kubernetes context to use.

        Returns:
            The requested or current context name.

        Raises:
            ClusterUnreachableError: If kubeconfig is invalid or the context is unknown.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts()
        except ConfigException as e:
            raise ClusterUnreachableError(f"Invalid or missing kubeconfig: {e}") from e

        if context is None:
            if not current_context:
                raise ClusterUnreachableError("No current context set in kubeconfig")
            context = str(current_context["name"])
        elif context not in [c["name"] for c in contexts]:
            raise ClusterUnreachableError(f"Context {context!r} not found in kubeconfig")

        console.action(f"Working with {console.highlight(context)} cluster")
        return context

    def probe(self) -> str:
        """Check that the API server answers.

        Returns:
            The server's git version string.

        Raises:
            ClusterUnreachableError: If the API server cannot be reached.

        """
        try:
            version = client.VersionApi().get_code()
        except MaxRetryError as e:
            raise ClusterUnreachableError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e
        except ApiException as e:
            raise ClusterUnreachableError(
                f"Kubernetes API server rejected the connectivity probe: {e.status} {e.reason}"
            ) from e
        ic(version.git_version)
        return str(version.git_version)

    @staticmethod
    def ensure_namespace(name: str) -> bool:
        """Create a namespace unless it already exists.

        Args:
            name: Namespace name.

        Returns:
            True if the namespace was created, False if it already existed.

        """
        core_v1_api = client.CoreV1Api()
        try:
            core_v1_api.read_namespace(name)
            return False
        except ApiException as e:
            if e.status != _NOT_FOUND:
                raise

        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        try:
            core_v1_api.create_namespace(body)
        except ApiException as e:
            # Created concurrently by someone else
            if e.status == _CONFLICT:
                return False
            raise
        return True

    @staticmethod
    def read_secret(name: str, namespace: str) -> client.V1Secret | None:
        """Read a secret, returning None when it does not exist."""
        try:
            return client.CoreV1Api().read_namespaced_secret(name, namespace)
        except ApiException as e:
            if e.status == _NOT_FOUND:
                return None
            raise

    @staticmethod
    def delete_secret(name: str, namespace: str) -> bool:
        """Delete a secret, treating "not found" as success.

        Returns:
            True if a secret was deleted, False if none existed.

        """
        try:
            client.CoreV1Api().delete_namespaced_secret(name, namespace)
        except ApiException as e:
            if e.status == _NOT_FOUND:
                return False
            raise
        return True

    @staticmethod
    def create_secret(namespace: str, body: client.V1Secret) -> None:
        """Create a secret from a fully populated body."""
        client.CoreV1Api().create_namespaced_secret(namespace, body)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Cluster(context={self.context!r})"
