"""Custom exceptions for guardrails-deploy.

This module defines the exception hierarchy used throughout the application
to provide meaningful error messages and proper error handling.

Chart resolution outcomes (found, found alternate, not found) are not part of
this hierarchy: they are ordinary values returned by the resolver.
"""


class DeployError(Exception):
    """Base exception for all guardrails-deploy errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all deployment errors with a single
    except clause if desired.
    """

    pass


class MissingToolError(DeployError):
    """Raised when a required command-line tool is not found on PATH.

    Attributes:
        tool: Name of the missing executable.

    """

    def __init__(self, tool: str, hint: str = "") -> None:
        self.tool = tool
        message = f"{tool} is not installed or not on PATH"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class ClusterUnreachableError(DeployError):
    """Raised when connection to the Kubernetes cluster fails.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The cluster is unreachable
    - Authentication fails
    """

    pass


class ProvisioningError(DeployError):
    """Raised when the cluster rejects creation or replacement of an object.

    Attributes:
        reason: Short description of why the operation failed.
        namespace: Target namespace.
        name: Name of the object being provisioned.

    """

    def __init__(self, reason: str, *, namespace: str = "", name: str = "") -> None:
        self.reason = reason
        self.namespace = namespace
        self.name = name
        target = f"{namespace}/{name}" if namespace and name else name or namespace
        message = f"Failed to provision {target}: {reason}" if target else reason
        super().__init__(message)


class CredentialsError(DeployError):
    """Raised when no usable NGC credentials are available.

    This happens when no API key was supplied and the NGC CLI is either
    missing or not configured.
    """

    pass


class RepositoryError(DeployError):
    """Raised when a chart repository cannot be registered or queried.

    Attributes:
        repository: Repository name.
        url: Repository URL.

    """

    def __init__(self, message: str, *, repository: str, url: str = "") -> None:
        self.repository = repository
        self.url = url
        location = f"{repository} ({url})" if url else repository
        super().__init__(f"Repository {location}: {message}")


class InstallError(DeployError):
    """Raised when the Helm install/upgrade of the release fails."""

    pass


class ValuesFileError(DeployError):
    """Raised when the Helm values file is missing or malformed.

    This can occur when:
    - The file does not exist
    - The file is not valid YAML
    - The YAML document is not a mapping
    """

    pass
