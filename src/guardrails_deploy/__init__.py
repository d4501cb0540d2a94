"""guardrails-deploy: Deploy NeMo Guardrails to Kubernetes with Helm.

This package checks prerequisites, provisions the NGC credentials as
Kubernetes secrets, finds the right Helm chart across the NGC chart
repositories and installs it.

Example usage:
    from guardrails_deploy import DeployConfig, Deployer

    # Deploy into the default namespace with a fresh API key
    result = Deployer(DeployConfig(api_key="...")).run()
"""

__version__ = "0.1.0"

from guardrails_deploy.charts.resolver import resolve_chart
from guardrails_deploy.cli import cli
from guardrails_deploy.config import DeployConfig
from guardrails_deploy.deployer import Deployer
from guardrails_deploy.exceptions import (
    ClusterUnreachableError,
    CredentialsError,
    DeployError,
    InstallError,
    MissingToolError,
    ProvisioningError,
    RepositoryError,
    ValuesFileError,
)
from guardrails_deploy.models import ChartEntry, ResolutionResult, ResolutionStatus, SecretKind, SecretSpec
from guardrails_deploy.secrets.provisioning import provision_secret

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "DeployConfig",
    "Deployer",
    # Operations
    "provision_secret",
    "resolve_chart",
    # Models
    "ChartEntry",
    "ResolutionResult",
    "ResolutionStatus",
    "SecretKind",
    "SecretSpec",
    # Exceptions
    "DeployError",
    "ClusterUnreachableError",
    "CredentialsError",
    "InstallError",
    "MissingToolError",
    "ProvisioningError",
    "RepositoryError",
    "ValuesFileError",
]
