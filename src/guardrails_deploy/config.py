"""Deployment configuration.

All behaviour of a run is driven by a single immutable DeployConfig built
by the CLI and handed to each component.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

DEFAULT_NAMESPACE = "nemo-guardrails"
DEFAULT_RELEASE = "nemo-guardrails"
DEFAULT_INSTALL_TIMEOUT = "15m"
DEFAULT_VALUES_FILE = Path("guardrails-values.yaml")

NGC_REGISTRY_SERVER = "nvcr.io"
NGC_USERNAME = "$oauthtoken"
NGC_EMAIL = "nemo-guardrails@nvidia.com"
PULL_SECRET_NAME = "nvcrimagepullsecret"
API_KEY_SECRET_NAME = "ngc-api"
API_KEY_FIELD = "NGC_API_KEY"

PRIMARY_CHART = "nemo-microservices-helm-chart"
COMPONENT_CHARTS = ("nemo-guardrails", "nim-llm")
REQUIRED_TOOLS = ("helm", "kubectl")


class RepositorySettings(NamedTuple):
    """A chart repository to register and query.

    Attributes:
        name: Local repository alias.
        url: Repository URL.
        authenticated: Whether the NGC API key is sent as credentials.

    """

    name: str
    url: str
    authenticated: bool = False


DEFAULT_REPOSITORIES = (
    RepositorySettings("nvidia", "https://helm.ngc.nvidia.com/nvidia"),
    RepositorySettings(
        "nvidia-nemo-microservices",
        "https://helm.ngc.nvidia.com/nvidia/nemo-microservices/",
        authenticated=True,
    ),
)


@dataclass(frozen=True, slots=True)
class DeployConfig:
    """Settings for a single deployment run.

    Attributes:
        namespace: Target Kubernetes namespace.
        api_key: NGC API key, or None to rely on an existing NGC CLI setup.
        release_name: Helm release name.
        values_file: Optional Helm values file.
        install_timeout: Helm ``--timeout`` value for the install.
        repo_timeout: Per-repository query timeout in seconds, None for no limit.
        repositories: Chart repositories in priority order.
        chart_pattern: Substring identifying the primary chart.
        component_charts: Charts that together form an acceptable alternate bundle.
        required_tools: Executables that must be on PATH.
        context: Kubeconfig context, None for the current one.
        use_index: Query repositories over HTTP instead of through helm.
        skip_install: Stop after chart resolution.

    """

    namespace: str = DEFAULT_NAMESPACE
    api_key: str | None = None
    release_name: str = DEFAULT_RELEASE
    values_file: Path | None = None
    install_timeout: str = DEFAULT_INSTALL_TIMEOUT
    repo_timeout: float | None = None
    repositories: tuple[RepositorySettings, ...] = DEFAULT_REPOSITORIES
    chart_pattern: str = PRIMARY_CHART
    component_charts: frozenset[str] = field(default_factory=lambda: frozenset(COMPONENT_CHARTS))
    required_tools: tuple[str, ...] = REQUIRED_TOOLS
    context: str | None = None
    use_index: bool = False
    skip_install: bool = False

    @property
    def create_secrets(self) -> bool:
        """Whether the run provisions the NGC secrets."""
        return bool(self.api_key)

    def __repr__(self) -> str:
        """Return a representation that never exposes the API key."""
        return (
            f"DeployConfig(namespace={self.namespace!r}, release_name={self.release_name!r}, "
            f"api_key={'***' if self.api_key else None!r}, values_file={self.values_file!r}, "
            f"use_index={self.use_index!r}, skip_install={self.skip_install!r})"
        )
