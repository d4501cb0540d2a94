"""Pre-flight checks.

Verifies required executables and cluster connectivity before anything is
changed in the cluster. Every check fails fast; none is retried.
"""

import shutil
import subprocess
from collections.abc import Iterable

from icecream import ic

from guardrails_deploy import console
from guardrails_deploy.core.cluster import Cluster
from guardrails_deploy.exceptions import CredentialsError, MissingToolError
from guardrails_deploy.models import ToolAvailability

_TOOL_HINTS = {
    "helm": "Please install Helm first.",
    "kubectl": "Please ensure you have access to a Kubernetes cluster.",
}


def check_tools(tools: Iterable[str]) -> list[ToolAvailability]:
    """Look up each tool on PATH.

    Args:
        tools: Executable names.

    Returns:
        Availability of every tool, in input order.

    """
    availability = [ToolAvailability(name=tool, present=shutil.which(tool) is not None) for tool in tools]
    ic(availability)
    return availability


def check_prerequisites(tools: Iterable[str], *, context: str | None = None) -> Cluster:
    """Verify required tools and cluster connectivity.

    Args:
        tools: Executables that must be on PATH.
        context: Kubeconfig context, None for the current one.

    Returns:
        A connected Cluster.

    Raises:
        MissingToolError: For the first tool that is not installed.
        ClusterUnreachableError: If kubeconfig is unusable or the API server does not answer.

    """
    for tool in check_tools(tools):
        if not tool.present:
            raise MissingToolError(tool.name, _TOOL_HINTS.get(tool.name, ""))
        console.step(f"Found {console.highlight(tool.name)}")

    cluster = Cluster(context=context)
    with console.spinner("Checking cluster connectivity..."):
        version = cluster.probe()
    console.success(f"Connected to Kubernetes {console.highlight(version)}")
    return cluster


def check_ngc_configuration() -> None:
    """Verify that the NGC CLI is installed and configured.

    Used when no API key is supplied on the command line.

    Raises:
        CredentialsError: If the NGC CLI is missing or has no active configuration.

    """
    console.action("Checking for existing NGC configuration")
    if shutil.which("ngc") is None:
        raise CredentialsError("NGC CLI not found. Please provide an API key with -k")

    try:
        subprocess.run(["ngc", "config", "current"], capture_output=True, check=True)
    except subprocess.CalledProcessError as err:
        raise CredentialsError(
            "NGC CLI not configured. Please provide an API key with -k or run 'ngc config set'"
        ) from err

    console.success("Using existing NGC CLI configuration")
