"""Core infrastructure subpackage.

This package contains the wrappers around the external collaborators
(the Kubernetes API and the helm binary) and the pre-flight checks.
"""

from guardrails_deploy.core.cluster import Cluster
from guardrails_deploy.core.helm import Helm, HelmCommandError
from guardrails_deploy.core.prerequisites import check_ngc_configuration, check_prerequisites, check_tools

__all__ = [
    "Cluster",
    "Helm",
    "HelmCommandError",
    "check_ngc_configuration",
    "check_prerequisites",
    "check_tools",
]
