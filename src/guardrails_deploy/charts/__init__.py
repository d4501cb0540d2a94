"""Chart discovery subpackage.

This package contains the repository backends, the chart resolver
and values file parsing.
"""

from guardrails_deploy.charts.repositories import HelmRepository, IndexRepository, RepositoryRef, build_repositories
from guardrails_deploy.charts.resolver import resolve_chart
from guardrails_deploy.charts.values import parse_values_file

__all__ = [
    "HelmRepository",
    "IndexRepository",
    "RepositoryRef",
    "build_repositories",
    "parse_values_file",
    "resolve_chart",
]
