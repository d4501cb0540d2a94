"""Data models for guardrails-deploy.

This module provides type-safe data structures for the application,
replacing loosely-typed dictionaries with proper Python data classes.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class SecretKind(str, Enum):
    """Supported Kubernetes secret kinds.

    Inherits from str to allow direct use in string contexts
    (e.g., console output, kubectl-style names).
    """

    REGISTRY = "registry"
    GENERIC = "generic"


class ToolAvailability(NamedTuple):
    """Presence of a required external command.

    Attributes:
        name: The executable name.
        present: Whether the executable was found on PATH.

    """

    name: str
    present: bool


@dataclass(frozen=True, slots=True)
class SecretSpec:
    """Desired state of a namespaced secret.

    Attributes:
        name: The name of the secret.
        namespace: The Kubernetes namespace for the secret.
        kind: Registry pull secret or generic key/value secret.
        fields: Secret payload. Registry secrets use the keys ``server``,
            ``username``, ``password`` and optionally ``email``; generic
            secrets store every key as-is.

    """

    name: str
    namespace: str
    kind: SecretKind
    fields: Mapping[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        """Return a representation that never exposes field values."""
        return (
            f"SecretSpec(name={self.name!r}, namespace={self.namespace!r}, "
            f"kind={self.kind.value!r}, fields={sorted(self.fields)!r})"
        )


class ChartEntry(NamedTuple):
    """A chart version published by a repository.

    Attributes:
        repository: Name of the repository hosting the chart.
        name: Chart name without the repository prefix.
        version: Chart version string as published.

    """

    repository: str
    name: str
    version: str

    @property
    def reference(self) -> str:
        """The ``repo/chart`` reference understood by helm."""
        return f"{self.repository}/{self.name}"


class ResolutionStatus(str, Enum):
    """Outcome of chart resolution."""

    FOUND = "found"
    FOUND_ALTERNATE = "found-alternate"
    NOT_FOUND = "not-found"


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Result of resolving which chart to install.

    Attributes:
        status: Resolution outcome.
        chosen_chart: The chart to install; only set when status is FOUND.
        candidates: Entries relevant to the outcome, in deterministic order.
        failed_repositories: Repositories whose query failed.

    """

    status: ResolutionStatus
    chosen_chart: ChartEntry | None = None
    candidates: tuple[ChartEntry, ...] = ()
    failed_repositories: tuple[str, ...] = ()
