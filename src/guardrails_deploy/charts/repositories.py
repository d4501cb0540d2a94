"""Chart repository references.

A repository is queried through ``query()``, which returns typed ChartEntry
values. Two backends are provided: one that goes through the helm CLI
(registering the repository locally first) and one that reads the
repository's ``index.yaml`` directly over HTTP.
"""

from abc import ABC, abstractmethod
from typing import Any

import requests
import yaml
from icecream import ic

from guardrails_deploy.charts.helm_output import entries_from_index, entries_from_search
from guardrails_deploy.config import NGC_USERNAME, RepositorySettings
from guardrails_deploy.core.helm import Helm, HelmCommandError
from guardrails_deploy.exceptions import RepositoryError
from guardrails_deploy.models import ChartEntry


class RepositoryRef(ABC):
    """A chart repository that can be queried for its index.

    Attributes:
        name: Local repository alias.
        url: Repository URL.
        username: Optional basic-auth user.
        password: Optional basic-auth password.

    """

    def __init__(self, name: str, url: str, *, username: str | None = None, password: str | None = None) -> None:
        self.name = name
        self.url = url
        self.username = username
        self.password = password

    @property
    def authenticated(self) -> bool:
        return self.username is not None and self.password is not None

    def register(self) -> None:
        """Make the repository available for querying and installing."""

    @abstractmethod
    def query(self, *, timeout: float | None = None) -> list[ChartEntry]:
        """Return every chart version the repository currently hosts.

        Args:
            timeout: Seconds before the query is abandoned, None for no limit.

        Raises:
            RepositoryError: If the index cannot be fetched or decoded.

        """

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"{type(self).__name__}(name={self.name!r}, url={self.url!r}, authenticated={self.authenticated!r})"


class HelmRepository(RepositoryRef):
    """Repository registered with and queried through the helm CLI."""

    def __init__(
        self,
        name: str,
        url: str,
        *,
        helm: Helm,
        username: str | None = None,
        password: str | None = None,
    ) -> None:
        super().__init__(name, url, username=username, password=password)
        self.helm = helm

    def register(self) -> None:
        """Add the repository to helm and refresh its local index.

        Raises:
            RepositoryError: If helm rejects the repository.

        """
        try:
            self.helm.add_repository(self.name, self.url, username=self.username, password=self.password)
            self.helm.update_repositories([self.name])
        except HelmCommandError as e:
            raise RepositoryError(str(e), repository=self.name, url=self.url) from e

    def query(self, *, timeout: float | None = None) -> list[ChartEntry]:
        try:
            records = self.helm.search_repository(self.name, timeout=timeout)
        except HelmCommandError as e:
            raise RepositoryError(str(e), repository=self.name, url=self.url) from e
        return entries_from_search(self.name, records)


class IndexRepository(RepositoryRef):
    """Repository whose ``index.yaml`` is fetched over HTTP."""

    @property
    def index_url(self) -> str:
        return f"{self.url.rstrip('/')}/index.yaml"

    def query(self, *, timeout: float | None = None) -> list[ChartEntry]:
        auth = (self.username, self.password) if self.authenticated else None
        ic(self.index_url)
        try:
            response = requests.get(self.index_url, auth=auth, timeout=timeout)
            response.raise_for_status()
            index: Any = yaml.safe_load(response.text)
        except requests.RequestException as e:
            raise RepositoryError(f"failed to fetch index: {e}", repository=self.name, url=self.url) from e
        except yaml.YAMLError as e:
            raise RepositoryError(f"index is not valid YAML: {e}", repository=self.name, url=self.url) from e

        if not isinstance(index, dict):
            raise RepositoryError("index is not a YAML mapping", repository=self.name, url=self.url)
        return entries_from_index(self.name, index)


def build_repositories(
    settings: tuple[RepositorySettings, ...],
    *,
    api_key: str | None,
    helm: Helm,
    use_index: bool = False,
) -> list[RepositoryRef]:
    """Create repository references from configuration.

    Repositories flagged as authenticated receive the NGC credentials when an
    API key is available.
    """
    repositories: list[RepositoryRef] = []
    for setting in settings:
        username, password = (NGC_USERNAME, api_key) if setting.authenticated and api_key else (None, None)
        if use_index:
            repositories.append(IndexRepository(setting.name, setting.url, username=username, password=password))
        else:
            repositories.append(
                HelmRepository(setting.name, setting.url, helm=helm, username=username, password=password)
            )
    return repositories
