"""Deployment facade.

This module provides the Deployer class which runs the whole provisioning
flow: pre-flight checks, namespace and secrets, repository registration,
chart resolution and installation. Each step reports its own errors; the
resolution outcome is returned to the caller to decide on.
"""

from guardrails_deploy import console
from guardrails_deploy.charts.repositories import HelmRepository, RepositoryRef, build_repositories
from guardrails_deploy.charts.resolver import resolve_chart
from guardrails_deploy.charts.values import parse_values_file
from guardrails_deploy.config import API_KEY_SECRET_NAME, PULL_SECRET_NAME, DeployConfig
from guardrails_deploy.core.cluster import Cluster
from guardrails_deploy.core.helm import Helm, HelmCommandError
from guardrails_deploy.core.prerequisites import check_ngc_configuration, check_prerequisites
from guardrails_deploy.exceptions import InstallError, RepositoryError
from guardrails_deploy.models import ChartEntry, ResolutionResult, ResolutionStatus
from guardrails_deploy.secrets.provisioning import provision_namespace, provision_ngc_secrets

_GUARDRAILS_PORT = 7331
_NIM_PORT = 8000
_DOCS_URL = "https://docs.nvidia.com/nemo/microservices/latest/set-up/index.html"


class Deployer:
    """Runs a NeMo Guardrails deployment.

    Attributes:
        config: Settings for this run.
        helm: Helm wrapper used for repositories and the install.
        cluster: Connected cluster, set once the pre-flight checks pass.
        repositories: Repository references in priority order.

    """

    def __init__(self, config: DeployConfig, *, helm: Helm | None = None) -> None:
        self.config = config
        self.helm: Helm = helm or Helm()
        self.cluster: Cluster | None = None
        self.repositories: list[RepositoryRef] = build_repositories(
            config.repositories,
            api_key=config.api_key,
            helm=self.helm,
            use_index=config.use_index,
        )

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Deployer(config={self.config!r}, cluster={self.cluster!r})"

    def check(self) -> Cluster:
        """Run the pre-flight checks and connect to the cluster.

        The values file is checked here too so that a typo never leaves a
        half-prepared namespace behind.
        """
        if self.config.values_file is not None:
            parse_values_file(self.config.values_file)
            console.step(f"Values file {console.highlight(str(self.config.values_file))} is valid")

        self.cluster = check_prerequisites(self.config.required_tools, context=self.config.context)
        return self.cluster

    def prepare_namespace(self) -> None:
        """Create the namespace and the NGC secrets, or verify NGC CLI setup."""
        cluster = self._require_cluster()
        provision_namespace(cluster, self.config.namespace)

        if self.config.create_secrets:
            provision_ngc_secrets(cluster, self.config)
        else:
            check_ngc_configuration()

    def register_repositories(self) -> None:
        """Register every repository with helm.

        A repository that cannot be registered is reported and skipped; its
        query will then fail and be ignored by the resolver.
        """
        if self.config.use_index:
            return

        console.action("Adding Helm repositories")
        for repository in self.repositories:
            try:
                with console.spinner(f"Adding {repository.name}..."):
                    repository.register()
            except RepositoryError as e:
                console.warning(str(e))
                continue
            console.step(f"Added {console.highlight(repository.name)} ({repository.url})")

    def resolve(self) -> ResolutionResult:
        """Find the chart to install and report what was found."""
        console.action("Looking for NeMo charts")
        with console.spinner("Searching chart repositories..."):
            result = resolve_chart(
                self.repositories,
                self.config.chart_pattern,
                self.config.component_charts,
                timeout=self.config.repo_timeout,
            )
        _report_resolution(result, self.config)
        return result

    def install(self, chart: ChartEntry) -> None:
        """Install or upgrade the release from the chosen chart.

        Raises:
            InstallError: If helm fails to install the release.

        """
        if self.config.use_index:
            self._register_for_install(chart.repository)

        console.action(f"Installing {console.highlight(chart.reference)} {chart.version}")
        try:
            with console.spinner(f"Waiting for helm (timeout {self.config.install_timeout})..."):
                self.helm.upgrade_install(
                    release_name=self.config.release_name,
                    chart_ref=chart.reference,
                    namespace=self.config.namespace,
                    timeout=self.config.install_timeout,
                    version=chart.version,
                    values_file=self.config.values_file,
                )
        except HelmCommandError as e:
            raise InstallError(f"Failed to install release {self.config.release_name}: {e}") from e
        console.success("NeMo Guardrails with NIM LLM deployment completed")

    def run(self) -> ResolutionResult:
        """Run every step in order.

        Returns:
            The resolution result. Installation only happens when the
            status is FOUND and installing is not skipped.

        """
        self.check()
        self.prepare_namespace()
        self.register_repositories()
        result = self.resolve()

        if result.status == ResolutionStatus.FOUND and result.chosen_chart is not None:
            if self.config.skip_install:
                console.info("Skipping installation")
            else:
                self.install(result.chosen_chart)
                print_next_steps(self.config)
        return result

    def _require_cluster(self) -> Cluster:
        if self.cluster is None:
            self.cluster = self.check()
        return self.cluster

    def _register_for_install(self, repository_name: str) -> None:
        """Register the chosen chart's repository with helm (index mode only)."""
        for repository in self.repositories:
            if repository.name == repository_name:
                HelmRepository(
                    repository.name,
                    repository.url,
                    helm=self.helm,
                    username=repository.username,
                    password=repository.password,
                ).register()
                return


def _report_resolution(result: ResolutionResult, config: DeployConfig) -> None:
    if result.failed_repositories:
        console.warning(f"Unavailable repositories: {', '.join(result.failed_repositories)}")

    match result.status:
        case ResolutionStatus.FOUND:
            console.chart_table("Matching charts", result.candidates)
            chosen = result.chosen_chart
            if chosen is not None:
                console.success(f"Will install using {console.highlight(chosen.reference)} {chosen.version}")
        case ResolutionStatus.FOUND_ALTERNATE:
            console.error(f"{config.chart_pattern} not found in any repository")
            console.chart_table("Individual components", result.candidates)
            console.warning("Components must be deployed separately; no single chart to install")
        case ResolutionStatus.NOT_FOUND:
            console.error("No suitable NeMo charts found")
            if result.candidates:
                console.chart_table("Available charts", result.candidates)


def print_next_steps(config: DeployConfig) -> None:
    """Print status and access commands for the deployed release."""
    namespace = config.namespace
    console.newline()
    console.summary_panel(
        "Deployment",
        {
            "Release": config.release_name,
            "Namespace": namespace,
            "Status": f"kubectl get pods -n {namespace}",
            "Services": f"kubectl get services -n {namespace}",
            "Guardrails": f"kubectl port-forward -n {namespace} svc/{config.release_name} "
            f"{_GUARDRAILS_PORT}:{_GUARDRAILS_PORT}",
            "NIM LLM": f"kubectl port-forward -n {namespace} svc/{config.release_name}-nim {_NIM_PORT}:{_NIM_PORT}",
            "Docs": _DOCS_URL,
        },
    )
    if config.create_secrets:
        console.info(
            f"Secrets {console.highlight(PULL_SECRET_NAME)} and {console.highlight(API_KEY_SECRET_NAME)} "
            f"were created in {namespace}; run again with -k to rotate the key"
        )
    else:
        console.info("Using existing NGC CLI configuration; pass -k to create Kubernetes secrets instead")
