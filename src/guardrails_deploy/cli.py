#!/usr/bin/env python
"""Command-line interface for guardrails-deploy.

This module provides the main CLI entry point for the guardrails-deploy tool,
handling command-line argument parsing and mapping the deployment outcome
to an exit code.
"""

import sys
from pathlib import Path

import click
from icecream import ic

from guardrails_deploy import __version__, console
from guardrails_deploy.config import (
    DEFAULT_INSTALL_TIMEOUT,
    DEFAULT_NAMESPACE,
    DEFAULT_RELEASE,
    DEFAULT_VALUES_FILE,
    DeployConfig,
)
from guardrails_deploy.deployer import Deployer
from guardrails_deploy.exceptions import DeployError
from guardrails_deploy.models import ResolutionStatus
from guardrails_deploy.secrets.prompts import HELM_RELEASE_MAX_LENGTH, prompt_api_key, validate_k8s_label


def _namespace(ctx: click.Context, param: click.Parameter, value: str) -> str:  # noqa: ARG001
    result = validate_k8s_label(value)
    if result is not True:
        raise click.BadParameter(str(result))
    return value


def _release_name(ctx: click.Context, param: click.Parameter, value: str) -> str:  # noqa: ARG001
    result = validate_k8s_label(value, max_length=HELM_RELEASE_MAX_LENGTH)
    if result is not True:
        raise click.BadParameter(str(result))
    return value


@click.command(
    help="Deploy the NeMo Guardrails microservice to a Kubernetes cluster using Helm",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--ngc-api-key", "-k", envvar="NGC_API_KEY", required=False, help="NGC API key for pulling images and charts")
@click.option("--ask-key", required=False, is_flag=True, help="prompt for the NGC API key")
@click.option(
    "--namespace",
    "-n",
    default=DEFAULT_NAMESPACE,
    show_default=True,
    callback=_namespace,
    help="Kubernetes namespace",
)
@click.option(
    "--values",
    "-f",
    "values_file",
    default=DEFAULT_VALUES_FILE,
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Helm values file enabling guardrails and the NIM",
)
@click.option("--release", default=DEFAULT_RELEASE, show_default=True, callback=_release_name, help="Helm release name")
@click.option("--timeout", default=DEFAULT_INSTALL_TIMEOUT, show_default=True, help="Helm install timeout")
@click.option(
    "--repo-timeout",
    type=click.FloatRange(min=0, min_open=True),
    required=False,
    help="per-repository query timeout in seconds",
)
@click.option("--index", "use_index", is_flag=True, help="query repository index.yaml over HTTP instead of helm")
@click.option("--context", required=False, help="kubeconfig context to use")
@click.option("--skip-install", is_flag=True, help="stop after finding the chart")
def cli(
    version: bool,
    debug: bool,
    ngc_api_key: str | None,
    ask_key: bool,
    namespace: str,
    values_file: Path,
    release: str,
    timeout: str,
    repo_timeout: float | None,
    use_index: bool,
    context: str | None,
    skip_install: bool,
) -> None:
    """Process CLI arguments and run the deployment.

    Exits with 1 on any deployment error and when no installable chart was
    found (including when only the individual components are available).

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    if ask_key and not ngc_api_key:
        ngc_api_key = prompt_api_key()

    config = DeployConfig(
        namespace=namespace,
        api_key=ngc_api_key or None,
        release_name=release,
        values_file=values_file,
        install_timeout=timeout,
        repo_timeout=repo_timeout,
        context=context,
        use_index=use_index,
        skip_install=skip_install,
    )
    ic(config)

    console.action("Deploying NeMo Guardrails")
    try:
        result = Deployer(config).run()
    except DeployError as e:
        console.error(str(e))
        sys.exit(1)

    if result.status != ResolutionStatus.FOUND:
        console.error("Cannot proceed with installation - required chart not available")
        sys.exit(1)


if __name__ == "__main__":
    cli()
