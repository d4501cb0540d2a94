"""Interactive user prompts and input validation.

This module provides the API key prompt and the Kubernetes name validator
shared by the CLI and the secret provisioner.
"""

import re

import click
import questionary

from guardrails_deploy import console
from guardrails_deploy.styles import PROMPT_STYLE, QMARK

# Kubernetes DNS subdomain name validation (RFC 1123)
_DNS_SUBDOMAIN_MAX_LENGTH = 253
_DNS_SUBDOMAIN_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$"

# Namespaces and release names are DNS labels (RFC 1123), no dots allowed
_DNS_LABEL_MAX_LENGTH = 63
_DNS_LABEL_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"
HELM_RELEASE_MAX_LENGTH = 53


def validate_k8s_name(name: str) -> bool | str:
    """Validate a Kubernetes resource name (DNS subdomain).

    Args:
        name: The name to validate.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not name:
        return "Name cannot be empty"
    if len(name) > _DNS_SUBDOMAIN_MAX_LENGTH:
        return f"Name must be {_DNS_SUBDOMAIN_MAX_LENGTH} characters or less"
    if not re.match(_DNS_SUBDOMAIN_PATTERN, name):
        return "Name must consist of lowercase alphanumeric characters, '-' or '.', and must start and end with an alphanumeric character"
    return True


def validate_k8s_label(name: str, max_length: int = _DNS_LABEL_MAX_LENGTH) -> bool | str:
    """Validate a DNS label name such as a namespace or Helm release.

    Args:
        name: The name to validate.
        max_length: Upper bound; Helm release names allow fewer characters than namespaces.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not name:
        return "Name cannot be empty"
    if len(name) > max_length:
        return f"Name must be {max_length} characters or less"
    if not re.match(_DNS_LABEL_PATTERN, name):
        return "Name must consist of lowercase alphanumeric characters or '-', and must start and end with an alphanumeric character"
    return True


def _validate_api_key(value: str) -> bool | str:
    return True if value.strip() else "API key cannot be empty"


def prompt_api_key() -> str:
    """Ask the user for an NGC API key without echoing it.

    Returns:
        The entered key with surrounding whitespace removed.

    Raises:
        click.Abort: If the user cancels the prompt.

    """
    api_key: str | None = questionary.password(
        "Enter your NGC API key",
        validate=_validate_api_key,
        style=PROMPT_STYLE,
        qmark=QMARK,
    ).ask()
    if api_key is None:
        console.warning("API key entry cancelled.")
        raise click.Abort()
    return api_key.strip()
