"""Secrets management subpackage.

This package contains modules for idempotent secret provisioning
and user interaction prompts.
"""

from guardrails_deploy.secrets.prompts import prompt_api_key, validate_k8s_label, validate_k8s_name
from guardrails_deploy.secrets.provisioning import (
    api_key_secret_spec,
    build_secret_body,
    ngc_secret_specs,
    provision_namespace,
    provision_ngc_secrets,
    provision_secret,
    registry_secret_spec,
)

__all__ = [
    # prompts
    "prompt_api_key",
    "validate_k8s_label",
    "validate_k8s_name",
    # provisioning
    "api_key_secret_spec",
    "build_secret_body",
    "ngc_secret_specs",
    "provision_namespace",
    "provision_ngc_secrets",
    "provision_secret",
    "registry_secret_spec",
]
