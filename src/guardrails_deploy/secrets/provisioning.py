"""Idempotent secret provisioning.

Secrets are replaced rather than patched: any existing object with the same
name is deleted (absence is fine) and the new one is created from a fully
built body. Re-running with the same or updated input converges to the same
state. A failure between the delete and the create leaves the secret absent;
the whole provisioning step is then simply run again.
"""

import base64
import json

from icecream import ic
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from guardrails_deploy import console
from guardrails_deploy.config import (
    API_KEY_FIELD,
    API_KEY_SECRET_NAME,
    NGC_EMAIL,
    NGC_REGISTRY_SERVER,
    NGC_USERNAME,
    PULL_SECRET_NAME,
    DeployConfig,
)
from guardrails_deploy.core.cluster import Cluster
from guardrails_deploy.exceptions import ProvisioningError
from guardrails_deploy.models import SecretKind, SecretSpec
from guardrails_deploy.secrets.prompts import validate_k8s_label, validate_k8s_name

_REGISTRY_FIELDS = ("server", "username", "password")
_DOCKER_CONFIG_KEY = ".dockerconfigjson"
_DOCKER_CONFIG_TYPE = "kubernetes.io/dockerconfigjson"
_OPAQUE_TYPE = "Opaque"


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def _api_reason(err: ApiException) -> str:
    """Extract the API server's message from an ApiException."""
    try:
        message = json.loads(err.body or "{}").get("message")
    except (ValueError, AttributeError):
        message = None
    return f"{err.status} {message or err.reason}"


def validate_secret_spec(spec: SecretSpec, namespace: str) -> None:
    """Check that a spec can be turned into a valid secret.

    Raises:
        ProvisioningError: If the name, namespace or fields are invalid for the kind.

    """
    checks = (("secret name", spec.name, validate_k8s_name), ("namespace", namespace, validate_k8s_label))
    for label, value, validate in checks:
        result = validate(value)
        if result is not True:
            raise ProvisioningError(f"invalid {label} {value!r}: {result}", namespace=namespace, name=spec.name)

    match spec.kind:
        case SecretKind.REGISTRY:
            missing = [key for key in _REGISTRY_FIELDS if not spec.fields.get(key)]
            if missing:
                raise ProvisioningError(
                    f"registry secret requires {', '.join(missing)}", namespace=namespace, name=spec.name
                )
        case SecretKind.GENERIC:
            if not spec.fields:
                raise ProvisioningError("generic secret requires at least one field", namespace=namespace, name=spec.name)


def build_secret_body(spec: SecretSpec, namespace: str) -> client.V1Secret:
    """Build the complete V1Secret for a spec.

    Registry secrets are rendered the way ``kubectl create secret
    docker-registry`` renders them: a ``.dockerconfigjson`` entry holding
    the credentials and their combined ``auth`` token.
    """
    metadata = client.V1ObjectMeta(name=spec.name, namespace=namespace)

    if spec.kind == SecretKind.REGISTRY:
        username = spec.fields["username"]
        password = spec.fields["password"]
        auth: dict[str, str] = {
            "username": username,
            "password": password,
            "auth": _b64(f"{username}:{password}"),
        }
        if spec.fields.get("email"):
            auth["email"] = spec.fields["email"]
        docker_config = json.dumps({"auths": {spec.fields["server"]: auth}})
        return client.V1Secret(
            metadata=metadata,
            type=_DOCKER_CONFIG_TYPE,
            data={_DOCKER_CONFIG_KEY: _b64(docker_config)},
        )

    return client.V1Secret(
        metadata=metadata,
        type=_OPAQUE_TYPE,
        data={key: _b64(value) for key, value in spec.fields.items()},
    )


def provision_secret(cluster: Cluster, spec: SecretSpec, namespace: str | None = None) -> None:
    """Create or replace a secret.

    Args:
        cluster: Connected cluster.
        spec: Desired secret.
        namespace: Target namespace; defaults to the spec's namespace.

    Raises:
        ProvisioningError: If the spec is invalid or the cluster rejects the change.

    """
    namespace = namespace or spec.namespace
    validate_secret_spec(spec, namespace)
    body = build_secret_body(spec, namespace)
    ic(spec)

    try:
        if cluster.delete_secret(spec.name, namespace):
            console.step(f"Removed existing secret {console.highlight(spec.name)}")
        cluster.create_secret(namespace, body)
    except ApiException as e:
        raise ProvisioningError(_api_reason(e), namespace=namespace, name=spec.name) from e
    except MaxRetryError as e:
        raise ProvisioningError(f"cluster unreachable: {e.reason}", namespace=namespace, name=spec.name) from e

    console.success(f"Secret {console.highlight(spec.name)} ({spec.kind.value}) provisioned in {namespace}")


def provision_namespace(cluster: Cluster, namespace: str) -> None:
    """Create the target namespace if it does not exist.

    Raises:
        ProvisioningError: If the namespace name is invalid or creation is rejected.

    """
    result = validate_k8s_label(namespace)
    if result is not True:
        raise ProvisioningError(f"invalid namespace {namespace!r}: {result}", name=namespace)

    console.action(f"Creating namespace: {console.highlight(namespace)}")
    try:
        created = cluster.ensure_namespace(namespace)
    except ApiException as e:
        raise ProvisioningError(_api_reason(e), name=namespace) from e
    except MaxRetryError as e:
        raise ProvisioningError(f"cluster unreachable: {e.reason}", name=namespace) from e

    if created:
        console.success(f"Namespace {console.highlight(namespace)} created")
    else:
        console.step(f"Namespace {console.highlight(namespace)} already exists")


def registry_secret_spec(
    name: str,
    namespace: str,
    *,
    server: str,
    username: str,
    password: str,
    email: str | None = None,
) -> SecretSpec:
    """Describe an image pull secret."""
    fields = {"server": server, "username": username, "password": password}
    if email:
        fields["email"] = email
    return SecretSpec(name=name, namespace=namespace, kind=SecretKind.REGISTRY, fields=fields)


def api_key_secret_spec(name: str, namespace: str, *, key_field: str, api_key: str) -> SecretSpec:
    """Describe a generic secret holding a single API key."""
    return SecretSpec(name=name, namespace=namespace, kind=SecretKind.GENERIC, fields={key_field: api_key})


def ngc_secret_specs(config: DeployConfig) -> list[SecretSpec]:
    """Describe the NGC pull secret and API key secret for a run.

    Raises:
        ValueError: If the configuration carries no API key.

    """
    if not config.api_key:
        raise ValueError("An NGC API key is required to build NGC secrets")
    return [
        registry_secret_spec(
            PULL_SECRET_NAME,
            config.namespace,
            server=NGC_REGISTRY_SERVER,
            username=NGC_USERNAME,
            password=config.api_key,
            email=NGC_EMAIL,
        ),
        api_key_secret_spec(
            API_KEY_SECRET_NAME,
            config.namespace,
            key_field=API_KEY_FIELD,
            api_key=config.api_key,
        ),
    ]


def provision_ngc_secrets(cluster: Cluster, config: DeployConfig) -> list[SecretSpec]:
    """Provision the NGC registry and API key secrets.

    Returns:
        The provisioned specs, in creation order.

    """
    console.action("Creating NGC secrets")
    specs = ngc_secret_specs(config)
    for spec in specs:
        provision_secret(cluster, spec)
    return specs
