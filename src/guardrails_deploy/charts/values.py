"""Helm values file parsing."""

from pathlib import Path
from typing import Any

import yaml

from guardrails_deploy.exceptions import ValuesFileError


def parse_values_file(values_path: Path) -> dict[str, Any]:
    """Parse and check a Helm values file.

    Args:
        values_path: Path to the values file.

    Returns:
        The parsed YAML mapping. An empty file yields an empty mapping.

    Raises:
        ValuesFileError: If the file does not exist, contains multiple
            documents, contains malformed YAML, or is not a YAML mapping.

    """
    try:
        with values_path.open() as stream:
            docs = [doc for doc in yaml.safe_load_all(stream) if doc is not None]
    except FileNotFoundError as err:
        raise ValuesFileError(f"Values file '{values_path}' does not exist") from err
    except yaml.YAMLError as err:
        raise ValuesFileError(f"Values file '{values_path}' contains malformed YAML: {err}") from err

    if len(docs) > 1:
        raise ValuesFileError(
            f"Values file '{values_path}' contains multiple YAML documents. Only single document files are supported."
        )
    if not docs:
        return {}
    if not isinstance(docs[0], dict):
        raise ValuesFileError(f"Values file '{values_path}' does not contain a YAML mapping")
    return docs[0]
