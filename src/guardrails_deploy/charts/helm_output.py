"""Conversion of repository listings into ChartEntry values."""

from collections.abc import Iterable
from typing import Any

from icecream import ic

from guardrails_deploy.models import ChartEntry


def entries_from_search(repository: str, records: Iterable[Any]) -> list[ChartEntry]:
    """Convert ``helm search repo -o json`` records for one repository.

    Records belonging to other repositories (helm matches the search term as
    a substring) and records without a name or version are dropped.

    Args:
        repository: Repository alias that was searched.
        records: Decoded JSON records with ``name`` in ``repo/chart`` form.

    Returns:
        Entries in listing order.

    """
    prefix = f"{repository}/"
    entries: list[ChartEntry] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        full_name = str(record.get("name") or "")
        version = str(record.get("version") or "")
        if not full_name.startswith(prefix) or not version:
            ic(record)
            continue
        entries.append(ChartEntry(repository=repository, name=full_name[len(prefix) :], version=version))
    return entries


def entries_from_index(repository: str, index: dict[str, Any]) -> list[ChartEntry]:
    """Convert a parsed Helm repository ``index.yaml``.

    Args:
        repository: Repository alias the index belongs to.
        index: Parsed index document with an ``entries`` mapping of chart
            name to a list of chart version records.

    Returns:
        Entries ordered by chart name, versions in listing order.

    """
    charts = index.get("entries") or {}
    if not isinstance(charts, dict):
        return []

    entries: list[ChartEntry] = []
    for name in sorted(charts):
        versions = charts[name]
        if not isinstance(versions, list):
            continue
        for record in versions:
            if isinstance(record, dict) and record.get("version"):
                entries.append(ChartEntry(repository=repository, name=str(name), version=str(record["version"])))
    return entries
