"""Chart resolution across several repositories.

Repositories are queried concurrently, their listings merged in repository
order and deduplicated, and the result classified as found, found as an
alternate component bundle, or not found. Resolution never raises for a
repository failure; an unreachable repository contributes no entries.
"""

import re
import threading
from collections.abc import Collection, Sequence
from concurrent.futures import Future, wait
from typing import Any

from icecream import ic

from guardrails_deploy import console
from guardrails_deploy.charts.repositories import RepositoryRef
from guardrails_deploy.exceptions import DeployError
from guardrails_deploy.models import ChartEntry, ResolutionResult, ResolutionStatus

# Semantic version pattern, lenient about the 'v' prefix and short forms like '0.9'
_VERSION_PATTERN = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$")


def _prerelease_key(prerelease: str | None) -> tuple[Any, ...]:
    """Order pre-release identifiers; a release sorts after all its pre-releases."""
    if prerelease is None:
        return (1,)
    identifiers = tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in prerelease.split("."))
    return (0, identifiers)


def version_key(version: str) -> tuple[Any, ...]:
    """Sort key for chart versions.

    Semantic versions (a leading ``v`` and missing minor/patch parts are
    accepted) order numerically and rank above unparseable ones, which
    order as plain strings. Build metadata is ignored.
    """
    match = _VERSION_PATTERN.match(version)
    if match is None:
        return (0, version)
    major, minor, patch, prerelease = match.groups()
    return (1, (int(major), int(minor or 0), int(patch or 0)), _prerelease_key(prerelease))


def _start_query(repository: RepositoryRef, timeout: float | None) -> Future:
    """Run one repository query on a daemon thread.

    Daemon threads are not joined at interpreter exit, so a query that hangs
    past its timeout cannot keep the process alive.
    """
    future: Future = Future()
    future.set_running_or_notify_cancel()

    def run() -> None:
        try:
            entries = repository.query(timeout=timeout)
        except Exception as e:  # noqa: BLE001
            future.set_exception(e)
        else:
            future.set_result(entries)

    threading.Thread(target=run, name=f"chart-query-{repository.name}", daemon=True).start()
    return future


def query_repositories(
    repositories: Sequence[RepositoryRef],
    *,
    timeout: float | None = None,
) -> tuple[list[list[ChartEntry]], list[str]]:
    """Query every repository concurrently and wait for all of them.

    All queries start together and share one deadline, so a repository
    counts as timed out based on its own duration, not its position.

    Args:
        repositories: Repositories in priority order.
        timeout: Per-repository timeout in seconds, None for no limit.

    Returns:
        Entries per repository (aligned with the input) and the names of
        repositories whose query failed or timed out.

    """
    results: list[list[ChartEntry]] = []
    failed: list[str] = []
    if not repositories:
        return results, failed

    futures = [_start_query(repository, timeout) for repository in repositories]
    _, not_done = wait(futures, timeout=timeout)

    for repository, future in zip(repositories, futures):
        entries = None
        if future in not_done:
            console.warning(f"Query of {console.highlight(repository.name)} timed out; ignoring repository")
        elif isinstance(future.exception(), DeployError):
            console.warning(f"{future.exception()}; ignoring repository")
        elif future.exception() is not None:
            console.warning(
                f"Query of {console.highlight(repository.name)} failed: {future.exception()!r}; ignoring repository"
            )
        else:
            entries = future.result()

        if entries is None:
            failed.append(repository.name)
            results.append([])
        else:
            ic(repository.name, len(entries))
            results.append(entries)

    return results, failed


def merge_entries(repository_order: Sequence[str], results: Sequence[Sequence[ChartEntry]]) -> list[ChartEntry]:
    """Union per-repository listings, keeping the newest version per (repository, name).

    On equal versions the entry seen first (earliest repository) is kept.

    Returns:
        Deduplicated entries ordered by repository priority, then chart name.

    """
    best: dict[tuple[str, str], ChartEntry] = {}
    for entries in results:
        for entry in entries:
            key = (entry.repository, entry.name)
            current = best.get(key)
            if current is None or version_key(entry.version) > version_key(current.version):
                best[key] = entry

    rank = _repository_rank(repository_order)
    return sorted(best.values(), key=lambda e: (rank.get(e.repository, len(rank)), e.name))


def _repository_rank(repository_order: Sequence[str]) -> dict[str, int]:
    rank: dict[str, int] = {}
    for name in repository_order:
        rank.setdefault(name, len(rank))
    return rank


def select_primary(entries: Sequence[ChartEntry], pattern: str, repository_order: Sequence[str]) -> ChartEntry | None:
    """Pick the chart to install among entries whose name contains ``pattern``.

    An exact name match is preferred over a substring match; otherwise the
    lexicographically first matching name is used. Among entries with that
    name the highest version wins, then the earliest repository.
    """
    matches = [entry for entry in entries if pattern in entry.name]
    if not matches:
        return None

    exact = [entry for entry in matches if entry.name == pattern]
    if exact:
        pool = exact
    else:
        first_name = min(entry.name for entry in matches)
        pool = [entry for entry in matches if entry.name == first_name]

    rank = _repository_rank(repository_order)
    return max(pool, key=lambda e: (version_key(e.version), -rank.get(e.repository, len(rank))))


def resolve_chart(
    repositories: Sequence[RepositoryRef],
    expected_name_pattern: str,
    required_component_names: Collection[str],
    *,
    timeout: float | None = None,
) -> ResolutionResult:
    """Decide which chart to install.

    Args:
        repositories: Repositories in priority order.
        expected_name_pattern: Substring identifying the primary chart.
        required_component_names: Charts that together form an acceptable alternate.
        timeout: Per-repository query timeout in seconds.

    Returns:
        FOUND with the chosen chart; FOUND_ALTERNATE with the component
        entries when only the components exist; NOT_FOUND with every
        collected entry otherwise.

    """
    results, failed = query_repositories(repositories, timeout=timeout)
    order = [repository.name for repository in repositories]
    entries = merge_entries(order, results)
    ic(len(entries), failed)

    chosen = select_primary(entries, expected_name_pattern, order)
    if chosen is not None:
        candidates = tuple(entry for entry in entries if expected_name_pattern in entry.name)
        return ResolutionResult(
            status=ResolutionStatus.FOUND,
            chosen_chart=chosen,
            candidates=candidates,
            failed_repositories=tuple(failed),
        )

    names = {entry.name for entry in entries}
    if required_component_names and set(required_component_names) <= names:
        candidates = tuple(entry for entry in entries if entry.name in required_component_names)
        return ResolutionResult(
            status=ResolutionStatus.FOUND_ALTERNATE,
            candidates=candidates,
            failed_repositories=tuple(failed),
        )

    return ResolutionResult(
        status=ResolutionStatus.NOT_FOUND,
        candidates=tuple(entries),
        failed_repositories=tuple(failed),
    )
