"""Helm command-line wrapper.

This module provides the Helm class which runs the helm binary for
repository registration, index queries and release installation.
Failures are reported as HelmCommandError with the command, exit code and
stderr so that callers can wrap them with their own context.
"""

import json
import subprocess
from pathlib import Path
from typing import Any

from icecream import ic

from guardrails_deploy.exceptions import MissingToolError

_OUTPUT_JSON = ("--output", "json")


class HelmCommandError(Exception):
    """Raised when a helm invocation fails or times out.

    Attributes:
        command: The helm arguments that were run.
        returncode: Exit code, or None if the command did not finish.
        stderr: Captured standard error.

    """

    def __init__(
        self, command: list[str], returncode: int | None, stderr: str = "", *, reason: str | None = None
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        if reason is not None:
            message = f"'{' '.join(command)}' {reason}"
        elif returncode is None:
            message = f"'{' '.join(command)}' timed out"
        else:
            message = f"'{' '.join(command)}' failed (exit code {returncode})"
        if self.stderr:
            message = f"{message} - {self.stderr}"
        super().__init__(message)


def _redact(cmd: list[str]) -> list[str]:
    """Mask the value following --username so debug output stays clean."""
    redacted = list(cmd)
    for i, arg in enumerate(redacted[:-1]):
        if arg == "--username":
            redacted[i + 1] = "***"
    return redacted


class Helm:
    """Runs helm subcommands.

    Attributes:
        binary: Name or path of the helm executable.

    """

    def __init__(self, binary: str = "helm") -> None:
        self.binary = binary

    def _run(self, args: list[str], *, input_data: str | None = None, timeout: float | None = None) -> str:
        """Run a helm subcommand and return its stdout.

        Args:
            args: Arguments following the helm binary.
            input_data: Optional text passed on stdin.
            timeout: Seconds before the command is killed, None for no limit.

        Raises:
            MissingToolError: If the helm binary cannot be executed.
            HelmCommandError: If the command cannot start, exits non-zero,
                times out or prints undecodable output.

        """
        cmd = [self.binary, *args]
        ic(_redact(cmd))
        try:
            result = subprocess.run(
                cmd,
                input=input_data,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=True,
            )
        except FileNotFoundError as err:
            raise MissingToolError(self.binary, "Please install Helm first.") from err
        except OSError as err:
            raise HelmCommandError(cmd, None, reason=f"could not be started ({err.strerror or err})") from err
        except UnicodeDecodeError as err:
            raise HelmCommandError(cmd, None, reason="produced output that is not valid UTF-8") from err
        except subprocess.TimeoutExpired as err:
            raise HelmCommandError(cmd, None) from err
        except subprocess.CalledProcessError as err:
            raise HelmCommandError(cmd, err.returncode, err.stderr or "") from err
        return result.stdout

    def add_repository(
        self,
        name: str,
        url: str,
        *,
        username: str | None = None,
        password: str | None = None,
    ) -> None:
        """Register a chart repository, overwriting an existing entry.

        The password is passed via stdin to avoid exposing it in process
        listings.
        """
        args = ["repo", "add", name, url, "--force-update"]
        input_data = None
        if username is not None and password is not None:
            args.extend(["--username", username, "--password-stdin"])
            input_data = password
        self._run(args, input_data=input_data)

    def update_repositories(self, names: list[str] | None = None) -> None:
        """Refresh the local index of the given repositories (all when None)."""
        self._run(["repo", "update", *(names or [])])

    def search_repository(self, name: str, *, timeout: float | None = None) -> list[dict[str, Any]]:
        """List every chart version in a registered repository.

        Args:
            name: Repository alias.
            timeout: Seconds before the query is abandoned.

        Returns:
            Decoded ``helm search repo`` records (``name``, ``version``, ...).

        Raises:
            HelmCommandError: If helm fails or prints something other than a JSON list.

        """
        args = ["search", "repo", f"{name}/", "--versions", *_OUTPUT_JSON]
        stdout = self._run(args, timeout=timeout)
        try:
            records = json.loads(stdout or "[]")
        except json.JSONDecodeError as err:
            raise HelmCommandError([self.binary, *args], 0, f"invalid JSON output: {err}") from err
        if not isinstance(records, list):
            raise HelmCommandError([self.binary, *args], 0, "expected a JSON list of charts")
        return records

    def upgrade_install(
        self,
        *,
        release_name: str,
        chart_ref: str,
        namespace: str,
        timeout: str,
        version: str | None = None,
        values_file: Path | None = None,
    ) -> None:
        """Install the release, or upgrade it if it already exists.

        Args:
            release_name: Helm release name.
            chart_ref: Chart reference in ``repo/chart`` form.
            namespace: Target namespace.
            timeout: Helm duration string (e.g. ``15m``).
            version: Chart version to pin, latest when None.
            values_file: Optional values file.

        """
        args = [
            "upgrade",
            "--install",
            release_name,
            chart_ref,
            "--namespace",
            namespace,
            "--timeout",
            timeout,
        ]
        if version:
            args.extend(["--version", version])
        if values_file is not None:
            args.extend(["--values", str(values_file)])
        self._run(args)
