"""Tests for core/prerequisites.py module."""

import subprocess
from unittest.mock import patch

import pytest

from guardrails_deploy.core.prerequisites import check_ngc_configuration, check_prerequisites, check_tools
from guardrails_deploy.exceptions import ClusterUnreachableError, CredentialsError, MissingToolError
from guardrails_deploy.models import ToolAvailability


def _which(*present):
    return lambda tool: f"/usr/bin/{tool}" if tool in present else None


class TestCheckTools:
    """Tests for tool lookup."""

    def test_reports_each_tool(self):
        """Test availability of present and missing tools."""
        with patch("shutil.which", side_effect=_which("helm")):
            result = check_tools(["helm", "kubectl"])

        assert result == [ToolAvailability("helm", True), ToolAvailability("kubectl", False)]


class TestCheckPrerequisites:
    """Tests for the full pre-flight check."""

    def test_missing_tool_stops_before_cluster(self):
        """Test that a missing tool fails before touching the cluster."""
        with (
            patch("shutil.which", side_effect=_which("kubectl")),
            patch("guardrails_deploy.core.prerequisites.Cluster") as mock_cluster,
        ):
            with pytest.raises(MissingToolError) as exc_info:
                check_prerequisites(["helm", "kubectl"])

        assert exc_info.value.tool == "helm"
        assert "Please install Helm first" in str(exc_info.value)
        mock_cluster.assert_not_called()

    def test_first_missing_tool_reported(self):
        """Test fail-fast on the first missing tool."""
        with patch("shutil.which", return_value=None):
            with pytest.raises(MissingToolError) as exc_info:
                check_prerequisites(["kubectl", "helm"])

        assert exc_info.value.tool == "kubectl"

    def test_success_returns_probed_cluster(self):
        """Test that a connected cluster is returned."""
        with (
            patch("shutil.which", side_effect=_which("helm", "kubectl")),
            patch("guardrails_deploy.core.prerequisites.Cluster") as mock_cluster,
        ):
            mock_cluster.return_value.probe.return_value = "v1.29.4"

            cluster = check_prerequisites(["helm", "kubectl"], context="prod")

        mock_cluster.assert_called_once_with(context="prod")
        cluster.probe.assert_called_once()

    def test_unreachable_cluster(self):
        """Test that probe failures propagate."""
        with (
            patch("shutil.which", side_effect=_which("helm", "kubectl")),
            patch("guardrails_deploy.core.prerequisites.Cluster") as mock_cluster,
        ):
            mock_cluster.return_value.probe.side_effect = ClusterUnreachableError("refused")

            with pytest.raises(ClusterUnreachableError):
                check_prerequisites(["helm", "kubectl"])


class TestCheckNgcConfiguration:
    """Tests for the NGC CLI fallback."""

    def test_ngc_missing(self):
        """Test error when the NGC CLI is not installed."""
        with patch("shutil.which", return_value=None):
            with pytest.raises(CredentialsError) as exc_info:
                check_ngc_configuration()

        assert "NGC CLI not found" in str(exc_info.value)

    def test_ngc_not_configured(self, mock_subprocess):
        """Test error when the NGC CLI has no configuration."""
        mock_subprocess.side_effect = subprocess.CalledProcessError(1, ["ngc", "config", "current"])

        with patch("shutil.which", return_value="/usr/bin/ngc"):
            with pytest.raises(CredentialsError) as exc_info:
                check_ngc_configuration()

        assert "not configured" in str(exc_info.value)

    def test_ngc_configured(self, mock_subprocess):
        """Test success with a configured NGC CLI."""
        with patch("shutil.which", return_value="/usr/bin/ngc"):
            check_ngc_configuration()

        assert mock_subprocess.call_args[0][0] == ["ngc", "config", "current"]
