"""Tests for cli.py module."""

from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from guardrails_deploy import __version__
from guardrails_deploy.cli import cli
from guardrails_deploy.exceptions import ClusterUnreachableError, ProvisioningError
from guardrails_deploy.models import ChartEntry, ResolutionResult, ResolutionStatus

FOUND = ResolutionResult(
    status=ResolutionStatus.FOUND,
    chosen_chart=ChartEntry("nvidia", "nemo-microservices-helm-chart", "1.2.0"),
)


class TestCliVersion:
    """Tests for version command."""

    def test_version_flag(self):
        """Test --version flag prints version."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_short_flag(self):
        """Test -v flag prints version."""
        result = CliRunner().invoke(cli, ["-v"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestCliHelp:
    """Tests for help output."""

    def test_help_flag(self):
        """Test --help flag shows help text."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Deploy the NeMo Guardrails microservice" in result.output
        for option in ("--ngc-api-key", "--namespace", "--values", "--repo-timeout", "--skip-install", "--index"):
            assert option in result.output

    def test_short_help_flag(self):
        """Test -h works like --help."""
        result = CliRunner().invoke(cli, ["-h"])

        assert result.exit_code == 0


class TestCliConfiguration:
    """Tests for option handling."""

    def test_options_build_config(self):
        """Test that options are passed to the deployer as configuration."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(
                cli,
                ["-k", "key", "-n", "guard", "--release", "rel", "--timeout", "20m", "--repo-timeout", "5", "--skip-install"],
            )

        assert result.exit_code == 0
        config = mock_deployer.call_args[0][0]
        assert config.api_key == "key"
        assert config.namespace == "guard"
        assert config.release_name == "rel"
        assert config.install_timeout == "20m"
        assert config.repo_timeout == 5.0
        assert config.skip_install is True
        assert config.create_secrets is True

    def test_api_key_from_environment(self):
        """Test that NGC_API_KEY is read from the environment."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, [], env={"NGC_API_KEY": "from-env"})

        assert result.exit_code == 0
        assert mock_deployer.call_args[0][0].api_key == "from-env"

    def test_no_api_key(self):
        """Test that no key means no secret creation."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, [], env={"NGC_API_KEY": ""})

        assert result.exit_code == 0
        assert mock_deployer.call_args[0][0].create_secrets is False

    def test_ask_key_prompts(self):
        """Test that --ask-key prompts for the key."""
        with (
            patch("guardrails_deploy.cli.Deployer") as mock_deployer,
            patch("guardrails_deploy.cli.prompt_api_key", return_value="typed") as mock_prompt,
        ):
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, ["--ask-key"], env={"NGC_API_KEY": ""})

        assert result.exit_code == 0
        mock_prompt.assert_called_once()
        assert mock_deployer.call_args[0][0].api_key == "typed"

    def test_invalid_namespace(self):
        """Test that an invalid namespace is rejected by option parsing."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            result = CliRunner().invoke(cli, ["-n", "Bad_Namespace"])

        assert result.exit_code == 2
        mock_deployer.assert_not_called()

    def test_values_file_defaults_to_guardrails_values(self):
        """Test that the guardrails values file is used when -f is not given."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, ["-k", "key"])

        assert result.exit_code == 0
        assert mock_deployer.call_args[0][0].values_file == Path("guardrails-values.yaml")

    def test_values_file_option(self):
        """Test that -f overrides the default values file."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, ["-k", "key", "-f", "custom.yaml"])

        assert result.exit_code == 0
        assert mock_deployer.call_args[0][0].values_file == Path("custom.yaml")

    def test_namespace_with_dot_rejected(self):
        """Test that a namespace must be a DNS label."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            result = CliRunner().invoke(cli, ["-n", "a.b"])

        assert result.exit_code == 2
        mock_deployer.assert_not_called()

    def test_release_name_too_long(self):
        """Test that release names are limited to 53 characters."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            result = CliRunner().invoke(cli, ["--release", "r" * 54])

        assert result.exit_code == 2
        assert "53" in result.output
        mock_deployer.assert_not_called()

    def test_non_positive_repo_timeout(self):
        """Test that a zero repository timeout is rejected."""
        result = CliRunner().invoke(cli, ["--repo-timeout", "0"])

        assert result.exit_code == 2

    def test_debug_flag_keeps_icecream(self):
        """Test --debug flag keeps icecream enabled."""
        with (
            patch("guardrails_deploy.cli.Deployer") as mock_deployer,
            patch("guardrails_deploy.cli.ic") as mock_ic,
        ):
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, ["--debug"])

        assert result.exit_code == 0
        mock_ic.disable.assert_not_called()


class TestCliExitCodes:
    """Tests for outcome to exit code mapping."""

    def test_found_exits_zero(self):
        """Test success."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = FOUND

            result = CliRunner().invoke(cli, ["-k", "key"])

        assert result.exit_code == 0

    def test_not_found_exits_one(self):
        """Test that a missing chart fails the run."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = ResolutionResult(status=ResolutionStatus.NOT_FOUND)

            result = CliRunner().invoke(cli, ["-k", "key"])

        assert result.exit_code == 1
        assert "Cannot proceed with installation" in result.output

    def test_alternate_exits_one(self):
        """Test that component-only availability fails the run."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.return_value = ResolutionResult(status=ResolutionStatus.FOUND_ALTERNATE)

            result = CliRunner().invoke(cli, ["-k", "key"])

        assert result.exit_code == 1

    def test_cluster_error_exits_one(self):
        """Test that a precondition failure is reported."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.side_effect = ClusterUnreachableError("connection refused")

            result = CliRunner().invoke(cli, ["-k", "key"])

        assert result.exit_code == 1
        assert "connection refused" in result.output

    def test_provisioning_error_exits_one(self):
        """Test that a provisioning failure is reported."""
        with patch("guardrails_deploy.cli.Deployer") as mock_deployer:
            mock_deployer.return_value.run.side_effect = ProvisioningError("403 Forbidden", namespace="ns", name="s")

            result = CliRunner().invoke(cli, ["-k", "key"])

        assert result.exit_code == 1
        assert "403 Forbidden" in result.output
