"""
Tests for the fcdeploy command line.
"""

import json
import textwrap

import pytest
from click.testing import CliRunner

from fcdeploy.cli.main import cli

SERVERLESS_YML = textwrap.dedent(
    """\
    service: my-service
    provider:
      name: aliyun
      runtime: nodejs6
      region: cn-hangzhou
    package:
      artifact: my-service.zip
    functions:
      currentTime:
        handler: index.ping
        events:
          - http:
              path: /ping
              method: get
    """
)


@pytest.fixture
def service_dir(tmp_path, monkeypatch):
    for name in ("ALIYUN_REGION", "ALIYUN_ACCOUNT_ID", "ALIYUN_CREDENTIALS", "FCDEPLOY_STAGE"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / "serverless.yml").write_text(SERVERLESS_YML)
    return tmp_path


class TestValidateCommand:
    """Tests for `fcdeploy validate`."""

    def test_valid(self, service_dir):
        """A well-formed service is reported valid."""
        result = CliRunner().invoke(cli, ["validate", str(service_dir)])

        assert result.exit_code == 0
        assert "✓ Service 'my-service' is valid" in result.output

    def test_invalid(self, service_dir):
        """An unsupported runtime fails validation with exit code 1."""
        (service_dir / "serverless.yml").write_text(
            SERVERLESS_YML.replace("runtime: nodejs6", "runtime: python3")
        )

        result = CliRunner().invoke(cli, ["validate", str(service_dir)])

        assert result.exit_code == 1

    def test_malformed_provider(self, service_dir):
        """A scalar provider section is reported as a validation failure."""
        (service_dir / "serverless.yml").write_text(
            "service: my-service\nprovider: aliyun\n"
        )

        result = CliRunner().invoke(cli, ["validate", str(service_dir)])

        assert result.exit_code == 1
        assert "✗ Validation failed" in result.output


class TestPackageCommand:
    """Tests for `fcdeploy package`."""

    def test_writes_template(self, service_dir):
        """The template lands in .serverless and lists every resource."""
        result = CliRunner().invoke(cli, ["package", str(service_dir)])

        assert result.exit_code == 0
        assert 'Compiling function "currentTime"...' in result.output
        assert "✓ Service 'my-service-dev' compiled" in result.output

        template = json.loads(
            (service_dir / ".serverless" / "configuration-template.json").read_text()
        )
        assert list(template["resources"]) == [
            "sls-function-service",
            "sls-storage-bucket",
            "sls-storage-object",
            "sls-currentTime-function",
            "sls-api-group",
            "sls-fc-invoke-role",
            "sls-http-my-service-dev-currentTime",
        ]

    def test_stage_option(self, service_dir, tmp_path):
        """--stage names the service and --output picks the template file."""
        output = tmp_path / "out" / "template.json"

        result = CliRunner().invoke(
            cli, ["package", str(service_dir), "--stage", "prod", "--output", str(output)]
        )

        assert result.exit_code == 0
        template = json.loads(output.read_text())
        assert template["resources"]["sls-function-service"]["name"] == "my-service-prod"


class TestDeployCommand:
    """Tests for `fcdeploy deploy`."""

    def test_deploy_twice(self, service_dir):
        """The second deploy finds everything the first one created."""
        runner = CliRunner()

        first = runner.invoke(cli, ["deploy", str(service_dir)])
        second = runner.invoke(cli, ["deploy", str(service_dir)])

        assert first.exit_code == 0
        assert "Created service my-service-dev" in first.output
        assert "✓ Service 'my-service-dev' deployed" in first.output

        assert second.exit_code == 0
        assert "Service my-service-dev already exists." in second.output
        assert "Updated API sls-http-my-service-dev-currentTime" in second.output
        assert "Creating" not in second.output
        assert (service_dir / ".serverless" / "local-state.json").is_file()

    def test_deploy_from_template(self, service_dir):
        """A packaged template can be deployed without recompiling."""
        runner = CliRunner()
        runner.invoke(cli, ["package", str(service_dir)])
        template = service_dir / ".serverless" / "configuration-template.json"

        result = runner.invoke(cli, ["deploy", str(service_dir), "--template", str(template)])

        assert result.exit_code == 0
        assert "Deployed API sls-http-my-service-dev-currentTime" in result.output

    def test_invalid_concurrency(self, service_dir):
        """A concurrency below one is rejected before deploying."""
        result = CliRunner().invoke(cli, ["deploy", str(service_dir), "--concurrency", "0"])

        assert result.exit_code == 1
