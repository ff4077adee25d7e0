"""
fcdeploy CLI - package and deploy serverless services to Aliyun Function
Compute.
"""

import sys
from pathlib import Path

import click

from fcdeploy import __version__
from fcdeploy.cli.deploy import STATE_FILE_NAME, DeploymentCLI
from fcdeploy.config.provider import DeployOptions
from fcdeploy.errors import DeploymentError, FcDeployError


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    fcdeploy - compile serverless.yml services into Aliyun resources and
    deploy them idempotently.
    """
    pass


@cli.command()
@click.argument("service_dir", type=click.Path(exists=True), default=".")
@click.option("--stage", "-s", help="Stage to validate for")
@click.option("--region", "-r", help="Region to validate for")
def validate(service_dir: str, stage: str, region: str):
    """
    Validate a service without compiling it.

    Example:
        fcdeploy validate ./my-service
    """
    try:
        definition = DeploymentCLI(verbose=False).load(service_dir, stage=stage, region=region)
    except FcDeployError as e:
        click.echo(f"✗ Validation failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Service '{definition.service}' is valid")


@cli.command()
@click.argument("service_dir", type=click.Path(exists=True), default=".")
@click.option("--stage", "-s", help="Stage to package for")
@click.option("--region", "-r", help="Region to package for")
@click.option(
    "--output",
    "-o",
    help="Template file or directory (default: <service>/.serverless)",
)
def package(service_dir: str, stage: str, region: str, output: str):
    """
    Compile a service into a JSON resource template.

    Example:
        fcdeploy package ./my-service --stage prod
    """
    runner = DeploymentCLI()
    try:
        definition = runner.load(service_dir, stage=stage, region=region)
        graph = runner.compile_service(definition)
        path = runner.write_template(
            graph, output or Path(definition.service_path) / ".serverless"
        )
    except FcDeployError as e:
        click.echo(f"✗ Packaging failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n✓ Service '{definition.service_name}' compiled")
    click.echo(f"  Template: {path}")
    click.echo(f"  Resources: {len(graph)} total")
    for kind, count in graph.summary().items():
        click.echo(f"    - {kind}: {count}")


@cli.command()
@click.argument("service_dir", type=click.Path(exists=True), default=".")
@click.option("--stage", "-s", help="Stage to deploy")
@click.option("--region", "-r", help="Region to deploy to")
@click.option(
    "--template",
    "-t",
    type=click.Path(exists=True),
    help="Deploy a template written by 'fcdeploy package' instead of recompiling",
)
@click.option(
    "--state",
    help="Local provider state file (default: <service>/.serverless/local-state.json)",
)
@click.option("--concurrency", default=4, show_default=True, help="Concurrent artifact uploads")
def deploy(service_dir: str, stage: str, region: str, template: str, state: str, concurrency: int):
    """
    Deploy a service.

    Remote state is emulated by the local provider and kept in a state
    file, so deploying twice only updates what already exists.

    Example:
        fcdeploy deploy ./my-service
        fcdeploy deploy ./my-service --template .serverless/configuration-template.json
    """
    runner = DeploymentCLI()
    try:
        definition = runner.load(service_dir, stage=stage, region=region)
        graph = runner.read_template(template) if template else runner.compile_service(definition)
        provider = runner.local_provider(
            definition, state or Path(definition.service_path) / ".serverless" / STATE_FILE_NAME
        )
        options = DeployOptions(upload_concurrency=concurrency)
    except (FcDeployError, ValueError) as e:
        click.echo(f"✗ Deployment failed: {e}", err=True)
        sys.exit(1)

    try:
        runner.deploy(graph, provider, options=options)
    except DeploymentError as e:
        click.echo(f"✗ Deployment failed during {e.step}: {e}", err=True)
        sys.exit(1)
    finally:
        provider.save()

    click.echo(f"✓ Service '{definition.service_name}' deployed")


if __name__ == "__main__":
    cli()
